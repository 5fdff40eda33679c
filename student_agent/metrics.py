"""Scoring logic: average marks, predicted grade, risk tier and alerts."""

import math
from typing import List, Optional

from student_agent.models import Alert, InvalidInput, StudentData, Subject


ATTENDANCE_WEIGHT = 0.25
MARKS_WEIGHT = 0.45
STUDY_HOURS_WEIGHT = 4
DEADLINE_SLACK_WEIGHT = 1.5
DEADLINE_SLACK_CAP = 10

WEAK_SUBJECT_THRESHOLD = 70.0
MIN_ATTENDANCE = 75.0
MIN_STUDY_HOURS = 4.0
URGENT_DEADLINE_DAYS = 2
FAILURE_RISK_GRADE = 60


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def subject_percentage(subject: Subject) -> float:
    """Percentage score of a single subject (0-100)."""
    if subject.max_marks <= 0:
        raise InvalidInput(f"maxMarks must be positive for '{subject.name}'")
    return subject.marks / subject.max_marks * 100


def compute_average_marks(subjects: List[Subject]) -> int:
    """
    Mean of per-subject percentages, rounded.

    Args:
        subjects: Non-empty list of subjects

    Returns:
        Average percentage as an integer (0-100)
    """
    if not subjects:
        raise InvalidInput("Cannot compute average marks without subjects")
    total = 0.0
    for subject in subjects:
        total += subject_percentage(subject)
    return round_half_up(total / len(subjects))


def compute_predicted_grade(data: StudentData, average_marks: Optional[int] = None) -> int:
    """
    Weighted heuristic forecast of the final grade, capped at 100.

    predicted = 0.25*attendance + 0.45*average + 4*daily_hours
                + 1.5*max(0, 10 - deadlines)

    The sum is capped before rounding so huge inputs cannot overflow.
    No lower clamp is applied.
    """
    if average_marks is None:
        average_marks = compute_average_marks(data.subjects)

    deadline_slack = max(0, DEADLINE_SLACK_CAP - len(data.upcoming_deadlines))
    raw = (
        data.attendance * ATTENDANCE_WEIGHT
        + average_marks * MARKS_WEIGHT
        + data.daily_study_hours * STUDY_HOURS_WEIGHT
        + deadline_slack * DEADLINE_SLACK_WEIGHT
    )
    return round_half_up(min(100.0, raw))


def classify_risk(predicted_grade: float) -> str:
    """
    Categorize a predicted grade into low/medium/high risk.

    Args:
        predicted_grade: Predicted grade (normally 0-100)

    Returns:
        'low' (>= 75), 'medium' (>= 55) or 'high'
    """
    if predicted_grade >= 75:
        return 'low'
    elif predicted_grade >= 55:
        return 'medium'
    else:
        return 'high'


def find_weak_subjects(subjects: List[Subject]) -> List[Subject]:
    """Subjects below 70%, worst first. Ties keep their input order."""
    weak = [s for s in subjects if subject_percentage(s) < WEAK_SUBJECT_THRESHOLD]
    return sorted(weak, key=subject_percentage)


def build_alerts(
    data: StudentData,
    average_marks: int,
    weak_subjects: List[Subject],
    predicted_grade: int
) -> List[Alert]:
    """
    Build the dashboard alerts.

    Each condition is checked independently and the output keeps this order:
    attendance, weak subjects, urgent deadline, study hours, failure risk.
    No current condition reads average_marks.
    """
    alerts = []

    if data.attendance < MIN_ATTENDANCE:
        alerts.append(Alert(
            kind='critical',
            message="Attendance below 75% - Risk of debarment!",
            action="Attend all classes this week",
            impact="High"
        ))

    if weak_subjects:
        alerts.append(Alert(
            kind='warning',
            message=f"{len(weak_subjects)} subject(s) below passing threshold",
            action=f"Focus on {', '.join(s.name for s in weak_subjects)}",
            impact="High"
        ))

    if any(d.days_left <= URGENT_DEADLINE_DAYS for d in data.upcoming_deadlines):
        alerts.append(Alert(
            kind='critical',
            message="Deadline approaching in less than 2 days!",
            action="Complete urgent assignments immediately",
            impact="Critical"
        ))

    if data.daily_study_hours < MIN_STUDY_HOURS:
        alerts.append(Alert(
            kind='info',
            message="Study hours below recommended minimum",
            action="Increase to at least 4-5 hours daily",
            impact="Medium"
        ))

    if predicted_grade < FAILURE_RISK_GRADE:
        alerts.append(Alert(
            kind='critical',
            message="AI predicts risk of academic failure",
            action="Follow the generated study plan strictly",
            impact="Critical"
        ))

    return alerts

