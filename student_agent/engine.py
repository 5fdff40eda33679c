"""Single entry point that runs the metrics engine and the study planner."""

from student_agent.metrics import (
    build_alerts,
    classify_risk,
    compute_average_marks,
    compute_predicted_grade,
    find_weak_subjects,
)
from student_agent.models import Evaluation, StudentData
from student_agent.planner import generate_study_plan


def evaluate(data: StudentData) -> Evaluation:
    """
    Evaluate one student.

    Args:
        data: Validated student data (not modified)

    Returns:
        Evaluation with average, prediction, risk, weak subjects, alerts and plan
    """
    average_marks = compute_average_marks(data.subjects)
    predicted_grade = compute_predicted_grade(data, average_marks)
    weak_subjects = find_weak_subjects(data.subjects)

    return Evaluation(
        average_marks=average_marks,
        predicted_grade=predicted_grade,
        risk_level=classify_risk(predicted_grade),
        weak_subjects=weak_subjects,
        alerts=build_alerts(data, average_marks, weak_subjects, predicted_grade),
        study_plan=generate_study_plan(data, weak_subjects)
    )
