"""Chart and summary views built on top of an evaluation."""

from typing import List

import numpy as np
import pandas as pd

from student_agent.engine import evaluate
from student_agent.metrics import MIN_ATTENDANCE, MIN_STUDY_HOURS, round_half_up, subject_percentage
from student_agent.models import (
    DashboardResponse,
    DistributionBucket,
    Evaluation,
    FocusArea,
    QuickStat,
    RadarPoint,
    StudentData,
    Subject,
    SubjectBreakdown,
)

BAR_LABEL_LENGTH = 10
RADAR_LABEL_LENGTH = 8

DISTRIBUTION_BUCKETS = [
    ('excellent', "Excellent (>80%)"),
    ('good', "Good (60-80%)"),
    ('needs-work', "Needs Work (<60%)"),
]


def subjects_frame(subjects: List[Subject]) -> pd.DataFrame:
    """Subjects as a DataFrame with an unrounded 'percentage' column."""
    df = pd.DataFrame(
        [s.model_dump() for s in subjects],
        columns=['name', 'marks', 'max_marks', 'hours_studied']
    )
    df['percentage'] = df['marks'] / df['max_marks'] * 100.0
    return df


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def subject_breakdown(subjects: List[Subject]) -> List[SubjectBreakdown]:
    """Per-subject percentage and hours for the bar chart."""
    df = subjects_frame(subjects)
    rows = []
    for _, row in df.iterrows():
        name = row['name']
        label = name[:BAR_LABEL_LENGTH] + "..." if len(name) > BAR_LABEL_LENGTH else name
        rows.append(SubjectBreakdown(
            name=name,
            label=label,
            percentage=round_half_up(row['percentage']),
            hours_studied=float(row['hours_studied'])
        ))
    return rows


def radar_points(subjects: List[Subject]) -> List[RadarPoint]:
    df = subjects_frame(subjects)
    return [
        RadarPoint(subject=row['name'][:RADAR_LABEL_LENGTH], score=round_half_up(row['percentage']))
        for _, row in df.iterrows()
    ]


def performance_distribution(subjects: List[Subject]) -> List[DistributionBucket]:
    """
    Count subjects per performance bucket.

    Buckets use the unrounded percentage: excellent >= 80, good 60-79.x,
    needs-work < 60. Empty buckets are omitted.
    """
    pct = subjects_frame(subjects)['percentage']
    buckets = np.select([pct >= 80, pct >= 60], ['excellent', 'good'], default='needs-work')
    counts = pd.Series(buckets, dtype=object).value_counts()

    return [
        DistributionBucket(key=key, name=name, value=int(counts[key]))
        for key, name in DISTRIBUTION_BUCKETS
        if counts.get(key, 0) > 0
    ]


def quick_stats(data: StudentData, evaluation: Evaluation) -> List[QuickStat]:
    """Four headline cards with a good/bad trend flag."""
    return [
        QuickStat(
            label="Attendance",
            value=f"{_format_number(data.attendance)}%",
            trend=data.attendance >= MIN_ATTENDANCE
        ),
        QuickStat(
            label="Average Score",
            value=f"{evaluation.average_marks}%",
            trend=evaluation.average_marks >= 60
        ),
        QuickStat(
            label="Study Hours",
            value=f"{_format_number(data.daily_study_hours)}h/day",
            trend=data.daily_study_hours >= MIN_STUDY_HOURS
        ),
        QuickStat(
            label="Weak Subjects",
            value=str(len(evaluation.weak_subjects)),
            trend=len(evaluation.weak_subjects) == 0
        ),
    ]


def focus_areas(weak_subjects: List[Subject]) -> List[FocusArea]:
    """Weak subjects with a suggested number of extra weekly hours (at least 2)."""
    return [
        FocusArea(
            name=s.name,
            percentage=round_half_up(subject_percentage(s)),
            extra_hours_per_week=max(2.0, 5.0 - s.hours_studied)
        )
        for s in weak_subjects
    ]


def build_dashboard(data: StudentData) -> DashboardResponse:
    """Evaluate the student and attach every dashboard projection."""
    evaluation = evaluate(data)

    return DashboardResponse(
        success=True,
        message=f"Evaluated {len(data.subjects)} subjects",
        evaluation=evaluation,
        quick_stats=quick_stats(data, evaluation),
        subject_breakdown=subject_breakdown(data.subjects),
        radar=radar_points(data.subjects),
        distribution=performance_distribution(data.subjects),
        focus_areas=focus_areas(evaluation.weak_subjects)
    )
