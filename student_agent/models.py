"""Data models for the Student Success Agent application."""

from typing import Any, Dict, List, Literal
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator


class InvalidInput(ValueError):
    """Raised when student data cannot be evaluated."""


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=_camel, populate_by_name=True, frozen=True, allow_inf_nan=False
    )


class Subject(_Record):
    """One subject's marks and study time."""
    name: str
    marks: float = Field(..., ge=0)
    max_marks: float = Field(100.0, gt=0)
    hours_studied: float = 0.0

    @model_validator(mode='after')
    def check_marks_within_max(self):
        if self.marks > self.max_marks:
            raise ValueError(f"marks ({self.marks}) exceed maxMarks ({self.max_marks}) for '{self.name}'")
        return self


class Deadline(_Record):
    """Upcoming assignment. Negative days_left means overdue."""
    name: str
    subject: str
    days_left: int


class StudentData(_Record):
    """Everything the engine needs for one evaluation."""
    attendance: float = Field(..., ge=0, le=100)
    subjects: List[Subject]
    daily_study_hours: float = Field(..., ge=0)
    upcoming_deadlines: List[Deadline] = Field(default_factory=list)

    @field_validator('subjects')
    @classmethod
    def check_subjects_not_empty(cls, value):
        if not value:
            raise ValueError("at least one subject is required")
        return value

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'StudentData':
        """Validate a raw dict, raising InvalidInput instead of ValidationError."""
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise InvalidInput(errors) from e


class Alert(_Record):
    """Condition-triggered advisory shown on the dashboard."""
    kind: Literal["critical", "warning", "info"]
    message: str
    action: str
    impact: str


class StudyPlanSlot(_Record):
    """One time-of-day entry in the daily study plan."""
    time: str
    activity: str
    subject: str
    priority: Literal["critical", "high", "medium", "low"]
    reason: str


class Evaluation(_Record):
    """Engine output for one StudentData."""
    average_marks: int
    predicted_grade: int
    risk_level: Literal["low", "medium", "high"]
    weak_subjects: List[Subject]
    alerts: List[Alert]
    study_plan: List[StudyPlanSlot]


class SubjectBreakdown(_Record):
    name: str
    label: str
    percentage: int
    hours_studied: float


class RadarPoint(_Record):
    subject: str
    score: int
    full_mark: int = 100


class DistributionBucket(_Record):
    key: str
    name: str
    value: int


class QuickStat(_Record):
    label: str
    value: str
    trend: bool


class FocusArea(_Record):
    name: str
    percentage: int
    extra_hours_per_week: float


class DashboardResponse(_Record):
    """Response from the evaluate and upload endpoints."""
    success: bool
    message: str
    evaluation: Evaluation
    quick_stats: List[QuickStat]
    subject_breakdown: List[SubjectBreakdown]
    radar: List[RadarPoint]
    distribution: List[DistributionBucket]
    focus_areas: List[FocusArea]
