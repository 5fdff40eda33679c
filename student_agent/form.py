"""Metrics entry form state: saved values plus editable drafts."""

from typing import Dict, List, Optional

from student_agent.metrics import compute_average_marks
from student_agent.models import Deadline, StudentData, Subject

DEFAULT_ATTENDANCE = 82.0
DEFAULT_DAILY_STUDY_HOURS = 5.0

DEFAULT_SUBJECTS = [
    Subject(name="Mathematics", marks=72, max_marks=100, hours_studied=8),
    Subject(name="Physics", marks=65, max_marks=100, hours_studied=6),
    Subject(name="Chemistry", marks=78, max_marks=100, hours_studied=5),
    Subject(name="Computer Science", marks=85, max_marks=100, hours_studied=10),
    Subject(name="English", marks=80, max_marks=100, hours_studied=4),
]

DEFAULT_DEADLINES = [
    Deadline(name="Chapter 5 Assignment", subject="Mathematics", days_left=3),
    Deadline(name="Lab Report", subject="Physics", days_left=5),
    Deadline(name="Project Submission", subject="Computer Science", days_left=7),
]

NEW_SUBJECT_DEFAULTS = {'marks': 70, 'max_marks': 100, 'hours_studied': 5}


def default_student_data() -> StudentData:
    return StudentData(
        attendance=DEFAULT_ATTENDANCE,
        subjects=list(DEFAULT_SUBJECTS),
        daily_study_hours=DEFAULT_DAILY_STUDY_HOURS,
        upcoming_deadlines=list(DEFAULT_DEADLINES)
    )


class StudentMetricsForm:
    """
    Holds what the user is typing before it is submitted.

    Subjects and deadlines each have a saved list and a draft list. Edits go
    to the drafts; save_subjects() / save_deadlines() copy the drafts over the
    saved lists. submit() only ever reads the saved lists.
    """

    def __init__(
        self,
        attendance: float = DEFAULT_ATTENDANCE,
        daily_study_hours: float = DEFAULT_DAILY_STUDY_HOURS,
        subjects: Optional[List[Subject]] = None,
        deadlines: Optional[List[Deadline]] = None
    ):
        self.attendance = attendance
        self.daily_study_hours = daily_study_hours
        self.subjects = list(DEFAULT_SUBJECTS if subjects is None else subjects)
        self.subject_drafts = list(self.subjects)
        self.deadlines = list(DEFAULT_DEADLINES if deadlines is None else deadlines)
        self.deadline_drafts = list(self.deadlines)

    # Subjects

    def add_subject(self, name: str) -> bool:
        """Append a draft subject with default marks. Blank names are ignored."""
        name = (name or '').strip()
        if not name:
            return False
        self.subject_drafts.append(Subject(name=name, **NEW_SUBJECT_DEFAULTS))
        return True

    def update_subject(self, index: int, **fields) -> Subject:
        """Replace fields of a draft subject; the result is re-validated."""
        current = self.subject_drafts[index]
        updated = Subject.model_validate({**current.model_dump(), **fields})
        self.subject_drafts[index] = updated
        return updated

    def remove_subject_draft(self, index: int) -> None:
        del self.subject_drafts[index]

    def save_subjects(self) -> None:
        self.subjects = list(self.subject_drafts)

    # Deadlines

    def add_deadline(self, name: str, subject: str, days_left: int = 1) -> bool:
        """Append a draft deadline. Both name and subject must be non-blank."""
        name = (name or '').strip()
        subject = (subject or '').strip()
        if not name or not subject:
            return False
        self.deadline_drafts.append(Deadline(name=name, subject=subject, days_left=days_left))
        return True

    def update_deadline(self, index: int, **fields) -> Deadline:
        current = self.deadline_drafts[index]
        updated = Deadline.model_validate({**current.model_dump(), **fields})
        self.deadline_drafts[index] = updated
        return updated

    def remove_deadline(self, index: int) -> None:
        del self.deadline_drafts[index]

    def save_deadlines(self) -> None:
        self.deadlines = list(self.deadline_drafts)

    # Submission

    @property
    def average_marks(self) -> Optional[int]:
        """Live average of the saved subjects, None when there are none."""
        if not self.subjects:
            return None
        return compute_average_marks(self.subjects)

    def to_payload(self) -> Dict:
        return {
            'attendance': self.attendance,
            'subjects': [s.model_dump() for s in self.subjects],
            'daily_study_hours': self.daily_study_hours,
            'upcoming_deadlines': [d.model_dump() for d in self.deadlines],
        }

    def submit(self) -> StudentData:
        """Validated StudentData from the saved lists. Raises InvalidInput."""
        return StudentData.from_payload(self.to_payload())
