"""Unit tests for the metrics engine."""

import pytest

from student_agent.engine import evaluate
from student_agent.metrics import (
    build_alerts,
    classify_risk,
    compute_average_marks,
    compute_predicted_grade,
    find_weak_subjects,
    round_half_up,
    subject_percentage,
)
from student_agent.models import Deadline, InvalidInput, StudentData, Subject


def make_data(subjects, attendance=82.0, daily_study_hours=5.0, deadlines=None):
    return StudentData(
        attendance=attendance,
        subjects=subjects,
        daily_study_hours=daily_study_hours,
        upcoming_deadlines=deadlines or []
    )


def default_subjects():
    return [
        Subject(name="Math", marks=72, max_marks=100, hours_studied=8),
        Subject(name="Physics", marks=65, max_marks=100, hours_studied=6),
        Subject(name="Chem", marks=78, max_marks=100, hours_studied=5),
        Subject(name="CS", marks=85, max_marks=100, hours_studied=10),
        Subject(name="English", marks=80, max_marks=100, hours_studied=4),
    ]


def default_deadlines():
    return [
        Deadline(name="Chapter 5 Assignment", subject="Math", days_left=3),
        Deadline(name="Lab Report", subject="Physics", days_left=5),
        Deadline(name="Project Submission", subject="CS", days_left=7),
    ]


def test_round_half_up():
    """Halves always round toward +infinity."""
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(84.5) == 85
    assert round_half_up(85.2) == 85
    assert round_half_up(85.7) == 86
    assert round_half_up(-2.5) == -2


def test_compute_average_marks():
    """Average is the rounded mean of per-subject percentages."""
    assert compute_average_marks(default_subjects()) == 76

    # Percentages, not raw marks: 40/50 = 80%, 30/100 = 30%
    subjects = [
        Subject(name="A", marks=40, max_marks=50),
        Subject(name="B", marks=30, max_marks=100),
    ]
    assert compute_average_marks(subjects) == 55

    assert compute_average_marks([Subject(name="Zero", marks=0, max_marks=100)]) == 0
    assert compute_average_marks([Subject(name="Full", marks=100, max_marks=100)]) == 100


def test_compute_average_marks_rejects_empty():
    """An empty subject list is invalid input, not NaN."""
    with pytest.raises(InvalidInput):
        compute_average_marks([])


def test_subject_percentage_rejects_zero_max():
    """maxMarks of zero cannot produce a percentage."""
    # model_construct skips validation, like data built outside the boundary
    subject = Subject.model_construct(name="Broken", marks=0, max_marks=0, hours_studied=0)
    with pytest.raises(InvalidInput):
        subject_percentage(subject)


def test_compute_predicted_grade_example():
    """82*0.25 + 76*0.45 + 5*4 + 7*1.5 = 85.2 -> 85."""
    data = make_data(default_subjects(), deadlines=default_deadlines())
    assert compute_predicted_grade(data) == 85
    assert compute_predicted_grade(data, average_marks=76) == 85


def test_compute_predicted_grade_single_weak_subject():
    """60*0.25 + 40*0.45 + 2*4 + 10*1.5 = 56."""
    data = make_data(
        [Subject(name="X", marks=40, max_marks=100, hours_studied=2)],
        attendance=60.0,
        daily_study_hours=2.0
    )
    assert compute_predicted_grade(data) == 56


def test_compute_predicted_grade_upper_clamp():
    """Prediction never exceeds 100."""
    data = make_data(
        [Subject(name="Top", marks=100, max_marks=100)],
        attendance=100.0,
        daily_study_hours=10.0
    )
    # Unclamped this would be 25 + 45 + 40 + 15 = 125
    assert compute_predicted_grade(data) == 100


def test_compute_predicted_grade_huge_study_hours():
    """A huge but finite input is capped instead of overflowing."""
    data = make_data(
        [Subject(name="A", marks=50, max_marks=100)],
        attendance=50.0,
        daily_study_hours=1e308
    )
    assert compute_predicted_grade(data) == 100

    result = evaluate(data)
    assert result.predicted_grade == 100
    assert result.risk_level == 'low'


def test_compute_predicted_grade_rounds_half_up():
    """58*0.25 = 14.5 rounds to 15."""
    deadlines = [Deadline(name=f"D{i}", subject="S", days_left=30) for i in range(10)]
    data = make_data(
        [Subject(name="S", marks=0, max_marks=100)],
        attendance=58.0,
        daily_study_hours=0.0,
        deadlines=deadlines
    )
    assert compute_predicted_grade(data) == 15


def test_deadline_slack_floors_at_zero():
    """More than 10 deadlines contribute nothing, never a penalty."""
    deadlines = [Deadline(name=f"D{i}", subject="S", days_left=30) for i in range(14)]
    data = make_data(
        [Subject(name="S", marks=0, max_marks=100)],
        attendance=0.0,
        daily_study_hours=0.0,
        deadlines=deadlines
    )
    assert compute_predicted_grade(data) == 0


def test_classify_risk():
    """Exhaustive partition; boundaries belong to the safer tier."""
    assert classify_risk(100) == 'low'
    assert classify_risk(75) == 'low'

    assert classify_risk(74.9) == 'medium'
    assert classify_risk(74) == 'medium'
    assert classify_risk(55) == 'medium'

    assert classify_risk(54.9) == 'high'
    assert classify_risk(0) == 'high'
    assert classify_risk(-5) == 'high'


def test_find_weak_subjects():
    """Only subjects under 70%, worst first."""
    weak = find_weak_subjects(default_subjects())
    assert [s.name for s in weak] == ["Physics"]

    subjects = [
        Subject(name="A", marks=69, max_marks=100),
        Subject(name="B", marks=70, max_marks=100),
        Subject(name="C", marks=20, max_marks=50),
    ]
    # C is 40%, A is 69%, B is exactly 70% and not weak
    assert [s.name for s in find_weak_subjects(subjects)] == ["C", "A"]


def test_find_weak_subjects_stable_ties():
    """Subjects on the same percentage keep their input order."""
    subjects = [
        Subject(name="Half A", marks=25, max_marks=50),
        Subject(name="Worst", marks=30, max_marks=100),
        Subject(name="Half B", marks=50, max_marks=100),
    ]
    weak = find_weak_subjects(subjects)
    assert [s.name for s in weak] == ["Worst", "Half A", "Half B"]


def test_find_weak_subjects_does_not_reorder_input():
    subjects = default_subjects()
    names = [s.name for s in subjects]
    find_weak_subjects(subjects)
    assert [s.name for s in subjects] == names


def test_build_alerts_none():
    """A healthy student gets no alerts."""
    subjects = [Subject(name="Math", marks=90, max_marks=100)]
    data = make_data(subjects, attendance=95.0, daily_study_hours=6.0)
    assert build_alerts(data, 90, [], 90) == []


def test_build_alerts_fixed_order():
    """Attendance alert always comes before the weak-subject alert."""
    subjects = [
        Subject(name="Math", marks=50, max_marks=100),
        Subject(name="Physics", marks=60, max_marks=100),
    ]
    deadlines = [Deadline(name="Quiz", subject="Math", days_left=2)]
    data = make_data(subjects, attendance=70.0, daily_study_hours=3.0, deadlines=deadlines)
    weak = find_weak_subjects(subjects)

    alerts = build_alerts(data, 55, weak, 50)

    assert [a.kind for a in alerts] == ['critical', 'warning', 'critical', 'info', 'critical']
    assert alerts[0].message == "Attendance below 75% - Risk of debarment!"
    assert alerts[1].message == "2 subject(s) below passing threshold"
    assert alerts[1].action == "Focus on Math, Physics"
    assert alerts[2].message == "Deadline approaching in less than 2 days!"
    assert alerts[3].action == "Increase to at least 4-5 hours daily"
    assert alerts[4].message == "AI predicts risk of academic failure"


def test_build_alerts_overdue_deadline():
    """Negative days left count as urgent."""
    subjects = [Subject(name="Math", marks=90, max_marks=100)]
    deadlines = [Deadline(name="Essay", subject="Math", days_left=-1)]
    data = make_data(subjects, attendance=90.0, daily_study_hours=5.0, deadlines=deadlines)

    alerts = build_alerts(data, 90, [], 90)
    assert len(alerts) == 1
    assert alerts[0].impact == "Critical"


def test_build_alerts_boundaries():
    """75% attendance, 4 hours, 3 days left and a 60 prediction raise nothing."""
    subjects = [Subject(name="Math", marks=90, max_marks=100)]
    deadlines = [Deadline(name="Essay", subject="Math", days_left=3)]
    data = make_data(subjects, attendance=75.0, daily_study_hours=4.0, deadlines=deadlines)
    assert build_alerts(data, 90, [], 60) == []


def test_evaluate_example_scenario():
    """Default form data: average 76, predicted 85, low risk, Physics weak."""
    data = make_data(default_subjects(), deadlines=default_deadlines())
    result = evaluate(data)

    assert result.average_marks == 76
    assert result.predicted_grade == 85
    assert result.risk_level == 'low'
    # Physics is 65%, under the 70% threshold
    assert [s.name for s in result.weak_subjects] == ["Physics"]
    assert [a.kind for a in result.alerts] == ['warning']
    assert len(result.study_plan) == 5


def test_evaluate_weak_student():
    """Single 40% subject, low attendance and few study hours."""
    data = make_data(
        [Subject(name="X", marks=40, max_marks=100, hours_studied=2)],
        attendance=60.0,
        daily_study_hours=2.0
    )
    result = evaluate(data)

    assert result.average_marks == 40
    assert result.predicted_grade == 56
    assert result.risk_level == 'medium'
    assert [s.name for s in result.weak_subjects] == ["X"]

    messages = [a.message for a in result.alerts]
    assert messages == [
        "Attendance below 75% - Risk of debarment!",
        "1 subject(s) below passing threshold",
        "Study hours below recommended minimum",
        "AI predicts risk of academic failure",
    ]


def test_evaluate_is_repeatable():
    """Same input, same output; the input is left untouched."""
    data = make_data(default_subjects(), deadlines=default_deadlines())
    before = data.model_dump()

    first = evaluate(data)
    second = evaluate(data)

    assert first == second
    assert data.model_dump() == before
