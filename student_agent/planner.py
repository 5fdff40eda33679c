"""Daily study plan generation."""

from typing import List, Optional

from student_agent.metrics import find_weak_subjects, round_half_up, subject_percentage
from student_agent.models import StudentData, StudyPlanSlot, Subject

URGENT_PLAN_DAYS = 3


def generate_study_plan(
    data: StudentData,
    weak_subjects: Optional[List[Subject]] = None
) -> List[StudyPlanSlot]:
    """
    Build the fixed-slot daily schedule.

    The morning slot only appears when there is at least one weak subject,
    so the plan has 5 slots, or 4 without weak subjects. The mid-morning and
    night slots rank subjects by raw marks, not percentage.

    Args:
        data: Student data (subjects are never reordered in place)
        weak_subjects: Precomputed weak subjects, worst first

    Returns:
        Ordered list of study plan slots
    """
    if weak_subjects is None:
        weak_subjects = find_weak_subjects(data.subjects)

    urgent_deadlines = [d for d in data.upcoming_deadlines if d.days_left <= URGENT_PLAN_DAYS]
    by_marks_ascending = sorted(data.subjects, key=lambda s: s.marks)
    by_marks_descending = sorted(data.subjects, key=lambda s: s.marks, reverse=True)
    plan = []

    # Morning: weakest subject
    if weak_subjects:
        weakest = weak_subjects[0]
        plan.append(StudyPlanSlot(
            time="6:00 AM - 8:00 AM",
            activity="Deep Focus: Weak Subject",
            subject=weakest.name,
            priority='critical',
            reason=f"Score: {round_half_up(subject_percentage(weakest))}% - Needs improvement"
        ))

    # Mid-morning: second lowest raw marks
    plan.append(StudyPlanSlot(
        time="9:00 AM - 11:00 AM",
        activity="Practice Problems & Revision",
        subject=by_marks_ascending[1].name if len(by_marks_ascending) > 1 else "General",
        priority='high',
        reason="Active recall strengthens memory"
    ))

    # Afternoon: first urgent deadline in input order
    if urgent_deadlines:
        deadline = urgent_deadlines[0]
        plan.append(StudyPlanSlot(
            time="2:00 PM - 4:00 PM",
            activity="Urgent Assignment",
            subject=deadline.subject,
            priority='critical',
            reason=f"{deadline.name} due in {deadline.days_left} days"
        ))
    else:
        plan.append(StudyPlanSlot(
            time="2:00 PM - 4:00 PM",
            activity="Project Work",
            subject="Multiple Subjects",
            priority='medium',
            reason="Stay ahead of deadlines"
        ))

    plan.append(StudyPlanSlot(
        time="5:00 PM - 6:30 PM",
        activity="Daily Review & Notes",
        subject="All Subjects",
        priority='medium',
        reason="Consolidate today's learning"
    ))

    # Night: strongest subject by raw marks. reverse=True keeps ties in input order.
    plan.append(StudyPlanSlot(
        time="8:00 PM - 9:30 PM",
        activity="Advanced Topics",
        subject=by_marks_descending[0].name if by_marks_descending else "Self-study",
        priority='low',
        reason="Build on your strengths"
    ))

    return plan
