"""Composite grade: teacher rubric score blended with peer evaluation.

Two scales are produced and kept apart:

* ``assignment_percentage`` (0-100) is the grade on this assignment. It is
  what pass/fail compares against and what the grading screen shows.
* ``course_contribution`` is that percentage scaled by the assignment's
  share of the course (``assignment_weight``).
"""

from dataclasses import dataclass
from enum import Enum

from ..rubrics.models import Rubric
from .models import Assessment
from .peer import (
    MISSING_REVIEWS_AVERAGE,
    NO_PEER_WEIGHT_AVERAGE,
    SubjectMatcher,
    match_subject_exact,
    peer_average,
)
from .scoring import ScoreBreakdown, score_entries


class GradeStatus(str, Enum):
    PASS = "Pass"
    FAIL = "Fail"
    PENDING = "Pending"


@dataclass
class CompositeGrade:
    """Grade of one assignee (or group member) on one assignment."""

    teacher_component: float
    peer_component: float
    assignment_percentage: float
    course_contribution: float
    passed: bool
    teacher_weight_pct: float
    peer_weight_pct: float
    assignment_weight: float

    @property
    def teacher_course_score(self) -> float:
        """Teacher part expressed in course points."""
        return self.teacher_component * self.assignment_weight / 100

    @property
    def peer_course_score(self) -> float:
        """Peer part expressed in course points."""
        return self.peer_component * self.assignment_weight / 100


@dataclass
class AssessmentGrade:
    """Everything computed for one assessment."""

    breakdown: ScoreBreakdown
    peer_average: float
    composite: CompositeGrade
    status: GradeStatus

    @property
    def total_score(self) -> float:
        return self.composite.assignment_percentage


def composite_grade(
    rubric: Rubric,
    teacher_percentage: float,
    peer_avg: float | None = None,
) -> CompositeGrade:
    """Combine rubric percentage and peer average into the assignment grade.

    Args:
        rubric: Rubric carrying the weight configuration
        teacher_percentage: Score Aggregator percentage (0-1)
        peer_avg: Average peer score (0-100); None when not applicable

    Returns:
        CompositeGrade on both the assignment and the course scale
    """
    peer_weight = rubric.effective_peer_weight
    teacher_weight = 100.0 - peer_weight

    if peer_avg is None:
        peer_avg = MISSING_REVIEWS_AVERAGE if peer_weight else NO_PEER_WEIGHT_AVERAGE

    teacher_component = teacher_percentage * teacher_weight
    peer_component = (peer_avg / 100) * peer_weight
    percentage = teacher_component + peer_component

    return CompositeGrade(
        teacher_component=teacher_component,
        peer_component=peer_component,
        assignment_percentage=percentage,
        course_contribution=percentage * rubric.assignment_weight / 100,
        passed=percentage >= rubric.passing_percentage,
        teacher_weight_pct=teacher_weight,
        peer_weight_pct=peer_weight,
        assignment_weight=rubric.assignment_weight,
    )


def pending_grade(rubric: Rubric) -> AssessmentGrade:
    """Zero grade for an assignee that has not been assessed yet."""
    peer_weight = rubric.effective_peer_weight
    return AssessmentGrade(
        breakdown=ScoreBreakdown(0.0, rubric.max_raw_score, 0.0, []),
        peer_average=0.0,
        composite=CompositeGrade(
            teacher_component=0.0,
            peer_component=0.0,
            assignment_percentage=0.0,
            course_contribution=0.0,
            passed=False,
            teacher_weight_pct=100.0 - peer_weight,
            peer_weight_pct=peer_weight,
            assignment_weight=rubric.assignment_weight,
        ),
        status=GradeStatus.PENDING,
    )


def grade_assessment(
    rubric: Rubric,
    assessment: Assessment | None,
    subject: str | None = None,
    match: SubjectMatcher = match_subject_exact,
) -> AssessmentGrade:
    """Grade an assessment end to end.

    Args:
        rubric: The assessment's rubric
        assessment: The stored assessment, or None if nothing was saved yet
        subject: Group member whose peer reviews count; None averages every
            review of the assessment
        match: Subject matching rule for peer reviews

    Returns:
        AssessmentGrade; a missing assessment yields a pending zero grade
    """
    if assessment is None:
        return pending_grade(rubric)

    breakdown = score_entries(rubric, assessment.entries)
    average = peer_average(
        assessment.peer_evaluations,
        subject,
        rubric.effective_peer_weight,
        match,
    )
    composite = composite_grade(rubric, breakdown.percentage, average)
    status = GradeStatus.PASS if composite.passed else GradeStatus.FAIL
    return AssessmentGrade(
        breakdown=breakdown,
        peer_average=average,
        composite=composite,
        status=status,
    )
