"""Course-wide totals across every assignment."""

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ..grading.composite import grade_assessment
from ..grading.models import Assessment, assessment_key
from ..grading.peer import match_subject_contains
from ..output.formatting import format_number, format_weight
from ..roster.models import Assignee, find_group_for_student
from ..rubrics.models import Rubric
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Student:
    id: str
    name: str


@dataclass
class StudentCourseRow:
    """One student's contribution from each rubric and the course total."""

    id: str
    name: str
    contributions: list[float] = field(default_factory=list)

    @property
    def total_course_score(self) -> float:
        return sum(self.contributions)


@dataclass
class CourseSummary:
    rubrics: list[Rubric]
    rows: list[StudentCourseRow]

    def headers(self) -> list[str]:
        return (
            ["Student ID", "Student Name"]
            + [f"{r.title} ({format_weight(r.assignment_weight)}%)" for r in self.rubrics]
            + ["Total Course Score"]
        )

    def to_table(self, decimals: int = 2) -> list[list[str]]:
        """Header row followed by one row per student, numbers as text."""
        table = [self.headers()]
        for row in self.rows:
            table.append(
                [row.id, row.name]
                + [format_number(c, decimals) for c in row.contributions]
                + [format_number(row.total_course_score, decimals)]
            )
        return table


def unique_students(assignees: Iterable[Assignee]) -> list[Student]:
    """Every known student, deduplicated by id and sorted by id.

    Group members count only when their member string carries an id. When
    an id appears more than once the last name seen wins.
    """
    names: dict[str, str] = {}
    for assignee in assignees:
        if assignee.is_group:
            for member in assignee.parsed_members():
                if member.id:
                    names[member.id] = member.name
        else:
            names[assignee.id] = assignee.name
    return [Student(id=i, name=names[i]) for i in sorted(names)]


def assessment_for_student(
    rubric: Rubric,
    student_id: str,
    assignees: Iterable[Assignee],
    assessments: Mapping[str, Assessment],
) -> Assessment | None:
    """The student's own assessment, else the one of the group they belong to."""
    direct = assessments.get(assessment_key(rubric.id, student_id))
    if direct is not None:
        return direct

    group = find_group_for_student(assignees, student_id)
    if group is None:
        return None
    return assessments.get(assessment_key(rubric.id, group.id))


def course_contribution(
    rubric: Rubric, assessment: Assessment | None, student_id: str
) -> float:
    """Course points a student earns from one rubric.

    Peer reviews are those whose subject contains the student id.
    """
    grade = grade_assessment(
        rubric, assessment, subject=student_id, match=match_subject_contains
    )
    return grade.composite.course_contribution


def course_summary(
    assignees: Iterable[Assignee],
    assessments: Mapping[str, Assessment],
    rubrics: Iterable[Rubric],
) -> CourseSummary:
    """Fold every rubric's composite grade into a course total per student.

    Args:
        assignees: Whole roster, individuals and groups
        assessments: Assessments keyed by ``{rubric_id}_{assignee_id}``
        rubrics: Every assignment of the course, in column order

    Returns:
        CourseSummary with one row per unique student
    """
    assignees = list(assignees)
    rubrics = list(rubrics)
    rows = []
    for student in unique_students(assignees):
        contributions = [
            course_contribution(
                rubric,
                assessment_for_student(rubric, student.id, assignees, assessments),
                student.id,
            )
            for rubric in rubrics
        ]
        rows.append(StudentCourseRow(student.id, student.name, contributions))

    logger.info(f"Course summary: {len(rows)} students, {len(rubrics)} assignments")
    return CourseSummary(rubrics=rubrics, rows=rows)
