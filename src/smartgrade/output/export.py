"""Flat delimited tables for spreadsheets.

Tables are lists of rows of strings. :func:`write_csv` writes them with the
csv module, which quotes fields containing the delimiter or quotes and
doubles embedded quotes.
"""

import csv
import io
from pathlib import Path
from typing import Iterable, Mapping, Sequence, TextIO

from ..grading.composite import grade_assessment
from ..grading.models import Assessment, assessment_key
from ..roster.models import Assignee, parse_member
from ..rubrics.models import AssignmentType, Rubric
from ..utils.logging import get_logger
from .formatting import format_number, format_weight

logger = get_logger(__name__)

Table = list[list[str]]


def assignment_headers(rubric: Rubric) -> list[str]:
    criteria = [c.title for c in rubric.criteria]
    final = f"Final Grade ({format_weight(rubric.assignment_weight)}%)"
    if rubric.is_group:
        return (
            ["Group Name", "Student ID", "Student Name"]
            + criteria
            + [
                f"Teacher Score ({rubric.teacher_course_weight:.1f}%)",
                f"Peer Score ({rubric.peer_course_weight:.1f}%)",
                final,
                "Status",
                "Feedback",
            ]
        )
    return ["Student ID", "Student Name"] + criteria + [final, "Status", "Feedback"]


def _criterion_scores(
    rubric: Rubric, assessment: Assessment | None, decimals: int
) -> list[str]:
    if assessment is None:
        return [format_number(0, decimals) for _ in rubric.criteria]
    grade = grade_assessment(rubric, assessment)
    scores = {e.criterion_id: e.score for e in grade.breakdown.entries}
    return [format_number(scores.get(c.id, 0.0), decimals) for c in rubric.criteria]


def assignment_table(
    rubric: Rubric,
    assignees: Iterable[Assignee],
    assessments: Mapping[str, Assessment],
    decimals: int = 2,
) -> Table:
    """Grades of one assignment, scaled to its share of the course.

    Individual assignments get one row per student. Group assignments get
    one row per group member; peer scores are matched on the exact member
    string.

    Args:
        rubric: The assignment
        assignees: Roster; only entries of the rubric's type are exported
        assessments: Assessments keyed by ``{rubric_id}_{assignee_id}``
        decimals: Digits after the decimal point for numbers

    Returns:
        Header row followed by data rows
    """
    table = [assignment_headers(rubric)]

    for assignee in assignees:
        assessment = assessments.get(assessment_key(rubric.id, assignee.id))
        criteria = _criterion_scores(rubric, assessment, decimals)
        feedback = assessment.feedback if assessment else ""

        if rubric.is_group and assignee.is_group:
            for member_string in assignee.members:
                member = parse_member(member_string)
                grade = grade_assessment(rubric, assessment, subject=member_string)
                composite = grade.composite
                table.append(
                    [assignee.name, member.id, member.name]
                    + criteria
                    + [
                        format_number(composite.teacher_course_score, decimals),
                        format_number(composite.peer_course_score, decimals),
                        format_number(composite.course_contribution, decimals),
                        grade.status.value,
                        feedback,
                    ]
                )
        elif not rubric.is_group and not assignee.is_group:
            grade = grade_assessment(rubric, assessment)
            table.append(
                [assignee.id, assignee.name]
                + criteria
                + [
                    format_number(grade.composite.course_contribution, decimals),
                    grade.status.value,
                    feedback,
                ]
            )

    logger.debug(f"Assignment table for {rubric.title}: {len(table) - 1} rows")
    return table


def roster_table(
    assignees: Iterable[Assignee], assignment_type: AssignmentType | str
) -> Table:
    """Roster in a layout the roster importer reads back.

    Individuals: ``Student ID, Student Name``. Groups: one row per member
    with ``Group ID, Group Name, Member ID, Member Name``; a group without
    members gets a single row with empty member columns.
    """
    assignment_type = AssignmentType.parse(assignment_type)
    if assignment_type is AssignmentType.INDIVIDUAL:
        table = [["Student ID", "Student Name"]]
        for a in assignees:
            if not a.is_group:
                table.append([a.id, a.name])
        return table

    table = [["Group ID", "Group Name", "Member ID", "Member Name"]]
    for a in assignees:
        if not a.is_group:
            continue
        if not a.members:
            table.append([a.id, a.name, "", ""])
        for member in a.parsed_members():
            table.append([a.id, a.name, member.id, member.name])
    return table


def write_csv(
    table: Sequence[Sequence[str]],
    destination: Path | TextIO,
    delimiter: str = ",",
) -> None:
    """Write a table to a file path or an open text stream."""
    if isinstance(destination, Path):
        destination.parent.mkdir(parents=True, exist_ok=True)
        with open(destination, "w", encoding="utf-8", newline="") as f:
            csv.writer(f, delimiter=delimiter).writerows(table)
        logger.info(f"Wrote {len(table)} rows to {destination}")
        return
    csv.writer(destination, delimiter=delimiter).writerows(table)


def to_csv_text(table: Sequence[Sequence[str]], delimiter: str = ",") -> str:
    buffer = io.StringIO()
    csv.writer(buffer, delimiter=delimiter, lineterminator="\n").writerows(table)
    return buffer.getvalue()
