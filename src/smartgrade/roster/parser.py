"""
Roster import from pasted text or CSV.

Accepted shapes, one record per line:

    Individual:  ``ID, Name`` or ``Name`` (optional header row)
    Group:       ``Group, Member`` rows aggregated per group, a headed CSV
                 with group id/name and member id/name columns, or the
                 custom ``Group: Member1; Member2`` form

Parsing never raises on malformed text. Each problem line becomes a
message in ``RosterImport.errors`` and the valid lines are still imported.
"""

import csv
import re
from dataclasses import dataclass, field
from typing import Iterable

from ..rubrics.models import AssignmentType
from ..utils.ids import IdGenerator, UuidGenerator, unique_id
from ..utils.logging import get_logger
from .models import Assignee, format_member

logger = get_logger(__name__)

HEADER_KEYWORDS = ("id", "name", "group")
EMPTY_INPUT_ERROR = "File appears to be empty."

_EDGE_QUOTES = re.compile(r"^[\"']|[\"']$")


# -----------------------------------------------------------------------------
# Data Classes
# -----------------------------------------------------------------------------


@dataclass
class RosterImport:
    """Result of a roster import."""

    created: list[Assignee] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.created)


@dataclass
class ColumnMap:
    """Column positions for each roster field; None when the column is absent."""

    id: int | None = 0
    name: int | None = 1
    group_id: int | None = 0
    group_name: int | None = 1
    member_id: int | None = 2
    member_name: int | None = 3
    id_from_header: bool = False
    group_ids_from_header: bool = False


@dataclass
class _PendingGroup:
    id: str
    name: str
    members: list[str] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Field Helpers
# -----------------------------------------------------------------------------


def clean_field(value: str | None) -> str:
    """Drop one surrounding quote character on each side and trim."""
    if not value:
        return ""
    return _EDGE_QUOTES.sub("", value).strip()


def split_columns(line: str) -> list[str]:
    """Split a delimited line into cleaned fields.

    Double-quoted fields may contain commas. Lines the csv module cannot
    tokenize are split on bare commas instead.
    """
    try:
        fields = next(csv.reader([line], skipinitialspace=True), [])
    except csv.Error:
        fields = line.split(",")
    return [clean_field(f) for f in fields]


def _column(cols: list[str], index: int | None) -> str:
    if index is None or index < 0 or index >= len(cols):
        return ""
    return cols[index]


def _first_index(headers: list[str], predicate) -> int | None:
    for index, header in enumerate(headers):
        if predicate(header):
            return index
    return None


def is_header_line(line: str) -> bool:
    """A header mentions id, name or group (case-insensitive)."""
    lowered = line.lower()
    return any(keyword in lowered for keyword in HEADER_KEYWORDS)


def map_columns(header_line: str, assignment_type: AssignmentType) -> ColumnMap:
    """Locate roster columns by substring match on header tokens.

    Args:
        header_line: The first line of the input
        assignment_type: Which set of columns to look for

    Returns:
        ColumnMap with fallback positions for columns not found
    """
    headers = [h.lower() for h in split_columns(header_line)]
    columns = ColumnMap()

    if assignment_type is AssignmentType.INDIVIDUAL:
        id_index = _first_index(headers, lambda h: "id" in h and "group" not in h)
        name_index = _first_index(
            headers, lambda h: "name" in h and "group" not in h
        )
        columns.id_from_header = id_index is not None
        columns.id = 0 if id_index is None else id_index
        columns.name = 1 if name_index is None else name_index
    else:
        columns.group_id = _first_index(
            headers, lambda h: h in ("group id", "group_id", "gid")
        )
        group_name = _first_index(headers, lambda h: "group" in h and "name" in h)
        columns.member_id = _first_index(
            headers, lambda h: "student id" in h or "member id" in h
        )
        member_name = _first_index(
            headers, lambda h: "student name" in h or "member name" in h
        )
        columns.group_name = 0 if group_name is None else group_name
        columns.member_name = 1 if member_name is None else member_name
        columns.group_ids_from_header = (
            columns.group_id is not None and columns.member_id is not None
        )

    return columns


# -----------------------------------------------------------------------------
# Parser
# -----------------------------------------------------------------------------


class RosterParser:
    """Parses roster text into individual or group assignees."""

    def __init__(self, id_generator: IdGenerator | None = None):
        """Initialize the parser.

        Args:
            id_generator: Source of ids for rows that do not carry one
        """
        self.id_generator = id_generator or UuidGenerator()

    def parse(
        self,
        text: str,
        assignment_type: AssignmentType | str,
        existing: Iterable[Assignee] = (),
    ) -> RosterImport:
        """Parse roster text.

        Args:
            text: Raw pasted text or CSV file content
            assignment_type: ``individual`` or ``group``
            existing: Current roster, used for id collision checks

        Returns:
            RosterImport with the new assignees and per-line messages
        """
        assignment_type = AssignmentType.parse(assignment_type)
        result = RosterImport()

        lines = [line for line in re.split(r"\r?\n", text or "") if line.strip()]
        if not lines:
            result.errors.append(EMPTY_INPUT_ERROR)
            return result

        used_ids = {a.id for a in existing}
        pending: dict[str, _PendingGroup] = {}

        has_header = is_header_line(lines[0])
        if has_header:
            columns = map_columns(lines[0], assignment_type)
            start = 1
        else:
            columns = ColumnMap()
            start = 0

        for index in range(start, len(lines)):
            line = lines[index]
            line_no = index + 1

            # Rows under a full group header are CSV even when a name has a colon
            custom_format = ":" in line and not columns.group_ids_from_header
            if assignment_type is AssignmentType.GROUP and custom_format:
                group = self._parse_custom_group(line, line_no, used_ids, result.errors)
                if group:
                    result.created.append(group)
                continue

            cols = split_columns(line)
            if assignment_type is AssignmentType.INDIVIDUAL:
                student = self._parse_individual(
                    cols, columns, line_no, used_ids, result.errors
                )
                if student:
                    result.created.append(student)
            else:
                self._collect_group_row(
                    cols, columns, has_header, line_no, used_ids, pending, result.errors
                )

        for group in pending.values():
            result.created.append(
                Assignee(
                    id=group.id,
                    name=group.name,
                    type=AssignmentType.GROUP,
                    members=group.members,
                )
            )

        logger.info(
            f"Roster import ({assignment_type.value}): "
            f"{result.success_count} added, {len(result.errors)} messages"
        )
        return result

    def _resolve_id(
        self, raw_id: str, line_no: int, used_ids: set[str], errors: list[str]
    ) -> str:
        if not raw_id:
            new_id = self.id_generator.new_id()
            while new_id in used_ids:
                new_id = self.id_generator.new_id()
            used_ids.add(new_id)
            return new_id

        resolved = raw_id
        if raw_id in used_ids:
            resolved = unique_id(raw_id, used_ids)
            errors.append(
                f"Line {line_no}: Duplicate ID detected. Assigned new ID: {resolved}"
            )
        used_ids.add(resolved)
        return resolved

    def _parse_individual(
        self,
        cols: list[str],
        columns: ColumnMap,
        line_no: int,
        used_ids: set[str],
        errors: list[str],
    ) -> Assignee | None:
        student_id = _column(cols, columns.id)
        name = _column(cols, columns.name)

        # A lone column is a name unless a header declared it an id column
        if len(cols) == 1 and not columns.id_from_header:
            student_id = ""
            name = cols[0]

        if not name:
            errors.append(f"Line {line_no}: Skipped (Missing Name)")
            return None

        student_id = self._resolve_id(student_id, line_no, used_ids, errors)
        return Assignee(id=student_id, name=name, type=AssignmentType.INDIVIDUAL)

    def _parse_custom_group(
        self, line: str, line_no: int, used_ids: set[str], errors: list[str]
    ) -> Assignee | None:
        """Parse ``GroupSpec: Member1; Member2``.

        GroupSpec is ``id, name`` or a bare name. Members are split on ``;``.
        Without any ``;`` a comma list is read as bare names, so an
        ``id, name`` member cannot be expressed in that form.
        """
        parts = line.split(":")
        group_part = parts[0]
        members_part = parts[1] if len(parts) > 1 else ""

        group_id = ""
        group_name = clean_field(group_part)
        if "," in group_name:
            raw_id, raw_name = group_name.split(",", 1)
            group_id = clean_field(raw_id)
            group_name = clean_field(raw_name)

        if not group_name:
            errors.append(f"Line {line_no}: Skipped (Missing Group Name)")
            return None

        if ";" not in members_part and "," in members_part:
            raw_members = members_part.split(",")
        else:
            raw_members = members_part.split(";")
        members = [m for m in (clean_field(r) for r in raw_members) if m]

        group_id = self._resolve_id(group_id, line_no, used_ids, errors)
        return Assignee(
            id=group_id, name=group_name, type=AssignmentType.GROUP, members=members
        )

    def _collect_group_row(
        self,
        cols: list[str],
        columns: ColumnMap,
        has_header: bool,
        line_no: int,
        used_ids: set[str],
        pending: dict[str, _PendingGroup],
        errors: list[str],
    ) -> None:
        if has_header or len(cols) >= 4:
            group_id = _column(cols, columns.group_id)
            group_name = _column(cols, columns.group_name)
            member_id = _column(cols, columns.member_id)
            member_name = _column(cols, columns.member_name)
        else:
            # Headerless "Group, Member" rows
            group_id = ""
            group_name = _column(cols, 0) if len(cols) >= 2 else ""
            member_id = ""
            member_name = _column(cols, 1)

        if not group_name:
            errors.append(f"Line {line_no}: Skipped (Missing Group Name)")
            return

        key = group_id or group_name
        if key not in pending:
            resolved_id = self._resolve_id(group_id, line_no, used_ids, errors)
            pending[key] = _PendingGroup(id=resolved_id, name=group_name)

        if member_name:
            pending[key].members.append(format_member(member_id, member_name))


def parse_roster(
    text: str,
    assignment_type: AssignmentType | str,
    existing: Iterable[Assignee] = (),
    id_generator: IdGenerator | None = None,
) -> RosterImport:
    """Parse roster text with a one-off :class:`RosterParser`."""
    return RosterParser(id_generator).parse(text, assignment_type, existing)
