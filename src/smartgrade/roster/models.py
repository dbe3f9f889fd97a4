"""Roster data models."""

from dataclasses import dataclass, field
from typing import Any, Iterable

from ..rubrics.models import AssignmentType


@dataclass(frozen=True)
class Member:
    """A group member decoded from its ``"id, name"`` string form."""

    id: str
    name: str


def parse_member(member: str) -> Member:
    """Split a member string into id and name.

    ``"S1, Ana Lopez"`` becomes ``Member("S1", "Ana Lopez")``; a string
    without a comma is a bare name with an empty id. Only the first comma
    separates the id, so names may contain commas.
    """
    if "," in member:
        member_id, name = member.split(",", 1)
        return Member(id=member_id.strip(), name=name.strip())
    return Member(id="", name=member.strip())


def format_member(member_id: str, name: str) -> str:
    """Inverse of :func:`parse_member`."""
    member_id = member_id.strip()
    name = name.strip()
    return f"{member_id}, {name}" if member_id else name


@dataclass
class Assignee:
    """A student or a group that can be assessed.

    Ids are unique across the whole roster; individuals and groups share
    one id space. Group members are stored as member strings and need not
    carry a roster id.
    """

    id: str
    name: str
    type: AssignmentType = AssignmentType.INDIVIDUAL
    members: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.type = AssignmentType.parse(self.type)

    @property
    def is_group(self) -> bool:
        return self.type is AssignmentType.GROUP

    def parsed_members(self) -> list[Member]:
        return [parse_member(m) for m in self.members]

    def has_member_id(self, student_id: str) -> bool:
        return any(m.id == student_id for m in self.parsed_members())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Assignee":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            type=AssignmentType.parse(data.get("type")),
            members=list(data.get("members") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
        }
        if self.is_group:
            data["members"] = list(self.members)
        return data


def find_group_for_student(
    assignees: Iterable[Assignee], student_id: str
) -> Assignee | None:
    """First group whose member list contains ``student_id`` as a member id."""
    for assignee in assignees:
        if assignee.is_group and assignee.has_member_id(student_id):
            return assignee
    return None
