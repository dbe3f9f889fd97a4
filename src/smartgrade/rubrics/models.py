"""Rubric data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config.models import GradingDefaults
from ..errors import RubricValidationError


class AssignmentType(str, Enum):
    """Whether an assignment is graded per student or per group."""

    INDIVIDUAL = "individual"
    GROUP = "group"

    @classmethod
    def parse(cls, value: "str | AssignmentType | None") -> "AssignmentType":
        if value is None:
            return cls.INDIVIDUAL
        return cls(value)


@dataclass
class RubricLevel:
    """A performance level within a criterion."""

    id: str
    label: str
    score: float
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RubricLevel":
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            score=float(data.get("score", 0)),
            description=data.get("description", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "score": self.score,
            "description": self.description,
        }


@dataclass
class RubricCriterion:
    """A single grading criterion within a rubric.

    ``weight`` is a multiplier applied to level scores, not a percentage.
    """

    id: str
    title: str
    description: str = ""
    weight: float = 1.0
    levels: list[RubricLevel] = field(default_factory=list)

    @property
    def max_level_score(self) -> float:
        """Highest nominal level score, 0 when there are no levels."""
        return max((level.score for level in self.levels), default=0.0)

    @property
    def effective_max_score(self) -> float:
        return max(0.0, self.max_level_score) * self.weight

    @property
    def is_scorable(self) -> bool:
        return bool(self.levels)

    def find_level(self, level_id: str) -> RubricLevel | None:
        for level in self.levels:
            if level.id == level_id:
                return level
        return None

    def find_level_by_label(self, label: str) -> RubricLevel | None:
        """Case-insensitive exact match on the level label."""
        wanted = label.lower()
        for level in self.levels:
            if level.label.lower() == wanted:
                return level
        return None

    def closest_level(self, score: float) -> RubricLevel | None:
        """Find the level whose nominal score is nearest to ``score``.

        Ties go to the level listed first.
        """
        if not self.levels:
            return None
        return min(self.levels, key=lambda level: abs(level.score - score))

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], default_weight: float = 1.0
    ) -> "RubricCriterion":
        weight = data.get("weight")
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            description=data.get("description", ""),
            weight=float(default_weight if weight is None else weight),
            levels=[RubricLevel.from_dict(l) for l in data.get("levels") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "weight": self.weight,
            "levels": [level.to_dict() for level in self.levels],
        }


@dataclass
class Rubric:
    """A complete grading rubric governing one assignment.

    ``assignment_weight`` is the share of the course grade (0-100).
    ``peer_eval_weight`` is the share of *this assignment* given to peer
    evaluation and only applies to group assignments.
    ``passing_percentage`` is expressed as a percentage of the assignment.
    """

    id: str
    title: str
    type: AssignmentType = AssignmentType.INDIVIDUAL
    criteria: list[RubricCriterion] = field(default_factory=list)
    assignment_weight: float = 100.0
    peer_eval_weight: float = 0.0
    passing_percentage: float = 50.0
    description: str = ""
    subject: str = ""
    assignment_brief: str = ""
    plos: list[str] = field(default_factory=list)
    clos: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.type = AssignmentType.parse(self.type)

    @property
    def is_group(self) -> bool:
        return self.type is AssignmentType.GROUP

    @property
    def effective_peer_weight(self) -> float:
        """Peer evaluation share, forced to 0 for individual assignments."""
        if not self.is_group:
            return 0.0
        return self.peer_eval_weight or 0.0

    @property
    def teacher_weight(self) -> float:
        return 100.0 - self.effective_peer_weight

    @property
    def max_raw_score(self) -> float:
        return sum(c.effective_max_score for c in self.criteria)

    @property
    def teacher_course_weight(self) -> float:
        """Course points available from the teacher rubric."""
        return self.assignment_weight * self.teacher_weight / 100

    @property
    def peer_course_weight(self) -> float:
        """Course points available from peer evaluation."""
        return self.assignment_weight * self.effective_peer_weight / 100

    @property
    def passing_points(self) -> float:
        """Course points a student needs to pass this assignment."""
        return self.assignment_weight * self.passing_percentage / 100

    def find_criterion(self, criterion_id: str) -> RubricCriterion | None:
        for criterion in self.criteria:
            if criterion.id == criterion_id:
                return criterion
        return None

    def find_criterion_by_title(self, title: str) -> RubricCriterion | None:
        """Case-insensitive exact match on the criterion title."""
        wanted = title.lower()
        for criterion in self.criteria:
            if criterion.title.lower() == wanted:
                return criterion
        return None

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], defaults: GradingDefaults | None = None
    ) -> "Rubric":
        """Build a rubric from its persisted (camelCase) representation.

        Args:
            data: Rubric mapping
            defaults: Values for settings missing from ``data``

        Returns:
            Parsed Rubric object

        Raises:
            RubricValidationError: If a weight or percentage is out of range
        """
        defaults = defaults or GradingDefaults()

        def setting(key: str, fallback: float) -> float:
            value = data.get(key)
            return float(fallback if value is None else value)

        rubric = cls(
            id=data["id"],
            title=data.get("title", ""),
            type=AssignmentType.parse(data.get("type")),
            criteria=[
                RubricCriterion.from_dict(c, defaults.criterion_weight)
                for c in data.get("criteria") or []
            ],
            assignment_weight=setting("assignmentWeight", defaults.assignment_weight),
            peer_eval_weight=setting("peerEvalWeight", defaults.peer_eval_weight),
            passing_percentage=setting(
                "passingPercentage", defaults.passing_percentage
            ),
            description=data.get("description", ""),
            subject=data.get("subject", ""),
            assignment_brief=data.get("assignmentBrief", ""),
            plos=list(data.get("plos") or []),
            clos=list(data.get("clos") or []),
        )
        problems = rubric.range_problems()
        if problems:
            raise RubricValidationError(problems)
        return rubric

    def range_problems(self) -> list[str]:
        """Settings outside their allowed range, one message per setting."""
        problems = []
        for key, value in (
            ("assignmentWeight", self.assignment_weight),
            ("peerEvalWeight", self.peer_eval_weight),
            ("passingPercentage", self.passing_percentage),
        ):
            if not 0 <= value <= 100:
                problems.append(f"{key}: must be between 0 and 100, got {value:g}")
        for criterion in self.criteria:
            if criterion.weight < 0:
                problems.append(
                    f"criteria.{criterion.id}.weight: must not be negative, "
                    f"got {criterion.weight:g}"
                )
        return problems

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "subject": self.subject,
            "type": self.type.value,
            "description": self.description,
            "criteria": [c.to_dict() for c in self.criteria],
            "passingPercentage": self.passing_percentage,
            "assignmentWeight": self.assignment_weight,
            "peerEvalWeight": self.effective_peer_weight,
            "assignmentBrief": self.assignment_brief,
            "plos": list(self.plos),
            "clos": list(self.clos),
        }

    def to_prompt_text(self) -> str:
        """Convert rubric to text for inclusion in AI prompts."""
        lines = [f"# Rubric: {self.title}", ""]
        if self.description:
            lines.extend([self.description, ""])

        lines.append("## Criteria:")
        for criterion in self.criteria:
            lines.append(f"\n### {criterion.title} (Weight: {criterion.weight})")
            if criterion.description:
                lines.append(criterion.description)

            if criterion.levels:
                lines.append("\nPerformance Levels:")
                for level in sorted(criterion.levels, key=lambda l: l.score, reverse=True):
                    lines.append(f"- {level.label}: {level.description}")

        return "\n".join(lines)
