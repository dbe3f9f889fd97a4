"""Grading data models."""

import time
from dataclasses import dataclass, field
from typing import Any


def assessment_key(rubric_id: str, assignee_id: str) -> str:
    """Composite key identifying the assessment of one assignee on one rubric."""
    return f"{rubric_id}_{assignee_id}"


def now_ms() -> int:
    return int(time.time() * 1000)


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise TypeError(f"Score must be numeric, got {type(value).__name__}")
    return float(value)


@dataclass
class GradeEntry:
    """Score given for one criterion.

    ``score`` may differ from the nominal score of ``level_id`` when the
    teacher typed a custom value. ``None`` means "use the level's score".
    """

    criterion_id: str
    level_id: str
    score: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GradeEntry":
        return cls(
            criterion_id=data["criterionId"],
            level_id=data.get("levelId", ""),
            score=_optional_float(data.get("score")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "criterionId": self.criterion_id,
            "levelId": self.level_id,
            "score": self.score,
        }


@dataclass
class PeerEvaluation:
    """A score (0-100) one group member gives another."""

    id: str
    evaluator: str
    subject: str
    score: float
    feedback: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PeerEvaluation":
        score = _optional_float(data.get("score"))
        return cls(
            id=data["id"],
            evaluator=data.get("evaluator", ""),
            subject=data.get("subject", ""),
            score=0.0 if score is None else score,
            feedback=data.get("feedback", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "evaluator": self.evaluator,
            "subject": self.subject,
            "score": self.score,
            "feedback": self.feedback,
        }


@dataclass
class Assessment:
    """Scored record linking one rubric to one assignee.

    ``total_score`` is derived (0-100, percentage of the assignment) and is
    recomputed by the workflow functions on every change.
    """

    id: str
    rubric_id: str
    assignee_id: str
    entries: list[GradeEntry] = field(default_factory=list)
    peer_evaluations: list[PeerEvaluation] = field(default_factory=list)
    total_score: float = 0.0
    max_score: float = 100.0
    feedback: str = ""
    submission_text: str = ""
    locked: bool = False
    last_updated: int = field(default_factory=now_ms)

    @classmethod
    def blank(cls, rubric_id: str, assignee_id: str) -> "Assessment":
        """Empty assessment used until the first score or evaluation is saved."""
        return cls(
            id=assessment_key(rubric_id, assignee_id),
            rubric_id=rubric_id,
            assignee_id=assignee_id,
        )

    def entry_for(self, criterion_id: str) -> GradeEntry | None:
        for entry in self.entries:
            if entry.criterion_id == criterion_id:
                return entry
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Assessment":
        rubric_id = data["rubricId"]
        assignee_id = data["assigneeId"]
        return cls(
            id=data.get("id") or assessment_key(rubric_id, assignee_id),
            rubric_id=rubric_id,
            assignee_id=assignee_id,
            entries=[GradeEntry.from_dict(e) for e in data.get("entries") or []],
            peer_evaluations=[
                PeerEvaluation.from_dict(p) for p in data.get("peerEvaluations") or []
            ],
            total_score=float(data.get("totalScore", 0.0)),
            max_score=float(data.get("maxScore", 100.0)),
            feedback=data.get("feedback", ""),
            submission_text=data.get("submissionText") or "",
            locked=bool(data.get("locked", False)),
            last_updated=int(data.get("lastUpdated") or now_ms()),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "rubricId": self.rubric_id,
            "assigneeId": self.assignee_id,
            "entries": [e.to_dict() for e in self.entries],
            "peerEvaluations": [p.to_dict() for p in self.peer_evaluations],
            "totalScore": self.total_score,
            "maxScore": self.max_score,
            "feedback": self.feedback,
            "submissionText": self.submission_text,
            "locked": self.locked,
            "lastUpdated": self.last_updated,
        }
