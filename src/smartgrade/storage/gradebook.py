"""Gradebook state and its persistence.

A gradebook holds everything one teacher works with: rubrics, the roster
and assessments keyed by ``{rubric_id}_{assignee_id}``. It is saved as one
JSON document under ``smartgrade_data_{owner}``.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from ..config.models import GradingDefaults
from ..errors import RubricValidationError, StoreError
from ..grading.models import Assessment, assessment_key
from ..roster.models import Assignee
from ..roster.parser import RosterImport, RosterParser
from ..rubrics.models import AssignmentType, Rubric
from ..utils.ids import IdGenerator, ShortIdGenerator
from ..utils.logging import get_logger
from .store import KeyValueStore

logger = get_logger(__name__)

DEFAULT_RUBRIC_ID = "default"


def default_rubric(defaults: GradingDefaults | None = None) -> Rubric:
    defaults = defaults or GradingDefaults()
    return Rubric(
        id=DEFAULT_RUBRIC_ID,
        title="Assignment 1",
        description="General assessment rubric",
        type=AssignmentType.INDIVIDUAL,
        assignment_weight=defaults.assignment_weight,
        peer_eval_weight=defaults.peer_eval_weight,
        passing_percentage=defaults.passing_percentage,
    )


@dataclass
class Gradebook:
    rubrics: list[Rubric] = field(default_factory=lambda: [default_rubric()])
    assignees: list[Assignee] = field(default_factory=list)
    assessments: dict[str, Assessment] = field(default_factory=dict)
    current_rubric_id: str = DEFAULT_RUBRIC_ID

    # -- lookups ---------------------------------------------------------

    def rubric(self, rubric_id: str) -> Rubric | None:
        for rubric in self.rubrics:
            if rubric.id == rubric_id:
                return rubric
        return None

    @property
    def current_rubric(self) -> Rubric:
        return self.rubric(self.current_rubric_id) or self.rubrics[0]

    def assignee(self, assignee_id: str) -> Assignee | None:
        for assignee in self.assignees:
            if assignee.id == assignee_id:
                return assignee
        return None

    def assessment_for(self, rubric_id: str, assignee_id: str) -> Assessment:
        """Stored assessment, or a blank one that is not stored yet."""
        key = assessment_key(rubric_id, assignee_id)
        return self.assessments.get(key) or Assessment.blank(rubric_id, assignee_id)

    # -- changes ---------------------------------------------------------

    def save_assessment(self, assessment: Assessment) -> None:
        self.assessments[assessment.id] = assessment

    def add_rubric(self, rubric: Rubric) -> None:
        if self.rubric(rubric.id) is not None:
            raise ValueError(f"Rubric already exists: {rubric.id}")
        self.rubrics.append(rubric)

    def update_rubric(self, rubric: Rubric) -> None:
        """Replace a rubric; individual rubrics lose any peer weight."""
        if not rubric.is_group:
            rubric.peer_eval_weight = 0.0
        self.rubrics = [rubric if r.id == rubric.id else r for r in self.rubrics]

    def remove_rubric(self, rubric_id: str) -> None:
        """Delete a rubric and every assessment made with it.

        Raises:
            ValueError: If it is the last remaining rubric
        """
        if len(self.rubrics) <= 1:
            raise ValueError("Cannot delete the last assignment")
        self.rubrics = [r for r in self.rubrics if r.id != rubric_id]
        self.assessments = {
            k: a for k, a in self.assessments.items() if a.rubric_id != rubric_id
        }
        if self.current_rubric_id == rubric_id:
            self.current_rubric_id = self.rubrics[0].id

    def add_student(
        self, name: str, student_id: str = "", id_generator: IdGenerator | None = None
    ) -> Assignee:
        """Add one student by hand.

        Raises:
            ValueError: If the name is empty or the id is already taken
        """
        name = name.strip()
        if not name:
            raise ValueError("Name is required")
        student_id = student_id.strip() or (id_generator or ShortIdGenerator()).new_id()
        if self.assignee(student_id) is not None:
            raise ValueError(f"Student ID already exists: {student_id}")
        student = Assignee(id=student_id, name=name, type=AssignmentType.INDIVIDUAL)
        self.assignees.append(student)
        return student

    def import_roster(
        self,
        text: str,
        assignment_type: AssignmentType | str,
        id_generator: IdGenerator | None = None,
    ) -> RosterImport:
        """Parse roster text and append what was recognized."""
        result = RosterParser(id_generator).parse(text, assignment_type, self.assignees)
        self.assignees.extend(result.created)
        return result

    def remove_assignee(self, assignee_id: str) -> None:
        """Delete an assignee and all of its assessments."""
        self.assignees = [a for a in self.assignees if a.id != assignee_id]
        self.assessments = {
            k: a for k, a in self.assessments.items() if a.assignee_id != assignee_id
        }

    def remove_member(self, group_id: str, index: int) -> None:
        group = self.assignee(group_id)
        if group is None or not group.is_group:
            return
        if 0 <= index < len(group.members):
            del group.members[index]

    # -- serialization ---------------------------------------------------

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], defaults: GradingDefaults | None = None
    ) -> "Gradebook":
        rubrics = [Rubric.from_dict(r, defaults) for r in data.get("rubrics") or []]
        if not rubrics:
            rubrics = [default_rubric(defaults)]
        assessments = {}
        for key, raw in (data.get("assessments") or {}).items():
            assessments[key] = Assessment.from_dict(raw)
        return cls(
            rubrics=rubrics,
            assignees=[Assignee.from_dict(a) for a in data.get("assignees") or []],
            assessments=assessments,
            current_rubric_id=data.get("currentRubricId") or rubrics[0].id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rubrics": [r.to_dict() for r in self.rubrics],
            "assignees": [a.to_dict() for a in self.assignees],
            "assessments": {k: a.to_dict() for k, a in self.assessments.items()},
            "currentRubricId": self.current_rubric_id,
        }


def storage_key(owner: str) -> str:
    return f"smartgrade_data_{owner}"


class GradebookRepository:
    """Loads and saves one owner's gradebook in a key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        owner: str,
        defaults: GradingDefaults | None = None,
    ):
        self.store = store
        self.key = storage_key(owner)
        self.defaults = defaults

    def load(self) -> Gradebook:
        """Load the gradebook, or an empty one when nothing is stored.

        Raises:
            StoreError: If the stored document is not valid gradebook JSON
        """
        raw = self.store.get(self.key)
        if raw is None:
            logger.info(f"No gradebook stored under {self.key}; starting empty")
            return Gradebook(rubrics=[default_rubric(self.defaults)])
        try:
            data = json.loads(raw.decode("utf-8"))
            return Gradebook.from_dict(data, self.defaults)
        except (KeyError, TypeError, ValueError, RubricValidationError) as e:
            raise StoreError(f"Corrupt gradebook under {self.key}: {e}") from e

    def save(self, gradebook: Gradebook) -> None:
        payload = json.dumps(gradebook.to_dict(), ensure_ascii=False, indent=2)
        self.store.put(self.key, payload.encode("utf-8"))
        logger.debug(f"Saved gradebook {self.key}")

    def delete(self) -> None:
        self.store.delete(self.key)
