"""Validation and enrichment of externally generated rubric documents.

Rubric-generation services return a bare document without identifiers::

    {"title": ..., "description": ..., "criteria": [
        {"title": ..., "description": ..., "weight": 1,
         "levels": [{"label": ..., "score": ..., "description": ...}]}]}

The document is validated here before any ids are assigned to it.
"""

from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import RubricValidationError
from ..utils.ids import IdGenerator, UuidGenerator
from ..utils.logging import get_logger
from .models import AssignmentType, Rubric, RubricCriterion, RubricLevel

logger = get_logger(__name__)


class LevelDocument(BaseModel):
    """One performance level as produced by a rubric generator."""

    model_config = ConfigDict(extra="ignore")

    label: str = Field(..., min_length=1)
    score: float = Field(..., ge=0.0)
    description: str = ""


class CriterionDocument(BaseModel):
    """One criterion as produced by a rubric generator."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1)
    description: str = ""
    weight: float = Field(1.0, ge=0.0)
    levels: list[LevelDocument] = Field(default_factory=list)


class RubricDocument(BaseModel):
    """A candidate rubric without identifiers."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1)
    description: str = ""
    criteria: list[CriterionDocument]


def validate_rubric_document(data: Any) -> RubricDocument:
    """Check a rubric document and return its typed form.

    Args:
        data: Decoded JSON from the rubric source

    Returns:
        Validated RubricDocument

    Raises:
        RubricValidationError: Listing every problem found
    """
    try:
        return RubricDocument.model_validate(data)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise RubricValidationError(problems) from e


def enrich_rubric(
    document: RubricDocument,
    id_generator: IdGenerator | None = None,
    assignment_type: AssignmentType = AssignmentType.INDIVIDUAL,
) -> Rubric:
    """Assign fresh ids to the rubric, each criterion and each level.

    Args:
        document: Validated rubric document
        id_generator: Source of new ids (UUID4 by default)
        assignment_type: Type of the assignment the rubric will govern

    Returns:
        A Rubric with default weight settings
    """
    ids = id_generator or UuidGenerator()
    rubric = Rubric(
        id=ids.new_id(),
        title=document.title,
        description=document.description,
        type=assignment_type,
        criteria=[
            RubricCriterion(
                id=ids.new_id(),
                title=c.title,
                description=c.description,
                weight=c.weight,
                levels=[
                    RubricLevel(
                        id=ids.new_id(),
                        label=l.label,
                        score=l.score,
                        description=l.description,
                    )
                    for l in c.levels
                ],
            )
            for c in document.criteria
        ],
    )

    unscorable = [c.title for c in rubric.criteria if not c.is_scorable]
    if unscorable:
        logger.warning(f"Criteria without levels are not scorable: {unscorable}")
    return rubric


class RubricGenerator(Protocol):
    """External service that drafts a rubric document from a prompt."""

    def generate(self, prompt: str) -> dict[str, Any]: ...


def generate_rubric(
    generator: RubricGenerator,
    prompt: str,
    assignment_type: AssignmentType = AssignmentType.INDIVIDUAL,
    id_generator: IdGenerator | None = None,
) -> Rubric:
    """Ask ``generator`` for a rubric, then validate and enrich its answer.

    Raises:
        RubricValidationError: If the generated document is malformed
    """
    document = validate_rubric_document(generator.generate(prompt))
    return enrich_rubric(document, id_generator, assignment_type)


def scorable_criteria(rubric: Rubric) -> list[RubricCriterion]:
    """Criteria that have at least one performance level."""
    return [c for c in rubric.criteria if c.is_scorable]
