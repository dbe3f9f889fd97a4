"""Applying ratings returned by an auto-grading service.

The service answers with rubric titles and labels rather than ids::

    {"ratings": [{"criterionTitle": ..., "levelLabel": ..., "explanation": ...}],
     "feedback": ...}

Ratings are matched to the rubric by case-insensitive exact comparison.
Ratings that match nothing are skipped without raising; they are listed in
``AutoGradeResolution.unresolved``.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from ..rubrics.models import Rubric
from ..utils.logging import get_logger
from .models import Assessment, GradeEntry, now_ms
from .workflow import recompute

logger = get_logger(__name__)


class Rating(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    criterion_title: str = Field(alias="criterionTitle")
    level_label: str = Field(alias="levelLabel")
    explanation: str | None = None


class AutoGradeResult(BaseModel):
    """Response of an auto-grading service."""

    model_config = ConfigDict(extra="ignore")

    ratings: list[Rating] = Field(default_factory=list)
    feedback: str = ""


class AutoGrader(Protocol):
    """External service that rates a submission against a rubric."""

    def grade(self, rubric: Rubric, submission_text: str) -> dict[str, Any]: ...


@dataclass
class AutoGradeResolution:
    entries: list[GradeEntry] = field(default_factory=list)
    unresolved: list[Rating] = field(default_factory=list)
    feedback: str = ""


def resolve_ratings(
    rubric: Rubric, result: AutoGradeResult | dict[str, Any]
) -> AutoGradeResolution:
    """Translate titles and labels into grade entries.

    Args:
        rubric: Rubric the ratings refer to
        result: Service response, raw or validated

    Returns:
        AutoGradeResolution with one entry per resolved rating
    """
    if not isinstance(result, AutoGradeResult):
        result = AutoGradeResult.model_validate(result)

    resolution = AutoGradeResolution(feedback=result.feedback)
    for rating in result.ratings:
        criterion = rubric.find_criterion_by_title(rating.criterion_title)
        level = criterion.find_level_by_label(rating.level_label) if criterion else None
        if level is None:
            logger.debug(
                f"Unresolved rating: {rating.criterion_title!r} / {rating.level_label!r}"
            )
            resolution.unresolved.append(rating)
            continue
        resolution.entries.append(GradeEntry(criterion.id, level.id, level.score))
    return resolution


def apply_auto_grade(
    rubric: Rubric, assessment: Assessment, result: AutoGradeResult | dict[str, Any]
) -> Assessment:
    """Merge resolved ratings into an assessment.

    Resolved criteria replace existing entries; other entries are kept.
    Non-empty service feedback replaces the assessment feedback.
    """
    if assessment.locked:
        logger.info(f"Assessment {assessment.id} is locked; auto-grade skipped")
        return assessment

    resolution = resolve_ratings(rubric, result)
    entries = list(assessment.entries)
    for entry in resolution.entries:
        entries = [e for e in entries if e.criterion_id != entry.criterion_id]
        entries.append(entry)

    updated = replace(
        assessment,
        entries=entries,
        feedback=resolution.feedback or assessment.feedback,
        last_updated=now_ms(),
    )
    return recompute(rubric, updated)


def auto_grade_assessment(
    rubric: Rubric, assessment: Assessment, grader: AutoGrader
) -> Assessment:
    """Ask ``grader`` to rate the stored submission text and apply the result.

    Assessments without submission text or rubrics without criteria are
    returned unchanged.
    """
    if not assessment.submission_text or not rubric.criteria:
        logger.info(f"Nothing to auto-grade for assessment {assessment.id}")
        return assessment
    response = grader.grade(rubric, assessment.submission_text)
    return apply_auto_grade(rubric, assessment, response)
