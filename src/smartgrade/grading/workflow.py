"""Assessment updates.

Each function takes the current assessment and returns an updated copy with
``total_score`` recomputed. Locked assessments ignore score changes.
"""

from dataclasses import replace
from typing import Mapping

from ..rubrics.models import Rubric
from ..utils.ids import IdGenerator
from ..utils.logging import get_logger
from .composite import grade_assessment
from .models import Assessment, GradeEntry, now_ms
from .peer import submit_peer_evaluations

logger = get_logger(__name__)

UNKNOWN_LEVEL_ID = "unknown"


def recompute(rubric: Rubric, assessment: Assessment) -> Assessment:
    """Prune stale entries, resolve their scores and refresh ``total_score``."""
    grade = grade_assessment(rubric, assessment)
    return replace(
        assessment,
        entries=grade.breakdown.entries,
        total_score=grade.total_score,
        max_score=100.0,
    )


def _with_entry(
    rubric: Rubric, assessment: Assessment, entry: GradeEntry
) -> Assessment:
    entries = [e for e in assessment.entries if e.criterion_id != entry.criterion_id]
    entries.append(entry)
    updated = replace(assessment, entries=entries, last_updated=now_ms())
    return recompute(rubric, updated)


def set_level_score(
    rubric: Rubric, assessment: Assessment, criterion_id: str, level_id: str
) -> Assessment:
    """Select a performance level for a criterion."""
    if assessment.locked:
        logger.info(f"Assessment {assessment.id} is locked; score not changed")
        return assessment

    criterion = rubric.find_criterion(criterion_id)
    level = criterion.find_level(level_id) if criterion else None
    score = level.score if level else 0.0
    return _with_entry(rubric, assessment, GradeEntry(criterion_id, level_id, score))


def set_custom_score(
    rubric: Rubric, assessment: Assessment, criterion_id: str, score: float
) -> Assessment:
    """Store a typed score, linked to the level nearest to it."""
    if assessment.locked:
        logger.info(f"Assessment {assessment.id} is locked; score not changed")
        return assessment

    criterion = rubric.find_criterion(criterion_id)
    if criterion is None:
        logger.debug(f"Unknown criterion {criterion_id}; custom score ignored")
        return assessment

    level = criterion.closest_level(score)
    level_id = level.id if level else UNKNOWN_LEVEL_ID
    return _with_entry(rubric, assessment, GradeEntry(criterion_id, level_id, float(score)))


def set_feedback(assessment: Assessment, feedback: str) -> Assessment:
    return replace(assessment, feedback=feedback, last_updated=now_ms())


def set_submission_text(assessment: Assessment, text: str) -> Assessment:
    return replace(assessment, submission_text=text, last_updated=now_ms())


def set_locked(assessment: Assessment, locked: bool) -> Assessment:
    return replace(assessment, locked=locked, last_updated=now_ms())


def record_peer_reviews(
    rubric: Rubric,
    assessment: Assessment,
    evaluator: str,
    scores: Mapping[str, float],
    feedback: Mapping[str, str] | None = None,
    id_generator: IdGenerator | None = None,
) -> Assessment:
    """Save one member's peer reviews, replacing any earlier submission."""
    evaluations = submit_peer_evaluations(
        assessment.peer_evaluations, evaluator, scores, feedback, id_generator
    )
    updated = replace(assessment, peer_evaluations=evaluations, last_updated=now_ms())
    return recompute(rubric, updated)
