"""Teacher rubric scoring.

Every place that needs the rubric part of a grade (grading, export,
auto-grade import) goes through :func:`score_entries`.
"""

from dataclasses import dataclass, field
from typing import Iterable

from ..rubrics.models import Rubric, RubricCriterion
from ..utils.logging import get_logger
from .models import GradeEntry

logger = get_logger(__name__)


@dataclass
class ScoreBreakdown:
    """Rubric score of one set of entries."""

    raw_score: float
    max_raw_score: float
    percentage: float  # 0-1
    entries: list[GradeEntry] = field(default_factory=list)


def safe_ratio(numerator: float, denominator: float) -> float:
    """``numerator / denominator``, or 0 when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def entry_score(entry: GradeEntry, criterion: RubricCriterion) -> float:
    """Score of an entry before weighting.

    Entries without an explicit score take their level's nominal score.
    """
    if entry.score is not None:
        return entry.score
    level = criterion.find_level(entry.level_id)
    return level.score if level else 0.0


def prune_stale_entries(rubric: Rubric, entries: Iterable[GradeEntry]) -> list[GradeEntry]:
    """Drop entries whose criterion no longer exists in the rubric."""
    valid = []
    for entry in entries:
        if rubric.find_criterion(entry.criterion_id) is None:
            logger.debug(f"Dropping stale entry for criterion {entry.criterion_id}")
            continue
        valid.append(entry)
    return valid


def score_entries(rubric: Rubric, entries: Iterable[GradeEntry]) -> ScoreBreakdown:
    """Compute raw score, maximum and percentage of entries against a rubric.

    Args:
        rubric: The rubric the entries belong to
        entries: Grade entries, possibly including stale ones

    Returns:
        ScoreBreakdown whose ``entries`` are the valid entries with their
        effective (resolved) scores
    """
    max_raw = rubric.max_raw_score
    raw = 0.0
    resolved: list[GradeEntry] = []

    for entry in prune_stale_entries(rubric, entries):
        criterion = rubric.find_criterion(entry.criterion_id)
        score = entry_score(entry, criterion)
        raw += score * criterion.weight
        resolved.append(GradeEntry(entry.criterion_id, entry.level_id, score))

    return ScoreBreakdown(
        raw_score=raw,
        max_raw_score=max_raw,
        percentage=safe_ratio(raw, max_raw),
        entries=resolved,
    )
