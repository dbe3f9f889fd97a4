"""Peer evaluation aggregation and submission bookkeeping."""

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Sequence

from ..roster.models import Assignee
from ..utils.ids import IdGenerator, UuidGenerator
from ..utils.logging import get_logger
from .models import PeerEvaluation

logger = get_logger(__name__)

SubjectMatcher = Callable[[str, str], bool]

# Defaults when a subject has no evaluations
NO_PEER_WEIGHT_AVERAGE = 100.0
MISSING_REVIEWS_AVERAGE = 0.0

MIN_PEER_SCORE = 0.0
MAX_PEER_SCORE = 100.0


def match_subject_exact(evaluation_subject: str, subject: str) -> bool:
    return evaluation_subject == subject


def match_subject_contains(evaluation_subject: str, subject: str) -> bool:
    """Loose match: the evaluation subject mentions ``subject`` (a student id).

    Used when only a student id is known but evaluations store full member
    strings. A short id can match other members whose string contains it.
    """
    return bool(subject) and subject in evaluation_subject


def evaluations_for(
    evaluations: Iterable[PeerEvaluation],
    subject: str,
    match: SubjectMatcher = match_subject_exact,
) -> list[PeerEvaluation]:
    return [e for e in evaluations if match(e.subject, subject)]


def peer_average(
    evaluations: Iterable[PeerEvaluation],
    subject: str | None,
    peer_weight_pct: float,
    match: SubjectMatcher = match_subject_exact,
) -> float:
    """Average peer score (0-100) received by ``subject``.

    With no peer weight the peer part is void and counts as full marks, so
    it never lowers a grade that does not use peer evaluation. With a peer
    weight, a subject nobody has reviewed yet gets 0.

    Args:
        evaluations: All evaluations of the assessment
        subject: Member identifier string of the evaluated student, or None
            to average every evaluation of the assessment (whole group)
        peer_weight_pct: Peer share of the assignment (0 if not applicable)
        match: How evaluation subjects are compared with ``subject``

    Returns:
        Average score between 0 and 100
    """
    if not peer_weight_pct:
        return NO_PEER_WEIGHT_AVERAGE

    if subject is None:
        received = list(evaluations)
    else:
        received = evaluations_for(evaluations, subject, match)
    if not received:
        return MISSING_REVIEWS_AVERAGE
    return sum(e.score for e in received) / len(received)


def peer_form_score(answers: Sequence[float]) -> int:
    """Turn questionnaire answers on a 1-10 scale into a 0-100 score.

    Raises:
        ValueError: If no answers are given
    """
    if not answers:
        raise ValueError("At least one answer is required")
    return round_half_up(sum(answers) / len(answers) * 10)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def teammates(group: Assignee, member: str) -> list[str]:
    """Members an evaluator has to review: everyone else in the group."""
    return [m for m in group.members if m != member]


def submit_peer_evaluations(
    evaluations: Iterable[PeerEvaluation],
    evaluator: str,
    scores: Mapping[str, float],
    feedback: Mapping[str, str] | None = None,
    id_generator: IdGenerator | None = None,
) -> list[PeerEvaluation]:
    """Record one evaluator's reviews.

    A resubmission replaces everything previously submitted by the same
    evaluator, so each (evaluator, subject) pair has at most one review.

    Args:
        evaluations: Current evaluations of the group assessment
        evaluator: Member string of the reviewer
        scores: Score (0-100) per subject member string
        feedback: Optional comment per subject
        id_generator: Source of evaluation ids

    Returns:
        New list of evaluations; the input is not modified

    Raises:
        ValueError: If a score is outside 0-100
    """
    for subject, score in scores.items():
        if not MIN_PEER_SCORE <= score <= MAX_PEER_SCORE:
            raise ValueError(f"Peer score for {subject} must be between 0 and 100, got {score}")

    ids = id_generator or UuidGenerator()
    feedback = feedback or {}

    evaluations = list(evaluations)
    kept = [e for e in evaluations if e.evaluator != evaluator]
    replaced = len(evaluations) - len(kept)
    if replaced:
        logger.debug(f"Replacing {replaced} previous reviews by {evaluator}")

    for subject, score in scores.items():
        kept.append(
            PeerEvaluation(
                id=ids.new_id(),
                evaluator=evaluator,
                subject=subject,
                score=float(score),
                feedback=feedback.get(subject, ""),
            )
        )
    return kept


@dataclass
class PeerReviewStatus:
    """Peer review progress of one group member."""

    member: str
    reviews_given: int
    reviews_received: int
    average_received: int

    @property
    def submitted(self) -> bool:
        return self.reviews_given > 0


def review_status(evaluations: Sequence[PeerEvaluation], member: str) -> PeerReviewStatus:
    """Summarize what ``member`` has given and received."""
    given = [e for e in evaluations if e.evaluator == member]
    received = evaluations_for(evaluations, member)
    average = (
        round_half_up(sum(e.score for e in received) / len(received))
        if received
        else 0
    )
    return PeerReviewStatus(
        member=member,
        reviews_given=len(given),
        reviews_received=len(received),
        average_received=average,
    )
