"""
Grading module.

Score aggregation, peer evaluation, composite grades and assessment updates.
"""

from .autograde import (
    AutoGrader,
    AutoGradeResolution,
    AutoGradeResult,
    apply_auto_grade,
    auto_grade_assessment,
    resolve_ratings,
)
from .composite import (
    AssessmentGrade,
    CompositeGrade,
    GradeStatus,
    composite_grade,
    grade_assessment,
    pending_grade,
)
from .models import Assessment, GradeEntry, PeerEvaluation, assessment_key
from .peer import (
    PeerReviewStatus,
    match_subject_contains,
    match_subject_exact,
    peer_average,
    peer_form_score,
    review_status,
    submit_peer_evaluations,
    teammates,
)
from .scoring import ScoreBreakdown, prune_stale_entries, score_entries
from .workflow import (
    recompute,
    record_peer_reviews,
    set_custom_score,
    set_feedback,
    set_level_score,
    set_locked,
    set_submission_text,
)

__all__ = [
    "Assessment",
    "GradeEntry",
    "PeerEvaluation",
    "assessment_key",
    "ScoreBreakdown",
    "score_entries",
    "prune_stale_entries",
    "peer_average",
    "peer_form_score",
    "match_subject_exact",
    "match_subject_contains",
    "submit_peer_evaluations",
    "review_status",
    "teammates",
    "PeerReviewStatus",
    "CompositeGrade",
    "AssessmentGrade",
    "GradeStatus",
    "composite_grade",
    "grade_assessment",
    "pending_grade",
    "recompute",
    "set_level_score",
    "set_custom_score",
    "set_feedback",
    "set_submission_text",
    "set_locked",
    "record_peer_reviews",
    "AutoGrader",
    "AutoGradeResult",
    "AutoGradeResolution",
    "resolve_ratings",
    "apply_auto_grade",
    "auto_grade_assessment",
]
