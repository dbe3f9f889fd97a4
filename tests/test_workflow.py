"""
Test: assessment updates: level and custom scores, locking, peer reviews,
auto-grade results.
"""
import pytest

from smartgrade.grading.autograde import (
    AutoGradeResult,
    apply_auto_grade,
    auto_grade_assessment,
    resolve_ratings,
)
from smartgrade.grading.models import Assessment, GradeEntry
from smartgrade.grading.workflow import (
    UNKNOWN_LEVEL_ID,
    record_peer_reviews,
    set_custom_score,
    set_feedback,
    set_level_score,
    set_locked,
    set_submission_text,
)


@pytest.fixture
def blank(individual_rubric):
    return Assessment.blank(individual_rubric.id, "S1")


class FakeGrader:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def grade(self, rubric, submission_text):
        self.calls.append(submission_text)
        return self.response


class TestScoreUpdates:
    def test_level_score_recomputes_total(self, individual_rubric, blank):
        updated = set_level_score(individual_rubric, blank, "c1", "c1-l10")
        assert updated.entry_for("c1").score == 10.0
        assert updated.total_score == pytest.approx(100 * 10 / 30)
        assert blank.entries == []

    def test_level_score_replaces_previous_entry(self, individual_rubric, blank):
        first = set_level_score(individual_rubric, blank, "c1", "c1-l10")
        second = set_level_score(individual_rubric, first, "c1", "c1-l5")
        assert len(second.entries) == 1
        assert second.entry_for("c1").level_id == "c1-l5"

    def test_custom_score_links_closest_level(self, individual_rubric, blank):
        updated = set_custom_score(individual_rubric, blank, "c1", 7)
        entry = updated.entry_for("c1")
        assert entry.level_id == "c1-l5"
        assert entry.score == 7.0

    def test_custom_score_without_levels(self, individual_rubric, blank):
        individual_rubric.criteria[0].levels = []
        updated = set_custom_score(individual_rubric, blank, "c1", 4)
        assert updated.entry_for("c1").level_id == UNKNOWN_LEVEL_ID

    def test_custom_score_unknown_criterion_ignored(self, individual_rubric, blank):
        assert set_custom_score(individual_rubric, blank, "nope", 4) is blank

    def test_locked_assessment_ignores_scores(self, individual_rubric, blank):
        locked = set_locked(blank, True)
        assert set_level_score(individual_rubric, locked, "c1", "c1-l10") is locked
        assert set_custom_score(individual_rubric, locked, "c1", 9) is locked

    def test_stale_entries_dropped_on_recompute(self, individual_rubric, blank):
        blank.entries = [GradeEntry("gone", "x", 5.0)]
        updated = set_level_score(individual_rubric, blank, "c1", "c1-l5")
        assert [e.criterion_id for e in updated.entries] == ["c1"]

    def test_feedback_and_submission_text(self, blank):
        assert set_feedback(blank, "Well done").feedback == "Well done"
        assert set_submission_text(blank, "essay").submission_text == "essay"


class TestRecordPeerReviews:
    def test_updates_total_with_peer_part(self, group_rubric, team_assessment, ids):
        updated = record_peer_reviews(
            group_rubric, team_assessment, "S2, Ben", {"S1, Ana": 100}, id_generator=ids
        )
        by_ben = [e for e in updated.peer_evaluations if e.evaluator == "S2, Ben"]
        assert [(e.subject, e.score) for e in by_ben] == [("S1, Ana", 100.0)]
        # remaining reviews 60, 100, 100 average 86.67 -> 56 + 26
        assert updated.total_score == pytest.approx(82.0)


class TestAutoGrade:
    def test_resolve_ratings_case_insensitive(self, individual_rubric):
        resolution = resolve_ratings(
            individual_rubric,
            {
                "ratings": [
                    {"criterionTitle": "content", "levelLabel": "l10"},
                    {"criterionTitle": "Style", "levelLabel": "Excellent"},
                    {"criterionTitle": "Grammar", "levelLabel": "L5"},
                ],
                "feedback": "Good work",
            },
        )
        assert [(e.criterion_id, e.level_id, e.score) for e in resolution.entries] == [
            ("c1", "c1-l10", 10.0)
        ]
        assert [r.criterion_title for r in resolution.unresolved] == ["Style", "Grammar"]
        assert resolution.feedback == "Good work"

    def test_apply_keeps_other_entries(self, individual_rubric, blank):
        blank.entries = [GradeEntry("c2", "c2-l5", 5.0)]
        result = AutoGradeResult.model_validate(
            {"ratings": [{"criterionTitle": "Content", "levelLabel": "L5"}]}
        )
        updated = apply_auto_grade(individual_rubric, blank, result)
        assert {e.criterion_id: e.score for e in updated.entries} == {"c2": 5.0, "c1": 5.0}
        assert updated.total_score == pytest.approx(50.0)

    def test_empty_feedback_keeps_existing(self, individual_rubric, blank):
        blank.feedback = "Teacher note"
        updated = apply_auto_grade(individual_rubric, blank, {"ratings": []})
        assert updated.feedback == "Teacher note"

    def test_locked_assessment_not_changed(self, individual_rubric, blank):
        locked = set_locked(blank, True)
        result = {"ratings": [{"criterionTitle": "Content", "levelLabel": "L10"}]}
        assert apply_auto_grade(individual_rubric, locked, result) is locked

    def test_grader_called_with_submission(self, individual_rubric, blank):
        grader = FakeGrader(
            {"ratings": [{"criterionTitle": "Style", "levelLabel": "L10"}], "feedback": "Nice"}
        )
        submitted = set_submission_text(blank, "My essay")
        updated = auto_grade_assessment(individual_rubric, submitted, grader)
        assert grader.calls == ["My essay"]
        assert updated.feedback == "Nice"
        assert updated.entry_for("c2").score == 10.0

    def test_no_submission_skips_grader(self, individual_rubric, blank):
        grader = FakeGrader({"ratings": []})
        assert auto_grade_assessment(individual_rubric, blank, grader) is blank
        assert grader.calls == []
