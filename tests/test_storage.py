"""
Test: gradebook state, cascading deletes and persistence.
"""
import pytest

from smartgrade.errors import StoreError
from smartgrade.grading.models import Assessment
from smartgrade.storage.gradebook import (
    DEFAULT_RUBRIC_ID,
    Gradebook,
    GradebookRepository,
    storage_key,
)
from smartgrade.storage.store import FileStore, MemoryStore


@pytest.fixture
def gradebook(individual_rubric, group_rubric, students, team, team_assessment):
    book = Gradebook(
        rubrics=[individual_rubric, group_rubric],
        assignees=students + [team],
        current_rubric_id=individual_rubric.id,
    )
    book.save_assessment(team_assessment)
    book.save_assessment(Assessment.blank(individual_rubric.id, "S1"))
    return book


class TestGradebook:
    def test_default_rubric(self):
        book = Gradebook()
        assert book.current_rubric.id == DEFAULT_RUBRIC_ID
        assert book.current_rubric.title == "Assignment 1"

    def test_remove_rubric_cascades(self, gradebook, group_rubric):
        gradebook.remove_rubric(group_rubric.id)
        assert gradebook.rubric(group_rubric.id) is None
        assert all(a.rubric_id != group_rubric.id for a in gradebook.assessments.values())
        assert len(gradebook.assessments) == 1

    def test_remove_current_rubric_moves_selection(self, gradebook, individual_rubric):
        gradebook.remove_rubric(individual_rubric.id)
        assert gradebook.current_rubric_id == "g1"

    def test_last_rubric_cannot_be_removed(self):
        with pytest.raises(ValueError, match="last assignment"):
            Gradebook().remove_rubric(DEFAULT_RUBRIC_ID)

    def test_remove_assignee_cascades(self, gradebook, team):
        gradebook.remove_assignee(team.id)
        assert gradebook.assignee(team.id) is None
        assert list(gradebook.assessments) == ["r1_S1"]

    def test_add_rubric_duplicate(self, gradebook, group_rubric):
        with pytest.raises(ValueError):
            gradebook.add_rubric(group_rubric)

    def test_update_rubric_clears_peer_weight(self, gradebook, individual_rubric):
        individual_rubric.peer_eval_weight = 20
        gradebook.update_rubric(individual_rubric)
        assert gradebook.rubric("r1").peer_eval_weight == 0.0

    def test_add_student(self, gradebook, ids):
        student = gradebook.add_student("  Cy  ", id_generator=ids)
        assert (student.id, student.name) == ("id-1", "Cy")

    def test_add_student_rejects_duplicate_and_blank(self, gradebook):
        with pytest.raises(ValueError, match="already exists"):
            gradebook.add_student("Other", "S1")
        with pytest.raises(ValueError, match="Name is required"):
            gradebook.add_student("   ")

    def test_import_roster_appends(self, gradebook, ids):
        result = gradebook.import_roster("S1, Dup\nS3, Cy", "individual", ids)
        assert [a.id for a in result.created] == ["S1-1", "S3"]
        assert gradebook.assignee("S3").name == "Cy"

    def test_remove_member(self, gradebook, team):
        gradebook.remove_member(team.id, 0)
        assert team.members == ["S2, Ben"]
        gradebook.remove_member(team.id, 5)
        assert team.members == ["S2, Ben"]

    def test_assessment_for_returns_blank(self, gradebook):
        assessment = gradebook.assessment_for("r1", "S2")
        assert assessment.id == "r1_S2"
        assert "r1_S2" not in gradebook.assessments

    def test_dict_round_trip(self, gradebook):
        assert Gradebook.from_dict(gradebook.to_dict()) == gradebook


class TestGradebookRepository:
    def test_empty_store_gives_default_gradebook(self):
        book = GradebookRepository(MemoryStore(), "teacher").load()
        assert [r.id for r in book.rubrics] == [DEFAULT_RUBRIC_ID]
        assert book.assignees == []

    def test_save_and_load(self, gradebook):
        store = MemoryStore()
        repository = GradebookRepository(store, "teacher")
        repository.save(gradebook)
        assert store.get("smartgrade_data_teacher") is not None
        assert repository.load() == gradebook

    def test_owners_are_separate(self, gradebook):
        store = MemoryStore()
        GradebookRepository(store, "a").save(gradebook)
        assert GradebookRepository(store, "b").load().assignees == []

    def test_corrupt_document(self):
        store = MemoryStore()
        store.put(storage_key("teacher"), b"{not json")
        with pytest.raises(StoreError):
            GradebookRepository(store, "teacher").load()

    def test_missing_required_field(self):
        store = MemoryStore()
        store.put(storage_key("teacher"), b'{"assignees": [{"name": "No id"}]}')
        with pytest.raises(StoreError):
            GradebookRepository(store, "teacher").load()

    def test_out_of_range_rubric(self):
        store = MemoryStore()
        store.put(
            storage_key("teacher"),
            b'{"rubrics": [{"id": "r1", "type": "group", "peerEvalWeight": 150}]}',
        )
        with pytest.raises(StoreError) as exc_info:
            GradebookRepository(store, "teacher").load()
        assert "peerEvalWeight" in str(exc_info.value)

    def test_file_store(self, tmp_path, gradebook):
        repository = GradebookRepository(FileStore(tmp_path / "data"), "teacher")
        repository.save(gradebook)
        assert (tmp_path / "data" / "smartgrade_data_teacher.json").exists()
        assert repository.load() == gradebook
        repository.delete()
        assert repository.load().assignees == []
