"""
Test: rubric document validation, enrichment and file loading.
"""
import json

import pytest
import yaml

from smartgrade.config.models import GradingDefaults
from smartgrade.errors import RubricValidationError
from smartgrade.rubrics.loader import RubricLoader
from smartgrade.rubrics.models import AssignmentType, Rubric
from smartgrade.rubrics.schema import (
    enrich_rubric,
    generate_rubric,
    scorable_criteria,
    validate_rubric_document,
)

GENERATED = {
    "title": "Lab Report",
    "description": "Chemistry lab",
    "criteria": [
        {
            "title": "Method",
            "weight": 2,
            "levels": [
                {"label": "Poor", "score": 0},
                {"label": "Good", "score": 5, "description": "Clear steps"},
            ],
        },
        {"title": "Comments"},
    ],
}


class FakeGenerator:
    def __init__(self, document):
        self.document = document
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        return self.document


class TestValidation:
    def test_valid_document(self):
        document = validate_rubric_document(GENERATED)
        assert document.criteria[0].weight == 2.0
        assert document.criteria[1].weight == 1.0
        assert document.criteria[1].levels == []

    def test_missing_criteria(self):
        with pytest.raises(RubricValidationError) as exc_info:
            validate_rubric_document({"title": "No criteria"})
        assert any(p.startswith("criteria:") for p in exc_info.value.problems)

    def test_reports_every_problem(self):
        bad = {
            "title": "",
            "criteria": [{"title": "X", "levels": [{"label": "A", "score": -1}]}],
        }
        with pytest.raises(RubricValidationError) as exc_info:
            validate_rubric_document(bad)
        locs = [p.split(":")[0] for p in exc_info.value.problems]
        assert locs == ["title", "criteria.0.levels.0.score"]

    def test_not_a_mapping(self):
        with pytest.raises(RubricValidationError):
            validate_rubric_document(["title"])


class TestEnrichment:
    def test_assigns_fresh_ids(self, ids):
        rubric = enrich_rubric(validate_rubric_document(GENERATED), ids)
        assert rubric.id == "id-1"
        assert [c.id for c in rubric.criteria] == ["id-2", "id-5"]
        assert [l.id for l in rubric.criteria[0].levels] == ["id-3", "id-4"]

    def test_unscorable_criteria_kept(self, ids):
        rubric = enrich_rubric(validate_rubric_document(GENERATED), ids)
        assert len(rubric.criteria) == 2
        assert [c.title for c in scorable_criteria(rubric)] == ["Method"]
        assert rubric.max_raw_score == 10.0

    def test_generate_rubric(self, ids):
        generator = FakeGenerator(GENERATED)
        rubric = generate_rubric(generator, "Lab report rubric", AssignmentType.GROUP, ids)
        assert generator.prompts == ["Lab report rubric"]
        assert rubric.is_group
        assert rubric.title == "Lab Report"


class TestRubricLoader:
    def test_generated_yaml_gets_defaults(self, tmp_path, ids):
        (tmp_path / "lab.yaml").write_text(yaml.safe_dump(GENERATED), encoding="utf-8")
        defaults = GradingDefaults(assignment_weight=25, passing_percentage=60)
        loader = RubricLoader(tmp_path, defaults=defaults, id_generator=ids)
        rubric = loader.load("lab.yaml")
        assert rubric.id == "id-1"
        assert rubric.assignment_weight == 25
        assert rubric.passing_percentage == 60

    def test_persisted_json(self, tmp_path, group_rubric):
        path = tmp_path / "project.json"
        path.write_text(json.dumps(group_rubric.to_dict()), encoding="utf-8")
        rubric = RubricLoader().load(path)
        assert rubric == group_rubric

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RubricLoader(tmp_path).load("nope.yaml")

    def test_invalid_document(self, tmp_path):
        (tmp_path / "bad.yaml").write_text("title: Broken\n", encoding="utf-8")
        with pytest.raises(RubricValidationError):
            RubricLoader(tmp_path).load("bad.yaml")

    def test_invalid_json(self, tmp_path):
        (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(RubricValidationError) as exc_info:
            RubricLoader(tmp_path).load("bad.json")
        assert "bad.json" in exc_info.value.problems[0]

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / "bad.yaml").write_text("title: [unclosed\n", encoding="utf-8")
        with pytest.raises(RubricValidationError):
            RubricLoader(tmp_path).load("bad.yaml")

    def test_persisted_criterion_without_id(self, tmp_path, group_rubric):
        data = group_rubric.to_dict()
        del data["criteria"][0]["id"]
        (tmp_path / "project.json").write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(RubricValidationError) as exc_info:
            RubricLoader(tmp_path).load("project.json")
        assert exc_info.value.problems == ["missing field 'id'"]

    def test_persisted_level_without_id(self, group_rubric):
        data = group_rubric.to_dict()
        del data["criteria"][0]["levels"][1]["id"]
        with pytest.raises(RubricValidationError):
            RubricLoader().parse(data)


class TestRubricRanges:
    def test_peer_weight_above_100(self, group_rubric):
        data = group_rubric.to_dict()
        data["peerEvalWeight"] = 150
        with pytest.raises(RubricValidationError) as exc_info:
            Rubric.from_dict(data)
        assert exc_info.value.problems == [
            "peerEvalWeight: must be between 0 and 100, got 150"
        ]

    def test_reports_every_bad_setting(self, group_rubric):
        data = group_rubric.to_dict()
        data["assignmentWeight"] = -5
        data["passingPercentage"] = 120
        data["criteria"][0]["weight"] = -1
        with pytest.raises(RubricValidationError) as exc_info:
            Rubric.from_dict(data)
        assert exc_info.value.problems == [
            "assignmentWeight: must be between 0 and 100, got -5",
            "passingPercentage: must be between 0 and 100, got 120",
            "criteria.gc1.weight: must not be negative, got -1",
        ]

    def test_limits_accepted(self, group_rubric):
        data = group_rubric.to_dict()
        data.update(assignmentWeight=0, peerEvalWeight=100, passingPercentage=100)
        assert Rubric.from_dict(data).teacher_weight == 0.0
