"""Rubric loader for grading criteria."""

import json
from pathlib import Path
from typing import Any

import yaml

from ..config.models import GradingDefaults
from ..errors import RubricValidationError
from ..utils.ids import IdGenerator
from .models import AssignmentType, Rubric
from .schema import enrich_rubric, validate_rubric_document


class RubricLoader:
    """Loads rubrics from YAML or JSON files.

    Files carrying ids are read as persisted rubrics. Files without a
    top-level ``id`` are treated as generated documents: they are validated
    and enriched with fresh ids.
    """

    def __init__(
        self,
        rubrics_dir: Path | None = None,
        defaults: GradingDefaults | None = None,
        id_generator: IdGenerator | None = None,
    ):
        """Initialize the rubric loader.

        Args:
            rubrics_dir: Directory containing rubric files
            defaults: Grading defaults for settings a file leaves out
            id_generator: Id source used when enriching generated documents
        """
        self.rubrics_dir = rubrics_dir or Path("rubrics")
        self.defaults = defaults or GradingDefaults()
        self.id_generator = id_generator

    def load(
        self,
        rubric_file: str | Path,
        assignment_type: AssignmentType = AssignmentType.INDIVIDUAL,
    ) -> Rubric:
        """Load a rubric from a YAML or JSON file.

        Args:
            rubric_file: Path to the rubric file
            assignment_type: Type used for generated documents without one

        Returns:
            Parsed Rubric object

        Raises:
            FileNotFoundError: If the file doesn't exist
            RubricValidationError: If the file cannot be decoded or the rubric
                is malformed
        """
        path = self._resolve_path(rubric_file)
        data = self._load_file(path)
        return self.parse(data, assignment_type)

    def parse(
        self,
        data: dict[str, Any],
        assignment_type: AssignmentType = AssignmentType.INDIVIDUAL,
    ) -> Rubric:
        """Parse already decoded rubric data.

        Raises:
            RubricValidationError: If the data is not a usable rubric
        """
        if isinstance(data, dict) and data.get("id"):
            try:
                return Rubric.from_dict(data, self.defaults)
            except KeyError as e:
                raise RubricValidationError([f"missing field {e}"]) from e
            except (TypeError, ValueError) as e:
                raise RubricValidationError([str(e)]) from e

        document = validate_rubric_document(data)
        rubric = enrich_rubric(document, self.id_generator, assignment_type)
        rubric.assignment_weight = self.defaults.assignment_weight
        rubric.passing_percentage = self.defaults.passing_percentage
        rubric.peer_eval_weight = self.defaults.peer_eval_weight
        return rubric

    def _resolve_path(self, file_path: str | Path) -> Path:
        """Resolve a rubric file path."""
        path = Path(file_path)
        if not path.is_absolute():
            path = self.rubrics_dir / path
        return path

    def _load_file(self, path: Path) -> dict[str, Any]:
        """Load and parse a YAML or JSON file."""
        if not path.exists():
            raise FileNotFoundError(f"Rubric file not found: {path}")

        with open(path, encoding="utf-8") as f:
            try:
                if path.suffix.lower() == ".json":
                    return json.load(f)
                return yaml.safe_load(f)
            except (json.JSONDecodeError, UnicodeDecodeError, yaml.YAMLError) as e:
                raise RubricValidationError([f"unreadable file {path.name}: {e}"]) from e
