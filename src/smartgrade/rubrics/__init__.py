"""
Rubrics module.

Rubric models, file loading, and validation of generated rubric documents.
"""

from .loader import RubricLoader
from .models import AssignmentType, Rubric, RubricCriterion, RubricLevel
from .schema import (
    RubricDocument,
    RubricGenerator,
    enrich_rubric,
    generate_rubric,
    scorable_criteria,
    validate_rubric_document,
)

__all__ = [
    "RubricLoader",
    "AssignmentType",
    "Rubric",
    "RubricCriterion",
    "RubricLevel",
    "RubricDocument",
    "RubricGenerator",
    "enrich_rubric",
    "generate_rubric",
    "scorable_criteria",
    "validate_rubric_document",
]
