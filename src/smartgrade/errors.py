"""Exception hierarchy for SmartGrade."""


class SmartGradeError(Exception):
    """Base class for all SmartGrade errors."""

    pass


class RubricValidationError(SmartGradeError):
    """A rubric document does not have the expected shape."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Invalid rubric document: " + "; ".join(problems))


class StoreError(SmartGradeError):
    """Persisted gradebook data could not be read or written."""

    pass


class ConfigError(SmartGradeError):
    """Configuration file is missing or malformed."""

    pass
