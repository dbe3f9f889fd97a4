"""
Course module.

Course-wide grade totals across assignments.
"""

from .summary import (
    CourseSummary,
    Student,
    StudentCourseRow,
    assessment_for_student,
    course_contribution,
    course_summary,
    unique_students,
)

__all__ = [
    "CourseSummary",
    "Student",
    "StudentCourseRow",
    "assessment_for_student",
    "course_contribution",
    "course_summary",
    "unique_students",
]
