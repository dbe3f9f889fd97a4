"""
SmartGrade

Rubric-based classroom grading toolkit: weighted rubrics, student and group
rosters, peer evaluations and composite course grades.
"""

__version__ = "0.1.0"
