"""
Roster module.

Students, groups and the text importer that builds them.
"""

from .models import Assignee, Member, find_group_for_student, format_member, parse_member
from .parser import RosterImport, RosterParser, parse_roster

__all__ = [
    "Assignee",
    "Member",
    "parse_member",
    "format_member",
    "find_group_for_student",
    "RosterImport",
    "RosterParser",
    "parse_roster",
]
