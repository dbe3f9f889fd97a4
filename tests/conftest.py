"""
Shared fixtures for smartgrade tests.
Ids come from SequentialIdGenerator so results are predictable.
"""
import logging

import pytest

from smartgrade.grading.models import Assessment, GradeEntry, PeerEvaluation
from smartgrade.roster.models import Assignee
from smartgrade.rubrics.models import AssignmentType, Rubric, RubricCriterion, RubricLevel
from smartgrade.utils.ids import SequentialIdGenerator
from smartgrade.utils.logging import PACKAGE_LOGGER


def make_criterion(criterion_id, title, scores, weight=1.0):
    """Criterion with levels ``{criterion_id}-l{score}`` labelled L{score}."""
    return RubricCriterion(
        id=criterion_id,
        title=title,
        weight=weight,
        levels=[
            RubricLevel(id=f"{criterion_id}-l{s:g}", label=f"L{s:g}", score=s)
            for s in scores
        ],
    )


@pytest.fixture
def reset_logging():
    """Drop handlers installed by setup_logging once the test is done."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def ids():
    return SequentialIdGenerator()


@pytest.fixture
def individual_rubric():
    """Two criteria worth 10 and 20 points; max raw score 30."""
    return Rubric(
        id="r1",
        title="Essay",
        type=AssignmentType.INDIVIDUAL,
        criteria=[
            make_criterion("c1", "Content", [0, 5, 10]),
            make_criterion("c2", "Style", [0, 5, 10], weight=2),
        ],
        assignment_weight=40,
        passing_percentage=50,
    )


@pytest.fixture
def group_rubric():
    """Single 10 point criterion, 30% peer evaluation, worth half the course."""
    return Rubric(
        id="g1",
        title="Project",
        type=AssignmentType.GROUP,
        criteria=[make_criterion("gc1", "Delivery", [0, 5, 8, 10])],
        assignment_weight=50,
        peer_eval_weight=30,
        passing_percentage=60,
    )


@pytest.fixture
def team():
    return Assignee(
        id="T1",
        name="Team A",
        type=AssignmentType.GROUP,
        members=["S1, Ana", "S2, Ben"],
    )


@pytest.fixture
def students():
    return [
        Assignee(id="S1", name="Ana"),
        Assignee(id="S2", name="Ben"),
    ]


@pytest.fixture
def team_assessment(group_rubric, team):
    """Teacher score 8/10; Ana received 40 and 60, Ben received 100."""
    assessment = Assessment.blank(group_rubric.id, team.id)
    assessment.entries = [GradeEntry("gc1", "gc1-l8", 8.0)]
    assessment.peer_evaluations = [
        PeerEvaluation("p1", "S2, Ben", "S1, Ana", 40.0),
        PeerEvaluation("p2", "S3, Cy", "S1, Ana", 60.0),
        PeerEvaluation("p3", "S1, Ana", "S2, Ben", 100.0),
    ]
    return assessment
