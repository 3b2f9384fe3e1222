import pytest

from pickems.utils.rounds import (
    DEFAULT_ROUND_POINTS,
    RoundPolicy,
    RoundStage,
    classify_round,
    points_for_round,
    resolve_stage,
)
from tests.helpers import make_match

INCLUSIVE = RoundPolicy(exclude_placement_matches=False)


@pytest.mark.parametrize(
    "label, expected",
    [
        ("Round of 16 - Match 3", RoundStage.ROUND_OF_16),
        ("Quarter Finals - Match 2", RoundStage.QUARTERFINAL),
        ("Semi Finals - Match 1", RoundStage.SEMIFINAL),
        ("Semi Final", RoundStage.SEMIFINAL),
        ("Grand Final", RoundStage.FINAL),
        ("Final", RoundStage.FINAL),
        ("Third Place Final", RoundStage.UNCLASSIFIED),
        ("Bronze Final", RoundStage.UNCLASSIFIED),
        ("Group Stage", RoundStage.UNCLASSIFIED),
        ("", RoundStage.UNCLASSIFIED),
    ],
)
def test_classify_round_default_policy(label, expected):
    assert classify_round(label) == expected


def test_classify_round_is_case_sensitive():
    assert classify_round("round of 16") == RoundStage.UNCLASSIFIED
    assert classify_round("grand final") == RoundStage.UNCLASSIFIED


def test_classify_round_handles_none():
    assert classify_round(None) == RoundStage.UNCLASSIFIED


def test_placement_matches_count_as_final_when_policy_allows():
    assert classify_round("Third Place Final", INCLUSIVE) == RoundStage.FINAL
    assert classify_round("Bronze Final", INCLUSIVE) == RoundStage.FINAL
    # Semi and Quarter always win over Final
    assert classify_round("Semi Final", INCLUSIVE) == RoundStage.SEMIFINAL
    assert classify_round("Quarter Final", INCLUSIVE) == RoundStage.QUARTERFINAL


def test_policy_from_config():
    assert RoundPolicy.from_config({}).exclude_placement_matches is True
    policy = RoundPolicy.from_config({"ROUND_EXCLUDE_PLACEMENT_FROM_FINAL": False})
    assert policy == INCLUSIVE


@pytest.mark.parametrize(
    "label, points",
    [
        ("Round of 16 - Match 1", 10),
        ("Quarter Finals - Match 1", 20),
        ("Semi Finals - Match 1", 30),
        ("Grand Final", 50),
        ("Exhibition", DEFAULT_ROUND_POINTS),
        ("Third Place Final", DEFAULT_ROUND_POINTS),
    ],
)
def test_points_for_round(label, points):
    assert points_for_round(label) == points


def test_explicit_stage_overrides_label():
    match = make_match(1, "Bronze Final", stage="final")
    assert resolve_stage(match) == RoundStage.FINAL


def test_unknown_explicit_stage_falls_back_to_label():
    match = make_match(1, "Quarter Finals - Match 1", stage="bogus")
    assert resolve_stage(match) == RoundStage.QUARTERFINAL


def test_stage_labels():
    assert RoundStage.QUARTERFINAL.label == "Quarterfinals"
    assert RoundStage.UNCLASSIFIED.label == "Other"
