from pickems.utils.rounds import RoundPolicy
from pickems.utils.scoring import (
    calculate_group_pick_score,
    calculate_pick_score,
    calculate_score,
)
from pickems.utils.snapshot import (
    GroupPickRecord,
    GroupRecord,
    MatchPickRecord,
    TeamRecord,
    TournamentSnapshot,
)
from tests.helpers import make_match

TEAM_A, TEAM_B, TEAM_C = 1, 2, 3
TEAM_X, TEAM_Y, TEAM_Z = 11, 12, 13


def snapshot(matches=(), groups=()):
    return TournamentSnapshot(id=1, name="Cup", matches=tuple(matches), groups=tuple(groups))


def group(group_id=1, advancing=()):
    teams = tuple(TeamRecord(id=t, name=str(t)) for t in (TEAM_X, TEAM_Y, TEAM_Z))
    return GroupRecord(id=group_id, name="Group A", teams=teams, advancing_teams=tuple(advancing))


def test_correct_round_of_16_pick_scores_ten():
    match = make_match(1, "Round of 16 - Match 1", winner=TEAM_A, team1=TEAM_A, team2=TEAM_B)
    result = calculate_score(snapshot([match]), [MatchPickRecord(1, TEAM_A)], [])

    assert (result.points, result.correct_picks) == (10, 1)


def test_wrong_final_pick_scores_nothing():
    match = make_match(1, "Grand Final", winner=TEAM_B, team1=TEAM_B, team2=TEAM_C)
    result = calculate_score(snapshot([match]), [MatchPickRecord(1, TEAM_C)], [])

    assert (result.points, result.correct_picks) == (0, 0)


def test_group_pick_scores_five_per_advancing_team():
    result = calculate_score(
        snapshot(groups=[group(advancing=(TEAM_X, TEAM_Y))]),
        [],
        [GroupPickRecord(1, (TEAM_X, TEAM_Z))],
    )

    assert (result.points, result.correct_picks) == (5, 1)


def test_group_pick_with_both_qualifiers_scores_ten():
    assert calculate_group_pick_score(
        group(advancing=(TEAM_X, TEAM_Y)), GroupPickRecord(1, (TEAM_Y, TEAM_X))
    ) == (10, 2)


def test_unresolved_group_scores_nothing():
    assert calculate_group_pick_score(group(), GroupPickRecord(1, (TEAM_X, TEAM_Y))) == (0, 0)


def test_undecided_match_scores_nothing():
    match = make_match(1, "Semi Finals - Match 1", team1=TEAM_A, team2=TEAM_B)
    assert calculate_pick_score(match, MatchPickRecord(1, TEAM_A)) == 0


def test_picks_for_missing_match_or_group_are_ignored():
    result = calculate_score(
        snapshot(),
        [MatchPickRecord(99, TEAM_A)],
        [GroupPickRecord(42, (TEAM_X,))],
    )

    assert (result.points, result.correct_picks) == (0, 0)


def test_full_card():
    matches = [
        make_match(1, "Quarter Finals - Match 1", winner=TEAM_A, team1=TEAM_A, team2=TEAM_B),
        make_match(2, "Semi Finals - Match 1", winner=TEAM_A, team1=TEAM_A, team2=TEAM_C),
        make_match(3, "Grand Final", winner=TEAM_A, team1=TEAM_A, team2=TEAM_B),
        make_match(4, "Exhibition", winner=TEAM_C, team1=TEAM_B, team2=TEAM_C),
    ]
    picks = [MatchPickRecord(m, TEAM_A) for m in (1, 2, 3)] + [MatchPickRecord(4, TEAM_C)]
    groups = [group(advancing=(TEAM_X, TEAM_Y))]

    result = calculate_score(
        snapshot(matches, groups), picks, [GroupPickRecord(1, (TEAM_X, TEAM_Y))]
    )

    # 20 + 30 + 50 + 10 (unclassified default) + 2 * 5
    assert result.points == 120
    assert result.correct_picks == 6


def test_placement_final_scores_by_policy():
    match = make_match(1, "Third Place Final", winner=TEAM_A, team1=TEAM_A, team2=TEAM_B)
    pick = MatchPickRecord(1, TEAM_A)

    assert calculate_pick_score(match, pick) == 10
    assert calculate_pick_score(match, pick, RoundPolicy(exclude_placement_matches=False)) == 50


def test_explicit_stage_drives_points():
    match = make_match(
        1, "Match 7", winner=TEAM_A, team1=TEAM_A, team2=TEAM_B, stage="semifinal"
    )
    assert calculate_pick_score(match, MatchPickRecord(1, TEAM_A)) == 30


def test_scoring_is_idempotent_and_pure():
    state = snapshot(
        [make_match(1, "Grand Final", winner=TEAM_A, team1=TEAM_A, team2=TEAM_B)],
        [group(advancing=(TEAM_X, TEAM_Y))],
    )
    match_picks = [MatchPickRecord(1, TEAM_A)]
    group_picks = [GroupPickRecord(1, (TEAM_X, TEAM_Z))]

    first = calculate_score(state, match_picks, group_picks)
    second = calculate_score(state, match_picks, group_picks)

    assert first == second
    assert match_picks == [MatchPickRecord(1, TEAM_A)]
    assert group_picks == [GroupPickRecord(1, (TEAM_X, TEAM_Z))]
