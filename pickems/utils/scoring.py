"""
Scoring Engine for the Pickems application

Turns one user's picks plus the recorded tournament results into a
(points, correct_picks) pair. Everything here is a pure function of its
arguments; persisting the result is the leaderboard service's job.
"""

from pickems.utils.rounds import (
    DEFAULT_POLICY,
    GROUP_PICK_POINTS,
    points_for_stage,
    resolve_stage,
)
from pickems.utils.snapshot import ScoreResult


def calculate_group_pick_score(group, group_pick):
    """
    Score one group pick.

    Returns:
        (points, correct) - 5 points per selected team that advanced, nothing
        while the group has no advancing teams recorded
    """
    if group is None or not group.advancing_teams:
        return 0, 0

    correct = sum(
        1 for team_id in group_pick.selected_teams if team_id in group.advancing_teams
    )
    return correct * GROUP_PICK_POINTS, correct


def calculate_pick_score(match, pick, policy=DEFAULT_POLICY):
    """
    Score one knockout pick.

    Returns:
        Round points for a correct pick, 0 for a wrong pick, an undecided
        match or a match that no longer exists
    """
    if match is None or match.winner is None:
        return 0
    if pick.team_id != match.winner:
        return 0
    return points_for_stage(resolve_stage(match, policy))


def calculate_score(snapshot, match_picks, group_picks, policy=DEFAULT_POLICY):
    """
    Calculate a user's total score against a tournament snapshot.

    Args:
        snapshot: TournamentSnapshot with match winners and advancing teams
        match_picks: iterable of MatchPickRecord
        group_picks: iterable of GroupPickRecord
        policy: RoundPolicy used to classify round labels

    Returns:
        ScoreResult
    """
    points = 0
    correct = 0

    for group_pick in group_picks:
        group_points, group_correct = calculate_group_pick_score(
            snapshot.group_by_id(group_pick.group_id), group_pick
        )
        points += group_points
        correct += group_correct

    for pick in match_picks:
        pick_points = calculate_pick_score(
            snapshot.match_by_id(pick.match_id), pick, policy
        )
        if pick_points:
            points += pick_points
            correct += 1

    return ScoreResult(points=points, correct_picks=correct)
