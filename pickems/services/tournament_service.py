"""
Tournament administration

Every admin write goes through here so it is validated, audited as an
AdminAction, committed in one place and followed by the cache invalidation
and leaderboard refresh it requires.
"""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pickems import db
from pickems.models import (
    AdminAction,
    Group,
    GroupTeam,
    Match,
    MatchPick,
    Team,
    Tournament,
)
from pickems.models.match import BRACKET_SIDES
from pickems.utils.cache_utils import invalidate_tournament_cache
from pickems.utils.rounds import RoundStage

logger = logging.getLogger(__name__)

DEMO_TEAM_NAMES = [
    "Phoenix Rising", "Dragon Warriors", "Shadow Legends", "Storm Breakers",
    "Iron Titans", "Frost Giants", "Thunder Hawks", "Crimson Blades",
    "Silver Wolves", "Golden Eagles", "Dark Knights", "Mystic Guardians",
    "Flame Serpents", "Ice Dragons", "Lightning Lions", "Steel Panthers",
    "Emerald Hunters", "Ruby Raptors", "Sapphire Sharks", "Diamond Demons",
    "Platinum Pirates", "Crystal Crusaders", "Obsidian Owls", "Jade Jaguars",
    "Onyx Oracles", "Amber Assassins", "Pearl Predators", "Topaz Titans",
    "Garnet Gladiators", "Quartz Queens", "Opal Outlaws", "Zircon Zealots",
]

DEMO_GROUP_NAMES = ["Group A", "Group B", "Group C", "Group D"]

DEMO_KNOCKOUT_ROUNDS = [
    ("Round of 16", 8),
    ("Quarter Finals", 4),
    ("Semi Finals", 2),
    ("Grand Final", 1),
]


def _commit(tournament, action_type, description, metadata=None, results_changed=False):
    """
    Audit, commit and invalidate after an admin write.

    Returns:
        (success, message)
    """
    try:
        AdminAction.log_action(
            tournament.id if tournament else None,
            action_type,
            description,
            action_metadata=metadata,
        )
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"Admin action {action_type} rejected by database: {e}")
        return False, "That change conflicts with existing data"
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Admin action {action_type} failed: {e}")
        return False, "Database error, change not saved"

    logger.info(f"Admin action {action_type}: {description}")

    if tournament is not None:
        invalidate_tournament_cache(tournament.id)
        if results_changed:
            from pickems.services.leaderboard_service import recompute_leaderboard

            recompute_leaderboard(tournament.id)

    return True, description


def _get_owned(model, tournament, object_id):
    obj = db.session.get(model, object_id) if object_id is not None else None
    if obj is None or obj.tournament_id != tournament.id:
        return None
    return obj


def _parse_stage(stage):
    if not stage:
        return True, None
    try:
        return True, RoundStage(stage).value
    except ValueError:
        return False, None


# Tournaments


def create_tournament(name, activate=False):
    name = (name or "").strip()
    if not name:
        return None, "Tournament name is required"

    tournament = Tournament.create_tournament(name, activate=activate)
    db.session.flush()
    success, message = _commit(
        tournament, "create_tournament", f"Created tournament {name}"
    )
    return (tournament if success else None), message


def activate_tournament(tournament):
    tournament.activate()
    return _commit(tournament, "activate_tournament", f"Activated {tournament.name}")


def set_stage_flag(tournament, flag, value):
    success, message = tournament.set_stage_flag(flag, value)
    if not success:
        return False, message
    return _commit(
        tournament, "set_stage_flag", message, metadata={"flag": flag, "value": bool(value)}
    )


def generate_demo_tournament(name="Demo Cup", activate=True):
    """
    Build a complete sample tournament: 32 teams in 4 groups of 8 and an empty
    16-team knockout bracket ready to be filled by the admin.
    """
    tournament = Tournament.create_tournament(name, activate=activate)
    db.session.flush()

    teams = []
    for seed, team_name in enumerate(DEMO_TEAM_NAMES, start=1):
        team = Team(tournament_id=tournament.id, name=team_name, seed=seed)
        db.session.add(team)
        teams.append(team)
    db.session.flush()

    for index, group_name in enumerate(DEMO_GROUP_NAMES):
        group = Group(tournament_id=tournament.id, name=group_name)
        db.session.add(group)
        for position, team in enumerate(teams[index * 8:(index + 1) * 8]):
            db.session.add(GroupTeam(group=group, team=team, position=position))

    match_number = 1
    for round_name, count in DEMO_KNOCKOUT_ROUNDS:
        for i in range(count):
            db.session.add(
                Match(
                    tournament_id=tournament.id,
                    match_number=match_number,
                    round=f"{round_name} - Match {i + 1}" if count > 1 else round_name,
                    bracket="finals" if round_name == "Grand Final" else "upper",
                )
            )
            match_number += 1

    success, message = _commit(
        tournament,
        "generate_demo",
        f"Generated demo tournament {name}",
        metadata={"teams": len(teams), "groups": len(DEMO_GROUP_NAMES)},
    )
    return (tournament if success else None), message


# Teams


def add_team(tournament, name, logo_url=None, seed=None):
    name = (name or "").strip()
    if not name:
        return None, "Team name is required"

    if seed is None:
        seed = tournament.teams.count() + 1
    team = Team(tournament_id=tournament.id, name=name, logo_url=logo_url or None, seed=seed)
    db.session.add(team)
    success, message = _commit(tournament, "add_team", f"Added team {name}")
    return (team if success else None), message


def remove_team(tournament, team_id):
    """Delete a team and everything that points at it"""
    team = _get_owned(Team, tournament, team_id)
    if not team:
        return False, "Team not found"

    for match in tournament.matches.filter(
        or_(
            Match.team1_id == team.id,
            Match.team2_id == team.id,
            Match.winner_id == team.id,
        )
    ):
        if match.team1_id == team.id:
            match.assign_team("team1", None)
        if match.team2_id == team.id:
            match.assign_team("team2", None)
        if match.winner_id == team.id:
            match.set_winner(None)

    MatchPick.query.filter_by(team_id=team.id).delete(synchronize_session=False)

    for group in tournament.groups:
        if group.has_team(team.id):
            group.remove_team(team.id)
            for pick in group.picks:
                if team.id in (pick.selected_team_ids or []):
                    pick.selected_team_ids = [
                        t for t in pick.selected_team_ids if t != team.id
                    ]

    name = team.name
    db.session.delete(team)
    return _commit(tournament, "remove_team", f"Removed team {name}", results_changed=True)


# Matches


def add_match(tournament, round_label, bracket="upper", stage=None, match_number=None):
    round_label = (round_label or "").strip()
    if not round_label:
        return None, "Round name is required"
    if bracket not in BRACKET_SIDES:
        return None, f"Bracket must be one of: {', '.join(BRACKET_SIDES)}"

    valid, stage_value = _parse_stage(stage)
    if not valid:
        return None, f"Unknown stage: {stage}"

    match = Match(
        tournament_id=tournament.id,
        round=round_label,
        bracket=bracket,
        stage=stage_value,
        match_number=match_number or Match.next_match_number(tournament.id),
    )
    db.session.add(match)
    success, message = _commit(tournament, "add_match", f"Added match {round_label}")
    return (match if success else None), message


def remove_match(tournament, match_id):
    match = _get_owned(Match, tournament, match_id)
    if not match:
        return False, "Match not found"

    label = match.round
    db.session.delete(match)
    return _commit(tournament, "remove_match", f"Removed match {label}", results_changed=True)


def assign_match_team(tournament, match_id, slot, team_id):
    match = _get_owned(Match, tournament, match_id)
    if not match:
        return False, "Match not found"

    team = None
    if team_id is not None:
        team = _get_owned(Team, tournament, team_id)
        if not team:
            return False, "Team not found"

    had_winner = match.winner_id is not None
    success, message = match.assign_team(slot, team)
    if not success:
        db.session.rollback()
        return False, message

    return _commit(
        tournament,
        "assign_team",
        f"{match.round}: {slot} set to {team.name if team else 'TBD'}",
        metadata={"match_id": match.id, "slot": slot, "team_id": team_id},
        results_changed=had_winner and match.winner_id is None,
    )


def set_match_winner(tournament, match_id, team_id):
    match = _get_owned(Match, tournament, match_id)
    if not match:
        return False, "Match not found"

    success, message = match.set_winner(team_id)
    if not success:
        return False, message

    winner_name = match.winner.name if team_id is not None and match.winner else "none"
    return _commit(
        tournament,
        "set_winner",
        f"{match.round}: winner {winner_name}",
        metadata={"match_id": match.id, "team_id": team_id},
        results_changed=True,
    )


# Groups


def add_group(tournament, name):
    name = (name or "").strip()
    if not name:
        return None, "Group name is required"

    group = Group(tournament_id=tournament.id, name=name)
    db.session.add(group)
    success, message = _commit(tournament, "add_group", f"Added {name}")
    return (group if success else None), message


def remove_group(tournament, group_id):
    group = _get_owned(Group, tournament, group_id)
    if not group:
        return False, "Group not found"

    name = group.name
    db.session.delete(group)
    return _commit(tournament, "remove_group", f"Removed {name}", results_changed=True)


def add_team_to_group(tournament, group_id, team_id):
    group = _get_owned(Group, tournament, group_id)
    if not group:
        return False, "Group not found"
    team = _get_owned(Team, tournament, team_id)
    if not team:
        return False, "Team not found"

    success, message = group.add_team(team)
    if not success:
        return False, message
    return _commit(tournament, "add_group_team", message)


def remove_team_from_group(tournament, group_id, team_id):
    group = _get_owned(Group, tournament, group_id)
    if not group:
        return False, "Group not found"

    success, message = group.remove_team(team_id)
    if not success:
        return False, message

    # A user cannot keep a pick for a team that left the group
    for pick in group.picks:
        if team_id in (pick.selected_team_ids or []):
            pick.selected_team_ids = [t for t in pick.selected_team_ids if t != team_id]

    return _commit(tournament, "remove_group_team", message, results_changed=True)


def set_group_advancing(tournament, group_id, team_ids):
    group = _get_owned(Group, tournament, group_id)
    if not group:
        return False, "Group not found"

    success, message = group.set_advancing_teams(team_ids)
    if not success:
        return False, message

    return _commit(
        tournament,
        "set_advancing",
        message,
        metadata={"group_id": group.id, "team_ids": [int(t) for t in team_ids]},
        results_changed=True,
    )
