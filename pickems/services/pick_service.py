"""
Pick submission shared by the HTML and JSON routes.

Each call validates through the model, commits, then refreshes the acting
user's leaderboard entry so the board reflects the new pick immediately.
"""

import logging
from dataclasses import replace

from sqlalchemy.exc import SQLAlchemyError

from pickems import db
from pickems.models import Group, GroupPick, Match, MatchPick, User
from pickems.services.leaderboard_service import refresh_user_entry

logger = logging.getLogger(__name__)


def _acting_user(context):
    if not context.is_identified:
        return None
    return db.session.get(User, context.user_id)


def _commit_pick(context, pick, message, tournament_id):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Could not save pick for {context.username}: {e}")
        return None, "Could not save your pick. Please try again."

    # Score against the tournament the pick belongs to
    refresh_user_entry(replace(context, tournament_id=tournament_id))
    return pick, message


def submit_match_pick(context, match_id, team_id):
    """
    Save the user's predicted winner for a knockout match.

    Returns:
        (pick, message) - pick is None when rejected
    """
    user = _acting_user(context)
    if user is None:
        return None, "Please enter a username first"

    pick, message = MatchPick.save_pick(user, match_id, team_id)
    if pick is None:
        logger.debug(f"Match pick rejected for {user.username}: {message}")
        return None, message

    return _commit_pick(
        context, pick, message, db.session.get(Match, match_id).tournament_id
    )


def toggle_group_pick(context, group_id, team_id):
    """Toggle one team in the user's group selection"""
    user = _acting_user(context)
    if user is None:
        return None, "Please enter a username first"

    pick, message = GroupPick.toggle_team(user, group_id, team_id)
    if pick is None:
        logger.debug(f"Group pick rejected for {user.username}: {message}")
        return None, message

    return _commit_pick(
        context, pick, message, db.session.get(Group, group_id).tournament_id
    )
