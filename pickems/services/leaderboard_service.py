"""
Leaderboard Service

Recomputes stored leaderboard entries from the full pick set. Scores are never
adjusted incrementally: every refresh re-runs the scoring engine over a fresh
tournament snapshot and overwrites the stored row for each username.
"""

import logging

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from pickems import cache, db
from pickems.models import LeaderboardEntry, Tournament, User
from pickems.utils.cache_utils import (
    invalidate_leaderboard_cache,
    leaderboard_cache_key,
)
from pickems.utils.rounds import RoundPolicy
from pickems.utils.scoring import calculate_score

logger = logging.getLogger(__name__)


def get_round_policy():
    return RoundPolicy.from_config(current_app.config)


def score_user(snapshot, user, policy=None):
    """Run the scoring engine for one user against a tournament snapshot"""
    match_picks = [pick.to_snapshot() for pick in user.get_match_picks(snapshot.id)]
    group_picks = [pick.to_snapshot() for pick in user.get_group_picks(snapshot.id)]
    return calculate_score(
        snapshot, match_picks, group_picks, policy or get_round_policy()
    )


def recompute_leaderboard(tournament_id, broadcast=True):
    """
    Rebuild every leaderboard entry of a tournament.

    Returns:
        (entries, message) - entries is None when the tournament is missing
        or the write failed
    """
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return None, "Tournament not found"

    snapshot = tournament.to_snapshot()
    policy = get_round_policy()
    pickers = User.get_pickers(tournament.id)

    try:
        usernames = set()
        for user in pickers:
            result = score_user(snapshot, user, policy)
            LeaderboardEntry.upsert(
                tournament.id, user.username, result.points, result.correct_picks
            )
            usernames.add(user.username)

        # Entries for users whose picks have all gone (e.g. deleted matches)
        for entry in LeaderboardEntry.query.filter_by(tournament_id=tournament.id):
            if entry.username not in usernames:
                db.session.delete(entry)

        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Leaderboard recompute failed for tournament {tournament.id}: {e}")
        return None, "Could not update the leaderboard"

    invalidate_leaderboard_cache(tournament.id)
    entries = get_leaderboard(tournament.id)
    logger.info(
        f"Leaderboard recomputed for tournament {tournament.id}: {len(entries)} entries"
    )

    if broadcast:
        _broadcast(tournament.id, entries)

    return entries, f"Leaderboard updated ({len(entries)} players)"


def refresh_user_entry(context, broadcast=True):
    """
    Recompute a single user's entry after they change a pick.

    Args:
        context: SessionContext identifying the user and tournament
    """
    if not context.is_identified or context.tournament_id is None:
        return None, "No user or tournament in session"

    tournament = db.session.get(Tournament, context.tournament_id)
    user = db.session.get(User, context.user_id)
    if not tournament or not user:
        return None, "Tournament or user not found"

    result = score_user(tournament.to_snapshot(), user)

    try:
        entry = LeaderboardEntry.upsert(
            tournament.id, user.username, result.points, result.correct_picks
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Leaderboard update failed for {user.username}: {e}")
        return None, "Could not update the leaderboard"

    invalidate_leaderboard_cache(tournament.id)
    if broadcast:
        _broadcast(tournament.id, get_leaderboard(tournament.id))

    return entry, "Leaderboard entry updated"


def get_leaderboard(tournament_id):
    """Sorted leaderboard rows as dicts, served from cache when warm"""
    key = leaderboard_cache_key(tournament_id)
    rows = cache.get(key)
    if rows is not None:
        return rows

    rows = []
    for rank, entry in enumerate(LeaderboardEntry.get_sorted(tournament_id), start=1):
        row = entry.to_dict()
        row["rank"] = rank
        rows.append(row)

    cache.set(key, rows, timeout=current_app.config.get("LEADERBOARD_CACHE_TIMEOUT", 60))
    return rows


def _broadcast(tournament_id, entries):
    from pickems.socketio_handlers import broadcast_leaderboard_update

    broadcast_leaderboard_update(tournament_id, entries)
