"""
Cache utilities for the Pickems application
Cache keys and invalidation helpers for leaderboard and tournament reads
"""

from flask import current_app

from pickems import cache


def leaderboard_cache_key(tournament_id):
    return f"leaderboard_{tournament_id}"


def tournament_cache_key(tournament_id):
    return f"tournament_{tournament_id}"


def invalidate_leaderboard_cache(tournament_id):
    cache.delete(leaderboard_cache_key(tournament_id))
    current_app.logger.debug(f"Leaderboard cache cleared for tournament {tournament_id}")


def invalidate_tournament_cache(tournament_id):
    """Drop everything derived from a tournament's teams, matches and groups"""
    cache.delete_many(
        tournament_cache_key(tournament_id), leaderboard_cache_key(tournament_id)
    )
    current_app.logger.debug(f"Tournament cache cleared for tournament {tournament_id}")


def get_cache_stats():
    return {
        "type": current_app.config.get("CACHE_TYPE", "Unknown"),
        "timeout": current_app.config.get("CACHE_DEFAULT_TIMEOUT", 300),
    }
