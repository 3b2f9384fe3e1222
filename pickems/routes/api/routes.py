from functools import wraps

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from pickems import cache, db, limiter
from pickems.models import Tournament
from pickems.routes.api import bp
from pickems.services.leaderboard_service import get_leaderboard, get_round_policy
from pickems.services.pick_service import submit_match_pick, toggle_group_pick
from pickems.utils.bracket import BracketGeometry, derive_bracket
from pickems.utils.cache_utils import tournament_cache_key
from pickems.utils.session_context import get_session_context


def add_security_headers(f):
    """Add security headers to API responses"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = f(*args, **kwargs)
        if hasattr(response, "headers"):
            response.headers["Cache-Control"] = (
                "no-store, no-cache, must-revalidate, max-age=0"
            )
        return response

    return decorated_function


def _resolve_tournament():
    """The tournament named by ?tournament_id=, else the current one"""
    tournament_id = request.args.get("tournament_id", type=int)
    if tournament_id is not None:
        return db.session.get(Tournament, tournament_id)
    return Tournament.get_current_tournament()


@bp.route("/tournament")
def tournament_detail():
    tournament = _resolve_tournament()
    if not tournament:
        return jsonify({"error": "No tournament found"}), 404

    key = tournament_cache_key(tournament.id)
    data = cache.get(key)
    if data is None:
        data = tournament.to_dict(policy=get_round_policy())
        cache.set(key, data)
    return jsonify(data)


@bp.route("/bracket")
def bracket():
    """Computed bracket layout: columns of match boxes plus connector segments"""
    tournament = _resolve_tournament()
    if not tournament:
        return jsonify({"error": "No tournament found"}), 404

    layout = derive_bracket(
        tournament.to_snapshot().matches,
        BracketGeometry.from_config(current_app.config),
        get_round_policy(),
    )
    data = layout.to_dict()
    data["tournament_id"] = tournament.id
    return jsonify(data)


@bp.route("/leaderboard")
def leaderboard():
    tournament = _resolve_tournament()
    if not tournament:
        return jsonify({"error": "No tournament found"}), 404

    return jsonify({"tournament_id": tournament.id, "entries": get_leaderboard(tournament.id)})


@bp.route("/picks", methods=["GET"])
@login_required
@add_security_headers
def user_picks():
    """The signed-in user's knockout picks"""
    tournament = _resolve_tournament()
    if not tournament:
        return jsonify({"error": "No tournament found"}), 404

    picks = current_user.get_match_picks(tournament.id)
    return jsonify([pick.to_dict() for pick in picks])


@bp.route("/picks", methods=["POST"])
@login_required
@limiter.limit("60 per minute")
@add_security_headers
def save_pick():
    data = request.get_json(silent=True) or {}
    match_id = data.get("match_id")
    team_id = data.get("team_id")

    if not isinstance(match_id, int) or not isinstance(team_id, int):
        return jsonify({"error": "match_id and team_id are required"}), 400

    pick, message = submit_match_pick(get_session_context(), match_id, team_id)
    if pick is None:
        status = 404 if message == "Match not found" else 400
        return jsonify({"error": message}), status

    return jsonify({"success": True, "message": message, "pick": pick.to_dict()})


@bp.route("/group-picks")
@login_required
@add_security_headers
def user_group_picks():
    tournament = _resolve_tournament()
    if not tournament:
        return jsonify({"error": "No tournament found"}), 404

    picks = current_user.get_group_picks(tournament.id)
    return jsonify([pick.to_dict() for pick in picks])


@bp.route("/group-picks/<int:group_id>/toggle", methods=["POST"])
@login_required
@limiter.limit("60 per minute")
@add_security_headers
def toggle_group(group_id):
    data = request.get_json(silent=True) or {}
    team_id = data.get("team_id")
    if not isinstance(team_id, int):
        return jsonify({"error": "team_id is required"}), 400

    pick, message = toggle_group_pick(get_session_context(), group_id, team_id)
    if pick is None:
        status = 404 if message == "Group not found" else 400
        return jsonify({"error": message}), status

    return jsonify({"success": True, "message": message, "pick": pick.to_dict()})
