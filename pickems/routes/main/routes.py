import logging

from flask import (
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import current_user, login_required

from pickems import limiter
from pickems.models import LeaderboardEntry, Tournament
from pickems.routes.main import bp
from pickems.services.leaderboard_service import get_leaderboard, get_round_policy
from pickems.services.pick_service import submit_match_pick, toggle_group_pick
from pickems.utils.bracket import BracketGeometry, derive_bracket
from pickems.utils.group_selection import GROUP_SELECTION_SIZE, group_pick_highlights
from pickems.utils.rounds import points_for_stage, resolve_stage
from pickems.utils.session_context import get_session_context

logger = logging.getLogger(__name__)


def _is_ajax():
    return request.headers.get("X-Requested-With") == "XMLHttpRequest" or request.is_json


def _pick_response(pick, message):
    """JSON for AJAX pickers, flash and redirect for plain forms"""
    if _is_ajax():
        if pick is None:
            return jsonify({"success": False, "error": message}), 400
        return jsonify({"success": True, "message": message, "pick": pick.to_dict()})

    flash(message, "success" if pick is not None else "error")
    return redirect(url_for("main.pickems"))


def build_group_panels(snapshot, selections):
    """Display rows for every group picker of the page"""
    panels = []
    for group in snapshot.groups:
        selected = selections.get(group.id, [])
        panels.append(
            {
                "group": group,
                "rows": group_pick_highlights(group, selected),
                "selected_count": len(selected),
                "is_resolved": bool(group.advancing_teams),
            }
        )
    return panels


@bp.route("/")
def index():
    if current_user.is_authenticated:
        return redirect(url_for("main.pickems"))
    return redirect(url_for("auth.login"))


@bp.route("/pickems")
@login_required
def pickems():
    """Group pickers and the knockout bracket for the current tournament"""
    tournament = Tournament.get_current_tournament()
    if not tournament:
        return render_template("main/pickems.html", tournament=None)

    snapshot = tournament.to_snapshot()
    policy = get_round_policy()

    group_panels = []
    if tournament.show_groups:
        selections = {
            pick.group_id: list(pick.selected_team_ids or [])
            for pick in current_user.get_group_picks(tournament.id)
        }
        group_panels = build_group_panels(snapshot, selections)

    layout = None
    match_points = {}
    if tournament.show_knockout:
        layout = derive_bracket(
            snapshot.matches, BracketGeometry.from_config(current_app.config), policy
        )
        match_points = {
            match.id: points_for_stage(resolve_stage(match, policy))
            for match in snapshot.matches
        }

    match_picks = {
        pick.match_id: pick.team_id
        for pick in current_user.get_match_picks(tournament.id)
    }
    entry = LeaderboardEntry.query.filter_by(
        tournament_id=tournament.id, username=current_user.username
    ).first()

    return render_template(
        "main/pickems.html",
        tournament=tournament,
        group_panels=group_panels,
        selection_size=GROUP_SELECTION_SIZE,
        layout=layout,
        match_picks=match_picks,
        match_points=match_points,
        entry=entry,
    )


@bp.route("/pickems/match/<int:match_id>", methods=["POST"])
@login_required
@limiter.limit("60 per minute")
def pick_match(match_id):
    team_id = request.form.get("team_id", type=int)
    if team_id is None and request.is_json:
        try:
            team_id = int((request.get_json(silent=True) or {})["team_id"])
        except (KeyError, TypeError, ValueError):
            team_id = None
    if team_id is None:
        return _pick_response(None, "Please choose a team")

    pick, message = submit_match_pick(get_session_context(), match_id, team_id)
    if pick is not None:
        logger.info(f"{current_user.username} picked team {team_id} for match {match_id}")
    return _pick_response(pick, message)


@bp.route("/pickems/group/<int:group_id>/toggle/<int:team_id>", methods=["POST"])
@login_required
@limiter.limit("60 per minute")
def toggle_group(group_id, team_id):
    pick, message = toggle_group_pick(get_session_context(), group_id, team_id)
    return _pick_response(pick, message)


@bp.route("/leaderboard")
def leaderboard():
    tournament = Tournament.get_current_tournament()
    entries = get_leaderboard(tournament.id) if tournament else []
    return render_template(
        "main/leaderboard.html",
        tournament=tournament,
        entries=entries,
        username=current_user.username if current_user.is_authenticated else None,
    )
