import logging

from flask import flash, redirect, render_template, request, url_for

from pickems.forms.admin import GroupForm, MatchForm, TeamForm, TournamentForm
from pickems.models import AdminAction, Team, Tournament
from pickems.routes.admin import bp
from pickems.routes.admin.decorators import admin_required
from pickems.services import tournament_service
from pickems.services.leaderboard_service import (
    get_leaderboard,
    get_round_policy,
    recompute_leaderboard,
)
from pickems.services.scheduler_service import scheduler_service
from pickems.socketio_handlers import get_connection_stats
from pickems.utils.cache_utils import get_cache_stats

logger = logging.getLogger(__name__)


def _flash_result(success, message):
    if not success:
        logger.warning(f"Admin request rejected: {message}")
    flash(message, "success" if success else "error")


def _back():
    return redirect(url_for("admin.dashboard"))


def _optional_int(field):
    value = request.form.get(field, "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _current_tournament():
    tournament = Tournament.get_current_tournament()
    if not tournament:
        flash("Create a tournament first.", "warning")
    return tournament


@bp.route("/")
@admin_required
def dashboard():
    tournament = Tournament.get_current_tournament()
    context = {
        "tournament": tournament,
        "tournaments": Tournament.query.order_by(Tournament.id.desc()).all(),
        "tournament_form": TournamentForm(),
        "team_form": TeamForm(),
        "match_form": MatchForm(),
        "group_form": GroupForm(),
        "recent_actions": AdminAction.get_recent(tournament.id if tournament else None),
        "scheduler": scheduler_service.get_status(),
        "cache_stats": get_cache_stats(),
        "connections": get_connection_stats(),
    }
    if tournament:
        policy = get_round_policy()
        matches = tournament.get_ordered_matches()
        context.update(
            teams=Team.get_all_for_tournament(tournament.id),
            matches=matches,
            match_stages={m.id: m.resolved_stage(policy) for m in matches},
            pick_counts={m.id: m.get_picks_count() for m in matches},
            groups=tournament.get_ordered_groups(),
            leaderboard=get_leaderboard(tournament.id),
        )
    return render_template("admin/dashboard.html", **context)


# Tournaments


@bp.route("/tournaments", methods=["POST"])
@admin_required
def create_tournament():
    form = TournamentForm()
    if not form.validate_on_submit():
        for field, errors in form.errors.items():
            for error in errors:
                flash(f"{field}: {error}", "error")
        return _back()

    if form.demo.data:
        tournament, message = tournament_service.generate_demo_tournament(
            form.name.data.strip(), activate=form.activate.data
        )
    else:
        tournament, message = tournament_service.create_tournament(
            form.name.data, activate=form.activate.data
        )
    _flash_result(tournament is not None, message)
    return _back()


@bp.route("/tournaments/<int:tournament_id>/activate", methods=["POST"])
@admin_required
def activate_tournament(tournament_id):
    tournament = Tournament.query.get_or_404(tournament_id)
    _flash_result(*tournament_service.activate_tournament(tournament))
    return _back()


@bp.route("/demo", methods=["POST"])
@admin_required
def generate_demo():
    name = request.form.get("name", "").strip() or "Demo Cup"
    tournament, message = tournament_service.generate_demo_tournament(name)
    _flash_result(tournament is not None, message)
    return _back()


@bp.route("/stage/<flag>", methods=["POST"])
@admin_required
def set_stage_flag(flag):
    tournament = _current_tournament()
    if tournament:
        value = request.form.get("value")
        if value is None:
            new_value = not bool(getattr(tournament, flag, False))
        else:
            new_value = value.lower() in ("1", "true", "on", "yes")
        _flash_result(*tournament_service.set_stage_flag(tournament, flag, new_value))
    return _back()


@bp.route("/leaderboard/recompute", methods=["POST"])
@admin_required
def recompute():
    tournament = _current_tournament()
    if tournament:
        entries, message = recompute_leaderboard(tournament.id)
        _flash_result(entries is not None, message)
    return _back()


# Teams


@bp.route("/teams", methods=["POST"])
@admin_required
def add_team():
    tournament = _current_tournament()
    form = TeamForm()
    if tournament and form.validate_on_submit():
        team, message = tournament_service.add_team(
            tournament, form.name.data, logo_url=form.logo_url.data, seed=form.seed.data
        )
        _flash_result(team is not None, message)
    elif form.errors:
        for field, errors in form.errors.items():
            for error in errors:
                flash(f"{field}: {error}", "error")
    return _back()


@bp.route("/teams/<int:team_id>/delete", methods=["POST"])
@admin_required
def remove_team(team_id):
    tournament = _current_tournament()
    if tournament:
        _flash_result(*tournament_service.remove_team(tournament, team_id))
    return _back()


# Matches


@bp.route("/matches", methods=["POST"])
@admin_required
def add_match():
    tournament = _current_tournament()
    form = MatchForm()
    if tournament and form.validate_on_submit():
        match, message = tournament_service.add_match(
            tournament, form.round.data, bracket=form.bracket.data, stage=form.stage.data
        )
        _flash_result(match is not None, message)
    elif form.errors:
        for field, errors in form.errors.items():
            for error in errors:
                flash(f"{field}: {error}", "error")
    return _back()


@bp.route("/matches/<int:match_id>/delete", methods=["POST"])
@admin_required
def remove_match(match_id):
    tournament = _current_tournament()
    if tournament:
        _flash_result(*tournament_service.remove_match(tournament, match_id))
    return _back()


@bp.route("/matches/<int:match_id>/slot", methods=["POST"])
@admin_required
def assign_slot(match_id):
    tournament = _current_tournament()
    if tournament:
        _flash_result(
            *tournament_service.assign_match_team(
                tournament,
                match_id,
                request.form.get("slot", ""),
                _optional_int("team_id"),
            )
        )
    return _back()


@bp.route("/matches/<int:match_id>/winner", methods=["POST"])
@admin_required
def set_winner(match_id):
    tournament = _current_tournament()
    if tournament:
        _flash_result(
            *tournament_service.set_match_winner(
                tournament, match_id, _optional_int("winner_id")
            )
        )
    return _back()


# Groups


@bp.route("/groups", methods=["POST"])
@admin_required
def add_group():
    tournament = _current_tournament()
    form = GroupForm()
    if tournament and form.validate_on_submit():
        group, message = tournament_service.add_group(tournament, form.name.data)
        _flash_result(group is not None, message)
    elif form.errors:
        for field, errors in form.errors.items():
            for error in errors:
                flash(f"{field}: {error}", "error")
    return _back()


@bp.route("/groups/<int:group_id>/delete", methods=["POST"])
@admin_required
def remove_group(group_id):
    tournament = _current_tournament()
    if tournament:
        _flash_result(*tournament_service.remove_group(tournament, group_id))
    return _back()


@bp.route("/groups/<int:group_id>/teams", methods=["POST"])
@admin_required
def add_group_team(group_id):
    tournament = _current_tournament()
    team_id = _optional_int("team_id")
    if tournament and team_id is None:
        flash("Choose a team to add.", "error")
    elif tournament:
        _flash_result(*tournament_service.add_team_to_group(tournament, group_id, team_id))
    return _back()


@bp.route("/groups/<int:group_id>/teams/<int:team_id>/remove", methods=["POST"])
@admin_required
def remove_group_team(group_id, team_id):
    tournament = _current_tournament()
    if tournament:
        _flash_result(
            *tournament_service.remove_team_from_group(tournament, group_id, team_id)
        )
    return _back()


@bp.route("/groups/<int:group_id>/advancing", methods=["POST"])
@admin_required
def set_advancing(group_id):
    tournament = _current_tournament()
    if tournament:
        team_ids = request.form.getlist("team_ids", type=int)
        _flash_result(
            *tournament_service.set_group_advancing(tournament, group_id, team_ids)
        )
    return _back()


# Scheduler


@bp.route("/scheduler/<action>", methods=["POST"])
@admin_required
def scheduler_action(action):
    if action == "force":
        _flash_result(*scheduler_service.force_refresh(request.form.get("scope", "active")))
    elif action in ("pause", "resume"):
        job_id = request.form.get("job_id", "refresh_leaderboard")
        handler = scheduler_service.pause_job if action == "pause" else scheduler_service.resume_job
        _flash_result(*handler(job_id))
    else:
        flash(f"Unknown scheduler action: {action}", "error")
    return _back()
