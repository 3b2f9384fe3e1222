#!/usr/bin/env python3
"""
Pickems Management CLI

This script provides command-line management functionality for the Pickems application.
"""

import click
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from pickems import create_app, db
from pickems.models import Group, LeaderboardEntry, Match, Team, Tournament, User
from pickems.services import tournament_service
from pickems.services.leaderboard_service import get_leaderboard, recompute_leaderboard

STAGE_LOCKS = {
    "groups": "group_stage_locked",
    "knockout": "knockout_stage_locked",
}


def _get_tournament(tournament_id):
    if tournament_id is None:
        tournament = Tournament.get_current_tournament()
        if not tournament:
            raise click.ClickException("No tournament found. Create one first.")
        return tournament

    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        raise click.ClickException(f"Tournament {tournament_id} not found")
    return tournament


@click.group()
def cli():
    """Pickems Management CLI"""
    pass


# Tournament Management Commands
@cli.group()
def tournament():
    """Tournament management commands"""
    pass


@tournament.command()
@click.argument("name")
@click.option("--activate", is_flag=True, help="Activate this tournament")
@with_appcontext
def create(name, activate):
    """Create an empty tournament"""
    created, message = tournament_service.create_tournament(name, activate=activate)
    if not created:
        raise click.ClickException(message)
    click.echo(f"✅ {message} (id {created.id})")


@tournament.command()
@click.argument("tournament_id", type=int)
@with_appcontext
def activate(tournament_id):
    """Make a tournament the active one"""
    target = _get_tournament(tournament_id)
    success, message = tournament_service.activate_tournament(target)
    if not success:
        raise click.ClickException(message)
    click.echo(f"✅ {message}")


@tournament.command("list")
@with_appcontext
def list_tournaments():
    """List all tournaments"""
    tournaments = Tournament.query.order_by(Tournament.id).all()
    if not tournaments:
        click.echo("No tournaments found.")
        return

    click.echo("Tournaments:")
    for t in tournaments:
        marker = "🟢" if t.is_active else "⚪"
        click.echo(
            f"  {marker} [{t.id}] {t.name} - {t.teams.count()} teams, "
            f"{t.groups.count()} groups, {t.matches.count()} matches"
        )


@tournament.command("generate-demo")
@click.option("--name", default="Demo Cup", show_default=True, help="Tournament name")
@click.option("--activate/--no-activate", default=True, help="Activate the new tournament")
@with_appcontext
def generate_demo(name, activate):
    """Create a sample tournament with 32 teams, 4 groups and a 16-team bracket"""
    created, message = tournament_service.generate_demo_tournament(name, activate=activate)
    if not created:
        raise click.ClickException(message)
    click.echo(f"✅ {message} (id {created.id})")


def _set_lock(stage, locked, tournament_id):
    target = _get_tournament(tournament_id)
    success, message = tournament_service.set_stage_flag(target, STAGE_LOCKS[stage], locked)
    if not success:
        raise click.ClickException(message)
    click.echo(f"{'🔒' if locked else '🔓'} {target.name}: {message}")


@tournament.command()
@click.argument("stage", type=click.Choice(sorted(STAGE_LOCKS)))
@click.option("--tournament-id", type=int, help="Defaults to the current tournament")
@with_appcontext
def lock(stage, tournament_id):
    """Stop accepting picks for a stage"""
    _set_lock(stage, True, tournament_id)


@tournament.command()
@click.argument("stage", type=click.Choice(sorted(STAGE_LOCKS)))
@click.option("--tournament-id", type=int, help="Defaults to the current tournament")
@with_appcontext
def unlock(stage, tournament_id):
    """Accept picks for a stage again"""
    _set_lock(stage, False, tournament_id)


# Leaderboard Commands
@cli.group()
def leaderboard():
    """Leaderboard commands"""
    pass


@leaderboard.command()
@click.option("--tournament-id", type=int, help="Defaults to the current tournament")
@with_appcontext
def recompute(tournament_id):
    """Rescore every user from scratch"""
    target = _get_tournament(tournament_id)
    entries, message = recompute_leaderboard(target.id)
    if entries is None:
        raise click.ClickException(message)
    click.echo(f"✅ {message}")


@leaderboard.command()
@click.option("--tournament-id", type=int, help="Defaults to the current tournament")
@with_appcontext
def show(tournament_id):
    """Print the stored leaderboard"""
    target = _get_tournament(tournament_id)
    entries = get_leaderboard(target.id)
    if not entries:
        click.echo("No leaderboard entries yet.")
        return

    click.echo(f"🏆 {target.name}")
    for entry in entries:
        click.echo(
            f"  {entry['rank']:>3}. {entry['username']:<24} "
            f"{entry['points']:>5} pts  {entry['correct_picks']:>3} correct"
        )


# User Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command("list")
@with_appcontext
def list_users():
    """List all users"""
    users = User.query.order_by(User.created_at.desc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("Users:")
    for u in users:
        last_seen = u.last_seen.strftime("%Y-%m-%d %H:%M") if u.last_seen else "never"
        click.echo(f"  {u.username} (last seen {last_seen})")


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command()
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        raise click.ClickException(f"Error initializing database: {e}")


@db_cmd.command()
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        raise click.ClickException(f"Error resetting database: {e}")


# Info Commands
@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🏆 Pickems Application Status")
    click.echo("=" * 40)

    try:
        db.session.execute(db.text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {e}")
        return

    current = Tournament.get_current_tournament()
    if not current:
        click.echo("⚠️  Current Tournament: None")
    else:
        click.echo(f"✅ Current Tournament: {current.name} (id {current.id})")
        click.echo(
            f"   Group stage: {'enabled' if current.group_stage_enabled else 'disabled'}, "
            f"{'locked' if current.group_stage_locked else 'open'}"
        )
        click.echo(
            f"   Knockout stage: {'enabled' if current.knockout_stage_enabled else 'disabled'}, "
            f"{'locked' if current.knockout_stage_locked else 'open'}"
        )

        decided = Match.query.filter(
            Match.tournament_id == current.id, Match.winner_id.isnot(None)
        ).count()
        click.echo(f"🏟️  Teams: {Team.query.filter_by(tournament_id=current.id).count()}")
        click.echo(f"📋 Groups: {Group.query.filter_by(tournament_id=current.id).count()}")
        click.echo(f"⚔️  Matches: {decided}/{current.matches.count()} decided")
        click.echo(
            f"🏆 Leaderboard entries: "
            f"{LeaderboardEntry.query.filter_by(tournament_id=current.id).count()}"
        )

    click.echo(f"👥 Users: {User.query.count()}")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        cli()
