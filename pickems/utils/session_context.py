"""Build the per-request SessionContext from Flask-Login and the session"""

from flask import session
from flask_login import current_user

from pickems.models import Tournament
from pickems.utils.snapshot import SessionContext

ADMIN_SESSION_KEY = "is_admin"


def get_session_context(tournament=None):
    if tournament is None:
        tournament = Tournament.get_current_tournament()

    authenticated = current_user.is_authenticated
    return SessionContext(
        username=current_user.username if authenticated else None,
        user_id=current_user.id if authenticated else None,
        tournament_id=tournament.id if tournament else None,
        is_admin=bool(session.get(ADMIN_SESSION_KEY)),
    )


def grant_admin():
    session[ADMIN_SESSION_KEY] = True
    session.modified = True


def revoke_admin():
    session.pop(ADMIN_SESSION_KEY, None)
