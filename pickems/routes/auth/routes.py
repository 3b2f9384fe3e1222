import logging
import secrets
from urllib.parse import urlparse

from flask import (
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy.exc import SQLAlchemyError

from pickems import db, limiter, login_manager
from pickems.forms.auth import AdminLoginForm, UsernameForm
from pickems.models import User
from pickems.routes.auth import bp
from pickems.utils.session_context import grant_admin, revoke_admin

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    if request.path.startswith("/api/"):
        return jsonify({"error": "Sign in with a username first"}), 401
    flash(login_manager.login_message, login_manager.login_message_category)
    return redirect(url_for("auth.login", next=request.path))


def _safe_next(default):
    next_page = request.args.get("next")
    if not next_page or urlparse(next_page).netloc != "":
        return default
    return next_page


@bp.route("/login", methods=["GET", "POST"])
@limiter.limit("10 per minute")
def login():
    if current_user.is_authenticated:
        return redirect(url_for("main.pickems"))

    form = UsernameForm()
    if form.validate_on_submit():
        user, message = User.get_or_create(form.username.data)
        if not user:
            flash(message, "error")
            return render_template("auth/login.html", form=form)

        try:
            user.update_last_seen()
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Could not save user {form.username.data}: {e}")
            flash("Could not save your username. Please try again.", "error")
            return render_template("auth/login.html", form=form)

        login_user(user, remember=True)
        logger.info(f"User signed in: {user.username}")
        flash(f"{message}, {user.username}!", "success")
        return redirect(_safe_next(url_for("main.pickems")))

    return render_template("auth/login.html", form=form)


@bp.route("/logout")
@login_required
def logout():
    logout_user()
    flash("You have been logged out successfully.", "info")
    return redirect(url_for("main.index"))


@bp.route("/admin-login", methods=["GET", "POST"])
@limiter.limit("5 per minute")
def admin_login():
    form = AdminLoginForm()
    if form.validate_on_submit():
        expected = current_app.config.get("ADMIN_PASSWORD")
        if not expected:
            flash("Admin access is disabled on this server.", "error")
            return render_template("auth/admin_login.html", form=form)

        if secrets.compare_digest(form.password.data.encode(), expected.encode()):
            grant_admin()
            logger.info(f"Admin signed in from {request.remote_addr}")
            flash("Admin access granted.", "success")
            return redirect(_safe_next(url_for("admin.dashboard")))

        logger.warning(f"Failed admin sign-in from {request.remote_addr}")
        flash("Incorrect admin password.", "error")

    return render_template("auth/admin_login.html", form=form)


@bp.route("/admin-logout")
def admin_logout():
    revoke_admin()
    flash("Admin session ended.", "info")
    return redirect(url_for("main.pickems"))
