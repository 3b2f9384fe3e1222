from functools import wraps

from flask import flash, jsonify, redirect, request, session, url_for

from pickems.utils.session_context import ADMIN_SESSION_KEY


def admin_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not session.get(ADMIN_SESSION_KEY):
            if request.path.startswith("/api/"):
                return jsonify({"error": "Admin access required"}), 403
            flash("You are not authorized to view this page.", "warning")
            return redirect(url_for("auth.admin_login", next=request.path))
        return f(*args, **kwargs)

    return decorated_function
