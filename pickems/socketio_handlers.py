"""
SocketIO Event Handlers for Real-time Updates

Clients on the /leaderboard namespace join one room per tournament and
receive the full sorted leaderboard every time it is recomputed.
"""

import logging

from flask import request
from flask_login import current_user
from flask_socketio import emit, join_room, leave_room

from pickems import socketio
from pickems.models import Tournament

logger = logging.getLogger(__name__)

NAMESPACE = "/leaderboard"

# Track connected clients and the tournament room they are in
connected_clients = {}


def tournament_room(tournament_id):
    return f"tournament_{tournament_id}"


def _send_leaderboard(tournament_id):
    from pickems.services.leaderboard_service import get_leaderboard

    emit(
        "leaderboard_update",
        {"tournament_id": tournament_id, "entries": get_leaderboard(tournament_id)},
    )


@socketio.on("connect", namespace=NAMESPACE)
def on_connect():
    """Join the current tournament's room and send its leaderboard"""
    client_id = request.sid
    username = current_user.username if current_user.is_authenticated else None

    tournament = Tournament.get_current_tournament()
    tournament_id = tournament.id if tournament else None
    connected_clients[client_id] = {"username": username, "tournament_id": tournament_id}

    logger.info(f"Client connected to {NAMESPACE}: {client_id} (user: {username})")

    if tournament_id is not None:
        join_room(tournament_room(tournament_id))
        _send_leaderboard(tournament_id)


@socketio.on("disconnect", namespace=NAMESPACE)
def on_disconnect(reason=None):
    client = connected_clients.pop(request.sid, None)
    if client:
        logger.info(f"Client disconnected from {NAMESPACE}: {request.sid} (user: {client['username']})")


@socketio.on("subscribe", namespace=NAMESPACE)
def on_subscribe(data):
    """Switch the client to another tournament's leaderboard"""
    client_id = request.sid
    try:
        tournament_id = int((data or {}).get("tournament_id"))
    except (TypeError, ValueError):
        emit("error", {"message": "tournament_id is required"})
        return

    client = connected_clients.setdefault(client_id, {"username": None, "tournament_id": None})
    if client["tournament_id"] == tournament_id:
        return

    if client["tournament_id"] is not None:
        leave_room(tournament_room(client["tournament_id"]))
    join_room(tournament_room(tournament_id))
    client["tournament_id"] = tournament_id

    _send_leaderboard(tournament_id)
    logger.debug(f"Client {client_id} subscribed to tournament {tournament_id}")


# Broadcast functions (called from the leaderboard service)
def broadcast_leaderboard_update(tournament_id, entries):
    """Push a freshly recomputed leaderboard to everyone watching it"""
    try:
        socketio.emit(
            "leaderboard_update",
            {"tournament_id": tournament_id, "entries": entries},
            to=tournament_room(tournament_id),
            namespace=NAMESPACE,
        )
        logger.debug(f"Broadcasted leaderboard for tournament {tournament_id}")
    except Exception as e:
        logger.error(f"Error broadcasting leaderboard update: {e}")


def get_connection_stats():
    rooms = {}
    for client in connected_clients.values():
        rooms[client["tournament_id"]] = rooms.get(client["tournament_id"], 0) + 1
    return {"connected_clients": len(connected_clients), "by_tournament": rooms}
