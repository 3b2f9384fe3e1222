# Eventlet monkey patching MUST be first before any other imports
import eventlet
eventlet.monkey_patch()

from pickems import create_app, db, socketio
from pickems.models import (
    Group,
    LeaderboardEntry,
    Match,
    MatchPick,
    Team,
    Tournament,
    User,
)

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "Tournament": Tournament,
        "Team": Team,
        "Match": Match,
        "Group": Group,
        "User": User,
        "MatchPick": MatchPick,
        "LeaderboardEntry": LeaderboardEntry,
    }


if __name__ == "__main__":
    socketio.run(app, host="0.0.0.0", port=5000, debug=app.config.get("DEBUG", False))
