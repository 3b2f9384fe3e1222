from pickems import db  # noqa: F401 - imported for model imports

from .admin_action import AdminAction
from .group import Group, GroupTeam
from .group_pick import GroupPick
from .leaderboard_entry import LeaderboardEntry
from .match import Match
from .pick import MatchPick
from .team import Team
from .tournament import Tournament
from .user import User

__all__ = [
    "AdminAction",
    "Group",
    "GroupTeam",
    "GroupPick",
    "LeaderboardEntry",
    "Match",
    "MatchPick",
    "Team",
    "Tournament",
    "User",
]
