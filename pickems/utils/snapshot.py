"""
Plain, immutable records handed to the scoring and bracket code.

The SQLAlchemy models build these via ``to_snapshot()`` so the pure logic in
``pickems.utils`` never touches a session, a request or ambient state.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class TeamRecord:
    id: int
    name: str
    logo: Optional[str] = None
    seed: Optional[int] = None


@dataclass(frozen=True)
class MatchRecord:
    id: int
    round: str
    team1: Optional[TeamRecord] = None
    team2: Optional[TeamRecord] = None
    winner: Optional[int] = None
    bracket: str = "upper"
    # Explicit stage value (see RoundStage); None falls back to the round label
    stage: Optional[str] = None

    @property
    def team_ids(self):
        return tuple(team.id for team in (self.team1, self.team2) if team)


@dataclass(frozen=True)
class GroupRecord:
    id: int
    name: str
    teams: Tuple[TeamRecord, ...] = ()
    advancing_teams: Tuple[int, ...] = ()


@dataclass(frozen=True)
class MatchPickRecord:
    match_id: int
    team_id: int


@dataclass(frozen=True)
class GroupPickRecord:
    group_id: int
    selected_teams: Tuple[int, ...] = ()


@dataclass(frozen=True)
class TournamentSnapshot:
    """Everything the scoring engine needs to know about the real results."""

    id: int
    name: str
    teams: Tuple[TeamRecord, ...] = ()
    matches: Tuple[MatchRecord, ...] = ()
    groups: Tuple[GroupRecord, ...] = ()
    group_stage_locked: bool = False
    knockout_stage_locked: bool = False

    def match_by_id(self, match_id):
        return next((m for m in self.matches if m.id == match_id), None)

    def group_by_id(self, group_id):
        return next((g for g in self.groups if g.id == group_id), None)


@dataclass(frozen=True)
class SessionContext:
    """Who is acting, and against which tournament."""

    username: Optional[str] = None
    user_id: Optional[int] = None
    tournament_id: Optional[int] = None
    is_admin: bool = False

    @property
    def is_identified(self):
        return bool(self.username) and self.user_id is not None


@dataclass(frozen=True)
class ScoreResult:
    points: int = 0
    correct_picks: int = 0
