from datetime import datetime, timezone

from pickems import db


class Tournament(db.Model):
    __tablename__ = "tournaments"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)

    # Stage settings
    group_stage_enabled = db.Column(db.Boolean, default=True)
    knockout_stage_enabled = db.Column(db.Boolean, default=True)
    group_stage_locked = db.Column(db.Boolean, default=False)
    knockout_stage_locked = db.Column(db.Boolean, default=False)

    # Status
    is_active = db.Column(db.Boolean, default=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    teams = db.relationship(
        "Team", backref="tournament", lazy="dynamic", cascade="all, delete-orphan"
    )
    matches = db.relationship(
        "Match", backref="tournament", lazy="dynamic", cascade="all, delete-orphan"
    )
    groups = db.relationship(
        "Group", backref="tournament", lazy="dynamic", cascade="all, delete-orphan"
    )
    leaderboard_entries = db.relationship(
        "LeaderboardEntry",
        backref="tournament",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    __table_args__ = (db.Index("idx_tournament_active", "is_active"),)

    STAGE_FLAGS = (
        "group_stage_enabled",
        "knockout_stage_enabled",
        "group_stage_locked",
        "knockout_stage_locked",
    )

    def __repr__(self):
        return f"<Tournament {self.name}>"

    @staticmethod
    def get_current_tournament():
        """Get the active tournament, falling back to the newest one"""
        tournament = Tournament.query.filter_by(is_active=True).first()
        if tournament:
            return tournament
        return Tournament.query.order_by(Tournament.id.desc()).first()

    @staticmethod
    def create_tournament(name, activate=False):
        tournament = Tournament(name=name)
        db.session.add(tournament)
        if activate:
            tournament.activate()
        return tournament

    def activate(self):
        """Make this the only active tournament"""
        Tournament.query.filter(Tournament.id != self.id).update(
            {"is_active": False}, synchronize_session=False
        )
        self.is_active = True

    def set_stage_flag(self, flag, value):
        if flag not in self.STAGE_FLAGS:
            return False, f"Unknown stage setting: {flag}"
        setattr(self, flag, bool(value))
        return True, f"{flag.replace('_', ' ').capitalize()}: {'on' if value else 'off'}"

    @property
    def show_groups(self):
        return bool(self.group_stage_enabled) and self.groups.count() > 0

    @property
    def show_knockout(self):
        return bool(self.knockout_stage_enabled) and self.matches.count() > 0

    def get_ordered_matches(self):
        from .match import Match

        return self.matches.order_by(Match.match_number, Match.id).all()

    def get_ordered_groups(self):
        from .group import Group

        return self.groups.order_by(Group.name).all()

    def to_snapshot(self):
        """Freeze the tournament into plain records for scoring and layout"""
        from pickems.utils.snapshot import TournamentSnapshot

        return TournamentSnapshot(
            id=self.id,
            name=self.name,
            teams=tuple(team.to_snapshot() for team in self.teams),
            matches=tuple(match.to_snapshot() for match in self.get_ordered_matches()),
            groups=tuple(group.to_snapshot() for group in self.get_ordered_groups()),
            group_stage_locked=bool(self.group_stage_locked),
            knockout_stage_locked=bool(self.knockout_stage_locked),
        )

    def to_dict(self, policy=None):
        """Full tournament payload; match stages follow the given round policy"""
        return {
            "id": self.id,
            "name": self.name,
            "group_stage_enabled": self.group_stage_enabled,
            "knockout_stage_enabled": self.knockout_stage_enabled,
            "group_stage_locked": self.group_stage_locked,
            "knockout_stage_locked": self.knockout_stage_locked,
            "is_active": self.is_active,
            "teams": [team.to_dict() for team in self.teams],
            "groups": [group.to_dict() for group in self.get_ordered_groups()],
            "matches": [
                match.to_dict(policy=policy) for match in self.get_ordered_matches()
            ],
        }
