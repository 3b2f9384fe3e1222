from datetime import datetime, timezone

from pickems import db

BRACKET_SIDES = ("upper", "lower", "finals")


class Match(db.Model):
    __tablename__ = "matches"

    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(
        db.Integer, db.ForeignKey("tournaments.id"), nullable=False
    )

    # Display order within the bracket; arrival order drives top-to-bottom layout
    match_number = db.Column(db.Integer, nullable=False, default=0)

    # Free-text label, e.g. "Quarter Finals - Match 2"
    round = db.Column(db.String(100), nullable=False)
    bracket = db.Column(db.String(10), nullable=False, default="upper")

    # Explicit RoundStage value; NULL means "classify from the round label"
    stage = db.Column(db.String(20))

    # Teams (NULL = TBD)
    team1_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    team2_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)

    # Set by an admin once the real result is known
    winner_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    team1 = db.relationship("Team", foreign_keys=[team1_id], lazy="joined")
    team2 = db.relationship("Team", foreign_keys=[team2_id], lazy="joined")
    winner = db.relationship("Team", foreign_keys=[winner_id])
    picks = db.relationship(
        "MatchPick", backref="match", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_match_tournament_number", "tournament_id", "match_number"),
        db.CheckConstraint(
            "team1_id IS NULL OR team2_id IS NULL OR team1_id != team2_id",
            name="different_teams",
        ),
    )

    def __repr__(self):
        return f'<Match {self.round}: {self.team1.name if self.team1 else "TBD"} vs {self.team2.name if self.team2 else "TBD"}>'

    @property
    def team_ids(self):
        return [team_id for team_id in (self.team1_id, self.team2_id) if team_id]

    @property
    def is_decided(self):
        return self.winner_id is not None

    def resolved_stage(self, policy=None):
        """Stored stage when set, else the stage classified from the label"""
        from pickems.utils.rounds import DEFAULT_POLICY, resolve_stage

        return resolve_stage(self, policy or DEFAULT_POLICY)

    def has_team(self, team_id):
        return team_id is not None and team_id in self.team_ids

    def assign_team(self, slot, team):
        """Fill (or clear, with team=None) one of the two team slots"""
        if slot not in ("team1", "team2"):
            return False, f"Unknown team slot: {slot}"

        other_id = self.team2_id if slot == "team1" else self.team1_id
        if team is not None and team.id == other_id:
            return False, "A team cannot play itself"
        if team is not None and team.tournament_id != self.tournament_id:
            return False, "Team belongs to another tournament"

        previous_id = getattr(self, f"{slot}_id")
        setattr(self, slot, team)
        setattr(self, f"{slot}_id", team.id if team else None)

        # A winner that is no longer in the match is stale
        if self.winner_id is not None and self.winner_id == previous_id:
            self.winner_id = None

        return True, "Team assigned"

    def set_winner(self, team_id):
        """Record the real result; None clears it"""
        if team_id is None:
            self.winner_id = None
            return True, "Winner cleared"

        if not self.has_team(team_id):
            return False, "Winner must be one of the match's teams"

        self.winner_id = team_id
        return True, "Winner recorded"

    def get_picks_count(self):
        """Count picks for each team slot"""
        team1_picks = (
            self.picks.filter_by(team_id=self.team1_id).count() if self.team1_id else 0
        )
        team2_picks = (
            self.picks.filter_by(team_id=self.team2_id).count() if self.team2_id else 0
        )
        return {
            "team1": team1_picks,
            "team2": team2_picks,
            "total": team1_picks + team2_picks,
        }

    @staticmethod
    def next_match_number(tournament_id):
        highest = (
            db.session.query(db.func.max(Match.match_number))
            .filter(Match.tournament_id == tournament_id)
            .scalar()
        )
        return (highest or 0) + 1

    def to_snapshot(self):
        from pickems.utils.snapshot import MatchRecord

        return MatchRecord(
            id=self.id,
            round=self.round,
            team1=self.team1.to_snapshot() if self.team1 else None,
            team2=self.team2.to_snapshot() if self.team2 else None,
            winner=self.winner_id,
            bracket=self.bracket,
            stage=self.stage,
        )

    def to_dict(self, policy=None):
        return {
            "id": self.id,
            "match_number": self.match_number,
            "round": self.round,
            "bracket": self.bracket,
            "stage": self.resolved_stage(policy).value,
            "team1": self.team1.to_dict() if self.team1 else None,
            "team2": self.team2.to_dict() if self.team2 else None,
            "winner": self.winner_id,
        }
