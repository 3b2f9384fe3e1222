from datetime import datetime, timezone

from pickems import db


class MatchPick(db.Model):
    """A user's predicted winner for one knockout match"""

    __tablename__ = "match_picks"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    match_id = db.Column(db.Integer, db.ForeignKey("matches.id"), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    team = db.relationship("Team", foreign_keys=[team_id])

    # One pick per match per user; a new pick overwrites the old one
    __table_args__ = (
        db.UniqueConstraint("user_id", "match_id", name="unique_user_match_pick"),
        db.Index("idx_match_pick_user", "user_id"),
        db.Index("idx_match_pick_match", "match_id"),
    )

    def __repr__(self):
        return f"<MatchPick user_id={self.user_id} match_id={self.match_id} team_id={self.team_id}>"

    @property
    def is_correct(self):
        """None until the match has a winner"""
        if not self.match or self.match.winner_id is None:
            return None
        return self.team_id == self.match.winner_id

    @staticmethod
    def save_pick(user, match_id, team_id):
        """Create or overwrite a user's pick for a match"""
        from .match import Match

        match = db.session.get(Match, match_id)
        if not match:
            return None, "Match not found"

        if match.tournament.knockout_stage_locked:
            return None, "Knockout stage is locked!"

        if not match.has_team(team_id):
            return None, "Team is not playing in this match"

        pick = MatchPick.query.filter_by(user_id=user.id, match_id=match.id).first()
        if pick:
            pick.team_id = team_id
            return pick, "Pick updated"

        pick = MatchPick(user_id=user.id, match_id=match.id, team_id=team_id)
        db.session.add(pick)
        return pick, "Pick saved!"

    def to_snapshot(self):
        from pickems.utils.snapshot import MatchPickRecord

        return MatchPickRecord(match_id=self.match_id, team_id=self.team_id)

    def to_dict(self):
        return {
            "match_id": self.match_id,
            "team_id": self.team_id,
            "is_correct": self.is_correct,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
