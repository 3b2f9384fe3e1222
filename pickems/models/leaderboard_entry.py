from datetime import datetime, timezone

from pickems import db


class LeaderboardEntry(db.Model):
    """Stored score for one username; always rewritten from a full recompute"""

    __tablename__ = "leaderboard_entries"

    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(
        db.Integer, db.ForeignKey("tournaments.id"), nullable=False
    )
    username = db.Column(db.String(80), nullable=False)
    points = db.Column(db.Integer, nullable=False, default=0)
    correct_picks = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint(
            "tournament_id", "username", name="unique_leaderboard_username"
        ),
        db.Index("idx_leaderboard_points", "tournament_id", "points"),
    )

    def __repr__(self):
        return f"<LeaderboardEntry {self.username}: {self.points}>"

    @staticmethod
    def upsert(tournament_id, username, points, correct_picks):
        entry = LeaderboardEntry.query.filter_by(
            tournament_id=tournament_id, username=username
        ).first()
        if entry is None:
            entry = LeaderboardEntry(tournament_id=tournament_id, username=username)
            db.session.add(entry)

        entry.points = points
        entry.correct_picks = correct_picks
        return entry

    @staticmethod
    def get_sorted(tournament_id):
        """Highest points first; ties broken by correct picks, then username"""
        return (
            LeaderboardEntry.query.filter_by(tournament_id=tournament_id)
            .order_by(
                LeaderboardEntry.points.desc(),
                LeaderboardEntry.correct_picks.desc(),
                LeaderboardEntry.username,
            )
            .all()
        )

    def to_dict(self):
        return {
            "username": self.username,
            "points": self.points,
            "correct_picks": self.correct_picks,
        }
