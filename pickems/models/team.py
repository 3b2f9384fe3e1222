from datetime import datetime, timezone

from pickems import db


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(
        db.Integer, db.ForeignKey("tournaments.id"), nullable=False
    )

    name = db.Column(db.String(100), nullable=False)
    logo_url = db.Column(db.String(500))
    seed = db.Column(db.Integer)  # Display/ordering only

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.Index("idx_team_tournament", "tournament_id"),
        db.UniqueConstraint("tournament_id", "name", name="unique_team_tournament_name"),
    )

    def __repr__(self):
        return f"<Team {self.name}>"

    @staticmethod
    def get_all_for_tournament(tournament_id):
        return (
            Team.query.filter_by(tournament_id=tournament_id)
            .order_by(Team.seed, Team.name)
            .all()
        )

    def to_snapshot(self):
        from pickems.utils.snapshot import TeamRecord

        return TeamRecord(id=self.id, name=self.name, logo=self.logo_url, seed=self.seed)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "logo": self.logo_url,
            "seed": self.seed,
        }
