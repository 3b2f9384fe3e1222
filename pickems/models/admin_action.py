from datetime import datetime, timezone

from pickems import db


class AdminAction(db.Model):
    __tablename__ = "admin_actions"

    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(
        db.Integer, db.ForeignKey("tournaments.id", ondelete="SET NULL"), nullable=True
    )

    # 'set_winner', 'set_advancing', 'add_team', 'toggle_stage', ...
    action_type = db.Column(db.String(50), nullable=False)
    action_description = db.Column(db.String(500), nullable=False)

    # Additional context data (JSON)
    action_metadata = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.Index("idx_admin_action_tournament", "tournament_id"),
        db.Index("idx_admin_action_type", "action_type"),
        db.Index("idx_admin_action_created", "created_at"),
    )

    def __repr__(self):
        return f"<AdminAction {self.action_type} in tournament {self.tournament_id}>"

    @staticmethod
    def log_action(tournament_id, action_type, description, action_metadata=None):
        """Log an admin action"""
        action = AdminAction(
            tournament_id=tournament_id,
            action_type=action_type,
            action_description=description,
            action_metadata=action_metadata,
        )
        db.session.add(action)
        return action

    @staticmethod
    def get_recent(tournament_id=None, limit=20):
        query = AdminAction.query
        if tournament_id is not None:
            query = query.filter_by(tournament_id=tournament_id)
        return query.order_by(AdminAction.created_at.desc(), AdminAction.id.desc()).limit(limit).all()

    def to_dict(self):
        return {
            "id": self.id,
            "action_type": self.action_type,
            "description": self.action_description,
            "metadata": self.action_metadata,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
