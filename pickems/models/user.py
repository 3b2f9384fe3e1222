from datetime import datetime, timezone

from flask_login import UserMixin

from pickems import db


class User(UserMixin, db.Model):
    """A picker, identified only by a username"""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    last_seen = db.Column(db.DateTime)

    # Relationships
    match_picks = db.relationship(
        "MatchPick", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    group_picks = db.relationship(
        "GroupPick", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User {self.username}>"

    @staticmethod
    def get_or_create(username):
        """Look up a user by username, creating it on first sign-in"""
        username = (username or "").strip()
        if not username:
            return None, "Please enter a username"

        user = User.query.filter_by(username=username).first()
        if user:
            return user, "Welcome back"

        user = User(username=username)
        db.session.add(user)
        return user, "Username saved"

    def update_last_seen(self):
        self.last_seen = datetime.now(timezone.utc)

    def get_match_picks(self, tournament_id):
        from .match import Match
        from .pick import MatchPick

        return (
            self.match_picks.join(Match)
            .filter(Match.tournament_id == tournament_id)
            .order_by(MatchPick.match_id)
            .all()
        )

    def get_group_picks(self, tournament_id):
        from .group import Group
        from .group_pick import GroupPick

        return (
            self.group_picks.join(Group)
            .filter(Group.tournament_id == tournament_id)
            .order_by(GroupPick.group_id)
            .all()
        )

    @staticmethod
    def get_pickers(tournament_id):
        """Users with at least one match or group pick in a tournament"""
        from .group import Group
        from .group_pick import GroupPick
        from .match import Match
        from .pick import MatchPick

        match_pickers = (
            db.session.query(MatchPick.user_id)
            .join(Match)
            .filter(Match.tournament_id == tournament_id)
        )
        group_pickers = (
            db.session.query(GroupPick.user_id)
            .join(Group)
            .filter(Group.tournament_id == tournament_id)
        )
        user_ids = {row[0] for row in match_pickers.union(group_pickers).all()}
        if not user_ids:
            return []
        return User.query.filter(User.id.in_(user_ids)).order_by(User.username).all()

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
