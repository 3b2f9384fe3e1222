from datetime import datetime, timezone

from pickems import db


class GroupPick(db.Model):
    """A user's predicted qualifiers for one group, oldest selection first"""

    __tablename__ = "group_picks"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    group_id = db.Column(db.Integer, db.ForeignKey("groups.id"), nullable=False)
    selected_team_ids = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint("user_id", "group_id", name="unique_user_group_pick"),
        db.Index("idx_group_pick_user", "user_id"),
    )

    def __repr__(self):
        return f"<GroupPick user_id={self.user_id} group_id={self.group_id} teams={self.selected_team_ids}>"

    @staticmethod
    def toggle_team(user, group_id, team_id):
        """
        Toggle one team in a user's group pick.

        Selecting a third team evicts the first one selected. The resulting
        selection replaces the stored pick.
        """
        from pickems.utils.group_selection import toggle_team

        from .group import Group

        group = db.session.get(Group, group_id)
        if not group:
            return None, "Group not found"

        if group.tournament.group_stage_locked:
            return None, "Group stage is locked!"

        if not group.has_team(team_id):
            return None, "Team is not in this group"

        pick = GroupPick.query.filter_by(user_id=user.id, group_id=group.id).first()
        current = pick.selected_team_ids if pick else []
        selection = toggle_team(current, team_id)

        if pick:
            # Reassign rather than mutate so the JSON column is marked dirty
            pick.selected_team_ids = selection
        else:
            pick = GroupPick(user_id=user.id, group_id=group.id, selected_team_ids=selection)
            db.session.add(pick)

        return pick, "Group pick saved!"

    def to_snapshot(self):
        from pickems.utils.snapshot import GroupPickRecord

        return GroupPickRecord(
            group_id=self.group_id, selected_teams=tuple(self.selected_team_ids or ())
        )

    def to_dict(self):
        return {
            "group_id": self.group_id,
            "selected_teams": list(self.selected_team_ids or []),
        }
