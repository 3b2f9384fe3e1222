from datetime import datetime, timezone

from pickems import db


class Group(db.Model):
    """A group-stage pool of teams; a subset of them advances"""

    __tablename__ = "groups"

    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(
        db.Integer, db.ForeignKey("tournaments.id"), nullable=False
    )
    name = db.Column(db.String(100), nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    group_teams = db.relationship(
        "GroupTeam",
        backref="group",
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by="GroupTeam.position",
    )
    picks = db.relationship(
        "GroupPick", backref="group", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_group_tournament", "tournament_id"),
        db.UniqueConstraint(
            "tournament_id", "name", name="unique_group_tournament_name"
        ),
    )

    def __repr__(self):
        return f"<Group {self.name}>"

    @property
    def teams(self):
        return [group_team.team for group_team in self.group_teams]

    @property
    def team_ids(self):
        return [group_team.team_id for group_team in self.group_teams]

    @property
    def advancing_team_ids(self):
        return [gt.team_id for gt in self.group_teams if gt.is_advancing]

    @property
    def is_resolved(self):
        return bool(self.advancing_team_ids)

    def has_team(self, team_id):
        return self.group_teams.filter_by(team_id=team_id).first() is not None

    def add_team(self, team):
        """Add a team to the group"""
        if team.tournament_id != self.tournament_id:
            return False, "Team belongs to another tournament"
        if self.has_team(team.id):
            return False, f"{team.name} is already in {self.name}"

        position = self.group_teams.count()
        db.session.add(GroupTeam(group=self, team=team, position=position))
        return True, f"{team.name} added to {self.name}"

    def remove_team(self, team_id):
        group_team = self.group_teams.filter_by(team_id=team_id).first()
        if not group_team:
            return False, "Team is not in this group"
        db.session.delete(group_team)
        return True, "Team removed from group"

    def set_advancing_teams(self, team_ids):
        """Replace the set of teams certified as qualified; [] un-resolves the group"""
        team_ids = [int(team_id) for team_id in team_ids]
        members = set(self.team_ids)
        unknown = [team_id for team_id in team_ids if team_id not in members]
        if unknown:
            return False, "Advancing teams must belong to the group"

        for group_team in self.group_teams:
            group_team.is_advancing = group_team.team_id in team_ids
        return True, f"Advancing teams for {self.name} updated"

    def to_snapshot(self):
        from pickems.utils.snapshot import GroupRecord

        return GroupRecord(
            id=self.id,
            name=self.name,
            teams=tuple(team.to_snapshot() for team in self.teams),
            advancing_teams=tuple(self.advancing_team_ids),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "teams": [team.to_dict() for team in self.teams],
            "advancing_teams": self.advancing_team_ids,
        }


class GroupTeam(db.Model):
    __tablename__ = "group_teams"

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey("groups.id"), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    position = db.Column(db.Integer, default=0)
    is_advancing = db.Column(db.Boolean, default=False)

    team = db.relationship("Team", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("group_id", "team_id", name="unique_group_team"),
        db.Index("idx_group_team_group", "group_id"),
    )

    def __repr__(self):
        return f"<GroupTeam group={self.group_id} team={self.team_id}>"
