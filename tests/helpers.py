from pickems.models import Group, Match, Team
from pickems.utils.snapshot import MatchRecord, TeamRecord


def team_by_name(tournament, name):
    return Team.query.filter_by(tournament_id=tournament.id, name=name).one()


def match_by_round(tournament, label):
    return Match.query.filter_by(tournament_id=tournament.id, round=label).one()


def group_by_name(tournament, name):
    return Group.query.filter_by(tournament_id=tournament.id, name=name).one()


def make_match(match_id, label, winner=None, team1=None, team2=None, stage=None):
    """Plain MatchRecord for pure-core tests"""
    return MatchRecord(
        id=match_id,
        round=label,
        team1=TeamRecord(id=team1, name=f"Team {team1}") if team1 else None,
        team2=TeamRecord(id=team2, name=f"Team {team2}") if team2 else None,
        winner=winner,
        stage=stage,
    )
