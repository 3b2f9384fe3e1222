import pytest

from pickems import create_app, db
from pickems.models import Group, GroupTeam, Match, Team, Tournament


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def tournament(app):
    """
    Eight teams split over Group A and Group B, two semifinals with teams
    assigned and an empty Grand Final.
    """
    tournament = Tournament.create_tournament("Test Cup", activate=True)
    db.session.flush()

    teams = []
    for seed, name in enumerate(
        ["Ants", "Bees", "Cats", "Dogs", "Eels", "Foxes", "Geese", "Hares"], start=1
    ):
        team = Team(tournament_id=tournament.id, name=name, seed=seed)
        db.session.add(team)
        teams.append(team)
    db.session.flush()

    for index, name in enumerate(["Group A", "Group B"]):
        group = Group(tournament_id=tournament.id, name=name)
        db.session.add(group)
        for position, team in enumerate(teams[index * 4:(index + 1) * 4]):
            db.session.add(GroupTeam(group=group, team=team, position=position))

    db.session.add_all(
        [
            Match(
                tournament_id=tournament.id,
                match_number=1,
                round="Semi Finals - Match 1",
                team1_id=teams[0].id,
                team2_id=teams[4].id,
            ),
            Match(
                tournament_id=tournament.id,
                match_number=2,
                round="Semi Finals - Match 2",
                team1_id=teams[1].id,
                team2_id=teams[5].id,
            ),
            Match(
                tournament_id=tournament.id,
                match_number=3,
                round="Grand Final",
                bracket="finals",
            ),
        ]
    )
    db.session.commit()
    return tournament


@pytest.fixture
def signed_in_client(client, app):
    response = client.post("/auth/login", data={"username": "alice"})
    assert response.status_code == 302
    return client


@pytest.fixture
def admin_client(client, app):
    response = client.post("/auth/admin-login", data={"password": "test-admin"})
    assert response.status_code == 302
    return client
