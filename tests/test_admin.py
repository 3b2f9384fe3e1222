from pickems import db
from pickems.models import AdminAction, Match, MatchPick, Team, Tournament, User
from tests.helpers import group_by_name, match_by_round, team_by_name


def test_admin_pages_require_admin_session(client, tournament):
    response = client.get("/admin/")
    assert response.status_code == 302
    assert "/auth/admin-login" in response.headers["Location"]


def test_wrong_admin_password(client):
    response = client.post("/auth/admin-login", data={"password": "nope"})

    assert response.status_code == 200
    assert "Incorrect admin password." in response.get_data(as_text=True)
    with client.session_transaction() as session:
        assert not session.get("is_admin")


def test_admin_dashboard(admin_client, tournament):
    html = admin_client.get("/admin/").get_data(as_text=True)

    assert "Test Cup" in html
    assert "Semi Finals - Match 1" in html
    assert "knockout stage locked" in html
    assert "Cache: SimpleCache" in html


def test_admin_dashboard_without_tournament(admin_client):
    assert admin_client.get("/admin/").status_code == 200


def test_admin_logout(admin_client):
    admin_client.get("/auth/admin-logout")
    assert admin_client.get("/admin/").status_code == 302


def test_set_winner(admin_client, tournament):
    semi = match_by_round(tournament, "Semi Finals - Match 1")
    ants = team_by_name(tournament, "Ants")

    response = admin_client.post(
        f"/admin/matches/{semi.id}/winner", data={"winner_id": ants.id}
    )

    assert response.status_code == 302
    assert db.session.get(Match, semi.id).winner_id == ants.id

    admin_client.post(f"/admin/matches/{semi.id}/winner", data={"winner_id": ""})
    assert db.session.get(Match, semi.id).winner_id is None


def test_assign_slot(admin_client, tournament):
    final = match_by_round(tournament, "Grand Final")
    ants = team_by_name(tournament, "Ants")

    admin_client.post(f"/admin/matches/{final.id}/slot", data={"slot": "team1", "team_id": ants.id})

    assert db.session.get(Match, final.id).team1_id == ants.id


def test_set_advancing(admin_client, tournament):
    group = group_by_name(tournament, "Group A")
    ants = team_by_name(tournament, "Ants")
    cats = team_by_name(tournament, "Cats")

    admin_client.post(
        f"/admin/groups/{group.id}/advancing", data={"team_ids": [ants.id, cats.id]}
    )

    assert group_by_name(tournament, "Group A").advancing_team_ids == [ants.id, cats.id]


def test_toggle_stage_flag(admin_client, tournament):
    admin_client.post("/admin/stage/knockout_stage_locked", data={"value": "1"})
    assert db.session.get(Tournament, tournament.id).knockout_stage_locked

    admin_client.post("/admin/stage/knockout_stage_locked")
    assert not db.session.get(Tournament, tournament.id).knockout_stage_locked


def test_add_and_remove_team(admin_client, tournament):
    admin_client.post("/admin/teams", data={"name": "Ibis", "seed": "9"})
    team = Team.query.filter_by(name="Ibis").one()
    assert team.seed == 9

    admin_client.post(f"/admin/teams/{team.id}/delete")
    assert Team.query.filter_by(name="Ibis").count() == 0


def test_add_match_with_explicit_stage(admin_client, tournament):
    admin_client.post(
        "/admin/matches", data={"round": "Playoff", "bracket": "upper", "stage": "quarterfinal"}
    )

    match = Match.query.filter_by(round="Playoff").one()
    assert match.stage == "quarterfinal"
    assert match.resolved_stage().value == "quarterfinal"


def test_generate_demo(admin_client):
    response = admin_client.post("/admin/demo", data={"name": "Spring Cup"}, follow_redirects=True)

    assert "Generated demo tournament Spring Cup" in response.get_data(as_text=True)
    assert Tournament.get_current_tournament().name == "Spring Cup"


def test_create_tournament_form(admin_client):
    admin_client.post("/admin/tournaments", data={"name": "Winter Cup", "activate": "y"})

    created = Tournament.query.filter_by(name="Winter Cup").one()
    assert created.is_active
    assert created.teams.count() == 0


def test_recompute_button(admin_client, tournament):
    response = admin_client.post("/admin/leaderboard/recompute", follow_redirects=True)
    assert "Leaderboard updated" in response.get_data(as_text=True)
    assert AdminAction.query.count() == 0


def test_dashboard_stage_follows_round_policy(admin_client, app, tournament):
    db.session.add(
        Match(tournament_id=tournament.id, match_number=4, round="Third Place Final")
    )
    db.session.commit()

    html = admin_client.get("/admin/").get_data(as_text=True)
    assert "<td>Other <small>auto</small></td>" in html

    app.config["ROUND_EXCLUDE_PLACEMENT_FROM_FINAL"] = False
    html = admin_client.get("/admin/").get_data(as_text=True)
    assert "<td>Other <small>auto</small></td>" not in html


def test_dashboard_shows_pick_counts(admin_client, tournament):
    semi = match_by_round(tournament, "Semi Finals - Match 1")
    ants = team_by_name(tournament, "Ants")
    eels = team_by_name(tournament, "Eels")
    for username, team in (("alice", ants), ("bob", ants), ("carol", eels)):
        user = User(username=username)
        db.session.add(user)
        db.session.flush()
        db.session.add(MatchPick(user_id=user.id, match_id=semi.id, team_id=team.id))
    db.session.commit()

    html = admin_client.get("/admin/").get_data(as_text=True)
    assert "<td>3 <small>(2 / 1)</small></td>" in html
