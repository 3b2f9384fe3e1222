from pickems import db
from pickems.models import GroupPick, MatchPick, User
from tests.helpers import group_by_name, match_by_round, team_by_name

AJAX = {"X-Requested-With": "XMLHttpRequest"}


def test_index_redirects_to_login(client):
    response = client.get("/")
    assert response.status_code == 302
    assert "/auth/login" in response.headers["Location"]


def test_pickems_requires_username(client, tournament):
    response = client.get("/pickems")
    assert response.status_code == 302
    assert "/auth/login" in response.headers["Location"]


def test_login_creates_user(client, tournament):
    response = client.post("/auth/login", data={"username": "alice"})

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/pickems")
    assert User.query.filter_by(username="alice").one().last_seen is not None


def test_login_rejects_bad_username(client):
    response = client.post("/auth/login", data={"username": "<script>"})

    assert response.status_code == 200
    assert User.query.count() == 0


def test_logout(signed_in_client):
    signed_in_client.get("/auth/logout")
    assert signed_in_client.get("/pickems").status_code == 302


def test_pickems_page(signed_in_client, tournament):
    response = signed_in_client.get("/pickems")
    html = response.get_data(as_text=True)

    assert response.status_code == 200
    assert "Test Cup" in html
    assert "Group A" in html
    assert "Semi Finals - Match 1" in html
    assert "Grand Final" in html
    assert "30 pts" in html


def test_pickems_hides_disabled_stages(signed_in_client, tournament):
    tournament.group_stage_enabled = False
    db.session.commit()

    html = signed_in_client.get("/pickems").get_data(as_text=True)
    assert "Group A" not in html
    assert "Semi Finals - Match 1" in html


def test_pickems_without_tournament(signed_in_client):
    html = signed_in_client.get("/pickems").get_data(as_text=True)
    assert "No tournament yet" in html


def test_pick_match_form_post(signed_in_client, tournament):
    semi = match_by_round(tournament, "Semi Finals - Match 1")
    ants = team_by_name(tournament, "Ants")

    response = signed_in_client.post(
        f"/pickems/match/{semi.id}", data={"team_id": ants.id}, follow_redirects=True
    )

    assert response.status_code == 200
    assert "Pick saved!" in response.get_data(as_text=True)
    assert MatchPick.query.one().team_id == ants.id


def test_pick_match_ajax(signed_in_client, tournament):
    semi = match_by_round(tournament, "Semi Finals - Match 1")
    eels = team_by_name(tournament, "Eels")

    response = signed_in_client.post(
        f"/pickems/match/{semi.id}", data={"team_id": eels.id}, headers=AJAX
    )

    assert response.status_code == 200
    assert response.get_json()["success"] is True
    assert response.get_json()["pick"]["team_id"] == eels.id


def test_pick_rejected_when_knockout_locked(signed_in_client, tournament):
    tournament.knockout_stage_locked = True
    db.session.commit()
    semi = match_by_round(tournament, "Semi Finals - Match 1")
    ants = team_by_name(tournament, "Ants")

    response = signed_in_client.post(
        f"/pickems/match/{semi.id}", data={"team_id": ants.id}, headers=AJAX
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "Knockout stage is locked!"
    assert MatchPick.query.count() == 0


def test_pick_without_team(signed_in_client, tournament):
    semi = match_by_round(tournament, "Semi Finals - Match 1")
    response = signed_in_client.post(f"/pickems/match/{semi.id}", data={}, headers=AJAX)
    assert response.status_code == 400


def test_pick_match_json_numeric_string(signed_in_client, tournament):
    semi = match_by_round(tournament, "Semi Finals - Match 1")
    ants = team_by_name(tournament, "Ants")

    response = signed_in_client.post(
        f"/pickems/match/{semi.id}", json={"team_id": str(ants.id)}
    )

    assert response.status_code == 200
    assert response.get_json()["pick"]["team_id"] == ants.id


def test_pick_match_json_invalid_team_id(signed_in_client, tournament):
    semi = match_by_round(tournament, "Semi Finals - Match 1")

    response = signed_in_client.post(f"/pickems/match/{semi.id}", json={"team_id": "Ants"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "Please choose a team"
    assert MatchPick.query.count() == 0


def test_toggle_group_pick(signed_in_client, tournament):
    group = group_by_name(tournament, "Group A")
    ants, bees, cats = (team_by_name(tournament, n) for n in ("Ants", "Bees", "Cats"))

    for team in (ants, bees, cats):
        response = signed_in_client.post(
            f"/pickems/group/{group.id}/toggle/{team.id}", headers=AJAX
        )
        assert response.status_code == 200

    assert GroupPick.query.one().selected_team_ids == [bees.id, cats.id]


def test_toggle_group_pick_locked(signed_in_client, tournament):
    tournament.group_stage_locked = True
    db.session.commit()
    group = group_by_name(tournament, "Group A")
    ants = team_by_name(tournament, "Ants")

    response = signed_in_client.post(
        f"/pickems/group/{group.id}/toggle/{ants.id}", follow_redirects=True
    )

    assert "Group stage is locked!" in response.get_data(as_text=True)
    assert GroupPick.query.count() == 0


def test_leaderboard_page(signed_in_client, tournament):
    semi = match_by_round(tournament, "Semi Finals - Match 1")
    ants = team_by_name(tournament, "Ants")
    signed_in_client.post(f"/pickems/match/{semi.id}", data={"team_id": ants.id})

    html = signed_in_client.get("/leaderboard").get_data(as_text=True)
    assert "alice" in html
    assert "No picks yet." not in html


def test_not_found_pages(client):
    assert client.get("/nowhere").status_code == 404
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Resource not found"}


def test_security_headers(client):
    response = client.get("/auth/login")
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "default-src 'self'" in response.headers["Content-Security-Policy"]
