from pickems import db
from pickems.models import Match, MatchPick
from tests.helpers import group_by_name, match_by_round, team_by_name


def test_tournament_detail(client, tournament):
    response = client.get("/api/tournament")
    data = response.get_json()

    assert response.status_code == 200
    assert data["name"] == "Test Cup"
    assert len(data["teams"]) == 8
    assert [g["name"] for g in data["groups"]] == ["Group A", "Group B"]
    assert [m["stage"] for m in data["matches"]] == ["semifinal", "semifinal", "final"]


def test_tournament_detail_unknown_id(client, tournament):
    response = client.get("/api/tournament?tournament_id=9999")
    assert response.status_code == 404


def test_tournament_detail_without_tournament(client):
    assert client.get("/api/tournament").status_code == 404


def test_bracket_layout(client, tournament):
    data = client.get("/api/bracket").get_json()

    assert data["tournament_id"] == tournament.id
    assert [(c["side"], c["stage"]) for c in data["columns"]] == [
        ("left", "semifinal"),
        ("center", "final"),
        ("right", "semifinal"),
    ]
    assert data["connectors"]


def test_leaderboard_empty(client, tournament):
    data = client.get("/api/leaderboard").get_json()
    assert data == {"tournament_id": tournament.id, "entries": []}


def test_picks_require_username(client, tournament):
    response = client.get("/api/picks")
    assert response.status_code == 401
    assert "error" in response.get_json()


def test_save_pick_and_list(signed_in_client, tournament):
    semi = match_by_round(tournament, "Semi Finals - Match 2")
    foxes = team_by_name(tournament, "Foxes")

    response = signed_in_client.post(
        "/api/picks", json={"match_id": semi.id, "team_id": foxes.id}
    )

    assert response.status_code == 200
    assert response.get_json()["success"] is True
    assert response.headers["Cache-Control"].startswith("no-store")

    picks = signed_in_client.get("/api/picks").get_json()
    assert [(p["match_id"], p["team_id"], p["is_correct"]) for p in picks] == [
        (semi.id, foxes.id, None)
    ]

    entries = signed_in_client.get("/api/leaderboard").get_json()["entries"]
    assert entries[0]["username"] == "alice"
    assert entries[0]["points"] == 0


def test_save_pick_updates_score_once_decided(signed_in_client, tournament):
    semi = match_by_round(tournament, "Semi Finals - Match 1")
    ants = team_by_name(tournament, "Ants")
    semi.winner_id = ants.id
    db.session.commit()

    signed_in_client.post("/api/picks", json={"match_id": semi.id, "team_id": ants.id})

    entry = signed_in_client.get("/api/leaderboard").get_json()["entries"][0]
    assert entry["points"] == 30
    assert entry["correct_picks"] == 1


def test_save_pick_bad_payload(signed_in_client, tournament):
    response = signed_in_client.post("/api/picks", json={"match_id": "one"})
    assert response.status_code == 400
    assert MatchPick.query.count() == 0


def test_save_pick_unknown_match(signed_in_client, tournament):
    ants = team_by_name(tournament, "Ants")
    response = signed_in_client.post("/api/picks", json={"match_id": 9999, "team_id": ants.id})
    assert response.status_code == 404


def test_save_pick_team_not_in_match(signed_in_client, tournament):
    semi = match_by_round(tournament, "Semi Finals - Match 1")
    bees = team_by_name(tournament, "Bees")

    response = signed_in_client.post("/api/picks", json={"match_id": semi.id, "team_id": bees.id})

    assert response.status_code == 400
    assert response.get_json()["error"] == "Team is not playing in this match"


def test_save_pick_locked(signed_in_client, tournament):
    tournament.knockout_stage_locked = True
    db.session.commit()
    semi = match_by_round(tournament, "Semi Finals - Match 1")
    ants = team_by_name(tournament, "Ants")

    response = signed_in_client.post("/api/picks", json={"match_id": semi.id, "team_id": ants.id})

    assert response.status_code == 400
    assert response.get_json()["error"] == "Knockout stage is locked!"


def test_group_pick_toggle(signed_in_client, tournament):
    group = group_by_name(tournament, "Group B")
    eels = team_by_name(tournament, "Eels")

    response = signed_in_client.post(
        f"/api/group-picks/{group.id}/toggle", json={"team_id": eels.id}
    )
    assert response.status_code == 200
    assert response.get_json()["pick"]["selected_teams"] == [eels.id]

    signed_in_client.post(f"/api/group-picks/{group.id}/toggle", json={"team_id": eels.id})
    picks = signed_in_client.get("/api/group-picks").get_json()
    assert picks == [{"group_id": group.id, "selected_teams": []}]


def test_group_pick_unknown_group(signed_in_client, tournament):
    ants = team_by_name(tournament, "Ants")
    response = signed_in_client.post("/api/group-picks/9999/toggle", json={"team_id": ants.id})
    assert response.status_code == 404


def test_group_pick_team_outside_group(signed_in_client, tournament):
    group = group_by_name(tournament, "Group A")
    eels = team_by_name(tournament, "Eels")

    response = signed_in_client.post(
        f"/api/group-picks/{group.id}/toggle", json={"team_id": eels.id}
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "Team is not in this group"


def test_tournament_detail_follows_round_policy(client, app, tournament):
    app.config["ROUND_EXCLUDE_PLACEMENT_FROM_FINAL"] = False
    placement = Match(tournament_id=tournament.id, match_number=4, round="Third Place Final")
    db.session.add(placement)
    db.session.commit()

    matches = client.get("/api/tournament").get_json()["matches"]
    bracket = client.get("/api/bracket").get_json()

    assert {m["id"]: m["stage"] for m in matches}[placement.id] == "final"
    final_ids = [
        box["match_id"]
        for column in bracket["columns"]
        if column["stage"] == "final"
        for box in column["boxes"]
    ]
    assert placement.id in final_ids


def test_tournament_detail_excludes_placement_by_default(client, tournament):
    placement = Match(tournament_id=tournament.id, match_number=4, round="Third Place Final")
    db.session.add(placement)
    db.session.commit()

    matches = client.get("/api/tournament").get_json()["matches"]
    assert {m["id"]: m["stage"] for m in matches}[placement.id] == "unclassified"
