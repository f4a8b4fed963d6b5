"""Tests for the FastAPI REST API endpoints."""

import pytest

from movie_match.api.routes.events import forward_room_events
from movie_match.events.types import FiltersChanged, MatchCreated


@pytest.mark.asyncio
async def test_health_endpoint(api_client):
    resp = await api_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# --- Rooms ---


@pytest.mark.asyncio
async def test_create_and_get_room(api_client):
    resp = await api_client.post("/api/rooms", json={"participant_id": "alice"})
    assert resp.status_code == 201
    data = resp.json()
    assert len(data["code"]) == 6
    assert data["user1_id"] == "alice"
    assert data["user2_id"] is None
    assert data["status"] == "active"

    detail = await api_client.get(f"/api/rooms/{data['code'].lower()}")
    assert detail.status_code == 200
    assert detail.json()["code"] == data["code"]


@pytest.mark.asyncio
async def test_create_room_requires_participant(api_client):
    resp = await api_client.post("/api/rooms", json={"participant_id": ""})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_unknown_room(api_client):
    resp = await api_client.get("/api/rooms/NOPE00")
    assert resp.status_code == 404
    assert "NOPE00" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_join_room(api_client):
    code = (await api_client.post("/api/rooms", json={"participant_id": "alice"})).json()["code"]

    resp = await api_client.post(f"/api/rooms/{code}/join", json={"participant_id": "bob"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["joined"] is True
    assert data["room"]["user2_id"] == "bob"

    full = await api_client.post(f"/api/rooms/{code}/join", json={"participant_id": "carol"})
    assert full.status_code == 409


@pytest.mark.asyncio
async def test_update_filters(api_client, abc_room):
    resp = await api_client.put(
        "/api/rooms/ABC123/filters",
        json={"genres": ["Comedy"], "min_rating": 7.0},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["filters_version"] == 1
    assert data["filters"]["genres"] == ["Comedy"]

    candidates = await api_client.get("/api/rooms/ABC123/candidates")
    assert [m["id"] for m in candidates.json()["items"]] == ["M1"]


@pytest.mark.asyncio
async def test_update_filters_rejects_inverted_years(api_client, abc_room):
    resp = await api_client.put(
        "/api/rooms/ABC123/filters",
        json={"year_start": 2010, "year_end": 2000},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_complete_room(api_client, abc_room):
    resp = await api_client.post("/api/rooms/ABC123/complete")
    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"


@pytest.mark.asyncio
async def test_candidates_pagination(api_client, abc_room):
    resp = await api_client.get("/api/rooms/ABC123/candidates?page=1&size=1")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert data["pages"] == 2
    assert len(data["items"]) == 1

    second = await api_client.get("/api/rooms/ABC123/candidates?page=2&size=1")
    ids = {data["items"][0]["id"], second.json()["items"][0]["id"]}
    assert ids == {"M1", "M2"}


@pytest.mark.asyncio
async def test_candidates_are_normalized(api_client, abc_room):
    resp = await api_client.get("/api/rooms/ABC123/candidates")
    by_id = {m["id"]: m for m in resp.json()["items"]}
    assert by_id["M1"]["genres"] == ["Comedy", "Drama"]
    assert by_id["M1"]["rating"] == pytest.approx(7.5)
    assert by_id["M1"]["year"] == 2001


@pytest.mark.asyncio
async def test_candidates_skip_swiped_for_participant(api_client, abc_room):
    await api_client.post(
        "/api/rooms/ABC123/swipes",
        json={"participant_id": "alice", "movie_id": "M1", "direction": "dislike"},
    )
    resp = await api_client.get("/api/rooms/ABC123/candidates?participant_id=alice")
    assert [m["id"] for m in resp.json()["items"]] == ["M2"]


# --- Swipes & matches ---


@pytest.mark.asyncio
async def test_swipe_and_match(api_client, abc_room):
    first = await api_client.post(
        "/api/rooms/ABC123/swipes",
        json={"participant_id": "alice", "movie_id": "M1", "direction": "like"},
    )
    assert first.status_code == 200
    assert first.json()["matched"] is False
    assert first.json()["match"] is None

    second = await api_client.post(
        "/api/rooms/abc123/swipes",
        json={"participant_id": "bob", "movie_id": "M1", "direction": "like"},
    )
    data = second.json()
    assert data["matched"] is True
    assert data["direction"] == "like"
    assert data["match"]["movie_id"] == "M1"
    assert data["match"]["room_id"] == "ABC123"

    matches = await api_client.get("/api/rooms/ABC123/matches")
    assert matches.status_code == 200
    assert [m["title"] for m in matches.json()] == ["Laugh Track"]


@pytest.mark.asyncio
async def test_swipe_by_outsider(api_client, abc_room):
    resp = await api_client.post(
        "/api/rooms/ABC123/swipes",
        json={"participant_id": "mallory", "movie_id": "M1", "direction": "like"},
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_swipe_unknown_movie(api_client, abc_room):
    resp = await api_client.post(
        "/api/rooms/ABC123/swipes",
        json={"participant_id": "alice", "movie_id": "ghost", "direction": "like"},
    )
    assert resp.status_code == 404
    assert "ghost" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_candidate_pages_stable_after_swipes(api_client, abc_room):
    first = await api_client.get("/api/rooms/ABC123/candidates?participant_id=alice&size=1")
    swiped = first.json()["items"][0]["id"]
    await api_client.post(
        "/api/rooms/ABC123/swipes",
        json={"participant_id": "alice", "movie_id": swiped, "direction": "dislike"},
    )

    second = await api_client.get("/api/rooms/ABC123/candidates?participant_id=alice&page=2&size=1")
    data = second.json()
    assert data["total"] == 2
    assert data["pages"] == 2
    assert [m["id"] for m in data["items"]] == [{"M1", "M2"}.difference({swiped}).pop()]


@pytest.mark.asyncio
async def test_swipe_invalid_direction(api_client, abc_room):
    resp = await api_client.post(
        "/api/rooms/ABC123/swipes",
        json={"participant_id": "alice", "movie_id": "M1", "direction": "maybe"},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_matches_empty(api_client, abc_room):
    resp = await api_client.get("/api/rooms/ABC123/matches")
    assert resp.json() == []


# --- Movies ---


@pytest.mark.asyncio
async def test_list_movies(api_client, abc_room):
    resp = await api_client.get("/api/movies")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert [m["title"] for m in data["items"]] == ["Laugh Track", "Night Terror"]


@pytest.mark.asyncio
async def test_search_movies_by_title(api_client, abc_room):
    resp = await api_client.get("/api/movies?q=night")
    data = resp.json()
    assert data["total"] == 1
    assert data["items"][0]["id"] == "M2"


@pytest.mark.asyncio
async def test_add_movie(api_client):
    resp = await api_client.post(
        "/api/movies",
        json={"id": "tt1", "title": "Paddington", "year": 2014, "genres": "Family"},
    )
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    duplicate = await api_client.post("/api/movies", json={"id": "tt2", "title": "paddington"})
    data = duplicate.json()
    assert data["success"] is False
    assert data["duplicate"] is True
    assert data["can_add_to_playlist"] is True
    assert data["movie_id"] == "tt1"


@pytest.mark.asyncio
async def test_add_duplicate_to_playlist(api_client, abc_room):
    resp = await api_client.post(
        "/api/movies?add_to_playlist=true",
        json={"id": "M1", "title": "Laugh Track"},
    )
    assert resp.json()["success"] is True

    listed = await api_client.get("/api/movies?q=laugh")
    assert "Playlist" in listed.json()["items"][0]["genres"]


@pytest.mark.asyncio
async def test_playlist_unknown_movie(api_client):
    resp = await api_client.post("/api/movies/missing/playlist")
    assert resp.status_code == 404


# --- Event stream ---


class _FakeWebSocket:
    def __init__(self):
        self.sent: list[dict] = []

    async def send_json(self, data):
        self.sent.append(data)


@pytest.mark.asyncio
async def test_forward_room_events(ctx):
    websocket = _FakeWebSocket()
    subscription = ctx.events.subscribe("ABC123")

    ctx.events.publish(FiltersChanged(room_id="ABC123", version=2, filters={"genres": ["Comedy"]}))
    ctx.events.publish(MatchCreated(room_id="ABC123", movie_id="M1", match_id=7))
    ctx.events.publish(MatchCreated(room_id="OTHER1", movie_id="M2", match_id=8))
    subscription.close()

    sent = await forward_room_events(websocket, subscription)

    assert sent == 2
    assert [m["type"] for m in websocket.sent] == ["filters_changed", "match_created"]
    assert websocket.sent[1] == {
        "type": "match_created",
        "room_id": "ABC123",
        "movie_id": "M1",
        "match_id": 7,
        "created_at": None,
    }
