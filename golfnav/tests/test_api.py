from fastapi.testclient import TestClient

from golfnav import __version__
from golfnav.app import app
from golfnav.location.repository import LocationPersistenceError
from golfnav.metrics import route_template

from .factories import BASE_TS, make_fix, offset, tee_of


def _payload(point, seconds: float = 0.0, **fields) -> dict:
    return make_fix(point, seconds=seconds, **fields).model_dump(mode="json", by_alias=True)


def test_health_endpoint() -> None:
    client = TestClient(app)
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["geometry"]["source"] == "demo"


def test_health_reports_cache_and_round_state(api_client) -> None:
    api_client.post("/api/locations", json=_payload(tee_of(1)))
    api_client.post("/api/locations", json=_payload(tee_of(1), seconds=10))
    body = api_client.get("/health").json()
    cache = body["geometry"]["cache"]
    assert cache["misses"] == 1
    assert cache["hits"] == 1
    assert cache["hitRatio"] == 0.5
    assert cache["backends"] == {"test-links": "precise"}
    assert body["rounds"] == {"tracked": 1, "withState": 1}
    assert body["version"] == __version__


def test_post_location_returns_enriched_record(api_client) -> None:
    res = api_client.post("/api/locations", json=_payload(tee_of(7)))
    assert res.status_code == 201
    body = res.json()
    location = body["location"]
    assert location["currentHole"] == 7
    assert location["positionOnHole"] == "tee"
    assert location["withinCourseBoundary"] is True
    assert location["persisted"] is True
    assert location["userId"] == "player-1"
    assert body["shotEvent"] is None
    assert body["duplicate"] is False


def test_post_location_reports_shot(api_client) -> None:
    api_client.post("/api/locations", json=_payload(tee_of(1)))
    res = api_client.post("/api/locations", json=_payload(offset(tee_of(1), 180.0), seconds=40))
    shot = res.json()["shotEvent"]
    assert shot["holeNumber"] == 1
    assert 175.0 < shot["distanceMeters"] < 185.0


def test_stale_fix_conflicts(api_client) -> None:
    api_client.post("/api/locations", json=_payload(tee_of(1), seconds=60))
    res = api_client.post("/api/locations", json=_payload(tee_of(1), seconds=30))
    assert res.status_code == 409


def test_unpersisted_record_is_accepted(api_client, repository, monkeypatch) -> None:
    def broken(record):
        raise LocationPersistenceError("read-only filesystem")

    monkeypatch.setattr(repository, "append_location", broken)
    res = api_client.post("/api/locations", json=_payload(tee_of(2)))
    assert res.status_code == 202
    assert res.json()["location"]["persisted"] is False


def test_invalid_fixes_are_rejected(api_client) -> None:
    naive = _payload(tee_of(1))
    naive["timestamp"] = BASE_TS.replace(tzinfo=None).isoformat()
    assert api_client.post("/api/locations", json=naive).status_code == 422

    out_of_range = _payload(tee_of(1))
    out_of_range["coordinate"]["latitude"] = 95.0
    assert api_client.post("/api/locations", json=out_of_range).status_code == 422

    full_circle = _payload(tee_of(1))
    full_circle["headingDegrees"] = 360.0
    assert api_client.post("/api/locations", json=full_circle).status_code == 422

    anonymous = _payload(tee_of(1))
    anonymous["userId"] = ""
    assert api_client.post("/api/locations", json=anonymous).status_code == 422


def test_user_header_must_match_fix(api_client) -> None:
    res = api_client.post(
        "/api/locations", json=_payload(tee_of(1)), headers={"x-user-id": "someone-else"}
    )
    assert res.status_code == 403


def test_round_history_endpoints(api_client) -> None:
    headers = {"x-user-id": "player-1"}
    api_client.post("/api/locations", json=_payload(tee_of(1)))
    api_client.post("/api/locations", json=_payload(offset(tee_of(1), 200.0), seconds=40))

    locations = api_client.get("/api/rounds/round-1/locations", headers=headers).json()
    assert [loc["positionOnHole"] for loc in locations] == ["tee", "fairway"]

    shots = api_client.get("/api/rounds/round-1/shots", headers=headers).json()
    assert len(shots) == 1
    assert api_client.get("/api/rounds/round-1/shots?hole=2", headers=headers).json() == []

    stats = api_client.get("/api/rounds/round-1/stats", headers=headers).json()
    assert stats["fixCount"] == 2
    assert stats["shotCount"] == 1
    assert stats["elapsedSeconds"] == 40.0


def test_history_written_without_header_reads_back_by_user_id(api_client) -> None:
    api_client.post("/api/locations", json=_payload(tee_of(1)))
    api_client.post("/api/locations", json=_payload(offset(tee_of(1), 200.0), seconds=40))

    locations = api_client.get("/api/rounds/round-1/locations?userId=player-1").json()
    assert len(locations) == 2
    assert len(api_client.get("/api/rounds/round-1/shots?userId=player-1").json()) == 1
    stats = api_client.get("/api/rounds/round-1/stats?userId=player-1").json()
    assert stats["fixCount"] == 2


def test_history_reads_require_an_explicit_user(api_client) -> None:
    api_client.post("/api/locations", json=_payload(tee_of(1)))
    assert api_client.get("/api/rounds/round-1/locations").status_code == 400
    assert api_client.get("/api/rounds/round-1/stats").status_code == 400
    mismatch = api_client.get(
        "/api/rounds/round-1/shots?userId=player-1", headers={"x-user-id": "player-2"}
    )
    assert mismatch.status_code == 403


def test_hole_positions_endpoint(api_client) -> None:
    headers = {"x-user-id": "player-1"}
    api_client.post("/api/locations", json=_payload(tee_of(3)))
    api_client.post("/api/locations", json=_payload(offset(tee_of(3), 120.0), seconds=30))
    res = api_client.get("/api/courses/test-links/holes/3/positions", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert body["holeNumber"] == 3
    assert {p["position"] for p in body["positions"]} == {"tee", "fairway"}
    assert api_client.get("/api/courses/test-links/holes/42/positions").status_code == 404


def test_course_geometry_endpoints(api_client) -> None:
    assert api_client.get("/api/courses").json() == ["test-links", "test-parkland"]
    body = api_client.get("/api/courses/test-links/geometry").json()
    assert body["courseId"] == "test-links"
    assert len(body["holes"]) == 9
    assert body["holes"][0]["teePoint"]["latitude"] == tee_of(1).latitude
    assert api_client.get("/api/courses/unknown/geometry").status_code == 404


def test_invalidate_requires_admin_token(api_client, monkeypatch) -> None:
    monkeypatch.setenv("ADMIN_TOKEN", "s3cret")
    api_client.get("/api/courses/test-links/geometry")
    assert api_client.post("/api/courses/test-links/invalidate").status_code == 401
    res = api_client.post(
        "/api/courses/test-links/invalidate", headers={"x-admin-token": "s3cret"}
    )
    assert res.status_code == 200
    assert res.json() == {"courseId": "test-links", "invalidated": True}


def test_targets_endpoint(api_client) -> None:
    origin = tee_of(1)
    res = api_client.post(
        "/api/targets",
        json={
            "current": origin.model_dump(),
            "target": offset(origin, 155 * 0.9144).model_dump(),
        },
    )
    assert res.status_code == 200
    body = res.json()
    assert body["recommendedClub"] == "8-Iron"
    assert body["compass"] == "N"
    assert abs(body["distanceYards"] - 155.0) < 1.0


def test_club_recommendation_endpoint(api_client) -> None:
    assert api_client.get("/api/clubs/recommend?yards=150").json() == {
        "yards": 150.0,
        "club": "8-Iron",
    }
    assert api_client.get("/api/clubs/recommend?yards=-5").status_code == 422


def test_api_key_enforced_when_enabled(api_client, monkeypatch) -> None:
    monkeypatch.setenv("REQUIRE_API_KEY", "1")
    monkeypatch.setenv("API_KEY", "k1")
    assert api_client.get("/api/clubs/recommend?yards=150").status_code == 401
    ok = api_client.get("/api/clubs/recommend?yards=150", headers={"x-api-key": "k1"})
    assert ok.status_code == 200


def test_metrics_endpoint_exposes_location_counters(api_client) -> None:
    api_client.post("/api/locations", json=_payload(tee_of(1)))
    text = api_client.get("/metrics").text
    assert "location_fixes_enriched_total" in text
    assert "requests_total" in text


def test_extra_api_keys_are_accepted(api_client, monkeypatch) -> None:
    monkeypatch.setenv("REQUIRE_API_KEY", "1")
    monkeypatch.setenv("GOLFNAV_API_KEYS", "alpha, beta")
    res = api_client.get("/api/clubs/recommend?yards=90&apiKey=beta")
    assert res.status_code == 200
    assert res.json()["club"] == "Sand Wedge"


def test_admin_token_unconfigured(api_client, monkeypatch) -> None:
    monkeypatch.delenv("ADMIN_TOKEN", raising=False)
    res = api_client.post(
        "/api/courses/test-links/invalidate", headers={"x-admin-token": "anything"}
    )
    assert res.status_code == 503


def test_request_metrics_use_route_templates(api_client) -> None:
    api_client.get("/api/rounds/round-77/shots")
    text = api_client.get("/metrics").text
    assert 'route="/api/rounds/{round_id}/shots"' in text
    assert "round-77" not in text


def test_route_template_without_params() -> None:
    assert route_template("/health", None) == "/health"
    params = {"course_id": "a", "hole_number": 3}
    assert (
        route_template("/api/courses/a/holes/3/positions", params)
        == "/api/courses/{course_id}/holes/{hole_number}/positions"
    )
