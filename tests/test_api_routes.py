from urllib.parse import parse_qs, urlparse

import httpx
from fastapi.testclient import TestClient

from habitstopper_api.main import create_app
from habitstopper_api.services import google_oauth_service


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_log_endpoints_require_login(client):
    listed = client.get("/api/logs")
    written = client.post("/api/log", json={"date": "2024-03-05", "status": "success"})

    assert listed.status_code == 401
    assert listed.json() == {"error": "Login required"}
    assert written.status_code == 401
    assert written.json() == {"error": "Login required"}


def test_unauthorized_write_stores_nothing(client, auth_headers):
    client.post("/api/log", json={"date": "2024-03-05", "status": "success"})

    assert client.get("/api/logs", headers=auth_headers).json() == []


def test_wrong_backend_token_is_anonymous(client, auth_headers):
    headers = {**auth_headers, "X-Backend-Token": "not-the-secret"}

    assert client.get("/api/logs", headers=headers).status_code == 401
    assert client.get("/api/current_user", headers=headers).json() is None


def test_token_without_subject_is_anonymous(client, auth_headers):
    headers = {key: value for key, value in auth_headers.items() if key != "X-User-Subject"}

    assert client.get("/api/logs", headers=headers).status_code == 401


def test_current_user_is_null_when_anonymous(client):
    response = client.get("/api/current_user")

    assert response.status_code == 200
    assert response.json() is None


def test_current_user_is_created_on_first_resolution(client, auth_headers):
    first = client.get("/api/current_user", headers=auth_headers).json()
    second = client.get("/api/current_user", headers=auth_headers).json()

    assert first["name"] == "Ana Souza"
    assert first["email"] == "ana.souza@example.com"
    assert first["joined"]
    assert second == first


def test_set_status_returns_stored_record(client, auth_headers):
    response = client.post("/api/log", json={"date": "2024-03-05", "status": "success"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"date": "2024-03-05", "status": "success"}


def test_overwrite_keeps_single_record(client, auth_headers):
    client.post("/api/log", json={"date": "2024-03-05", "status": "success"}, headers=auth_headers)
    client.post("/api/log", json={"date": "2024-03-05", "status": "failed"}, headers=auth_headers)
    client.post("/api/log", json={"date": "2024-03-06", "status": "success"}, headers=auth_headers)

    logs = client.get("/api/logs", headers=auth_headers).json()

    assert sorted(logs, key=lambda item: item["date"]) == [
        {"date": "2024-03-05", "status": "failed"},
        {"date": "2024-03-06", "status": "success"},
    ]


def test_logs_are_private_per_user(client, auth_headers):
    other = {**auth_headers, "X-User-Subject": "google-999", "X-User-Email": "bo@example.com"}
    client.post("/api/log", json={"date": "2024-03-05", "status": "success"}, headers=auth_headers)

    assert client.get("/api/logs", headers=other).json() == []


def test_malformed_date_is_bad_request(client, auth_headers):
    response = client.post("/api/log", json={"date": "03-05-2024", "status": "success"}, headers=auth_headers)

    assert response.status_code == 400
    assert "YYYY-MM-DD" in response.json()["error"]
    assert client.get("/api/logs", headers=auth_headers).json() == []


def test_unknown_status_is_bad_request(client, auth_headers):
    response = client.post("/api/log", json={"date": "2024-03-05", "status": "maybe"}, headers=auth_headers)

    assert response.status_code == 400
    assert "status" in response.json()["error"]


def test_missing_fields_are_bad_request(client, auth_headers):
    response = client.post("/api/log", json={"date": "2024-03-05"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Malformed request body"}


def test_google_login_requires_configuration(client):
    response = client.get("/auth/google", follow_redirects=False)

    assert response.status_code == 400
    assert response.json() == {"error": "Google OAuth not configured"}


def _google_transport(calls):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        if str(request.url) == google_oauth_service.TOKEN_URL:
            assert b"code=auth-code" in request.content
            return httpx.Response(200, json={"access_token": "access-token", "expires_in": 3600})
        if str(request.url) == google_oauth_service.USERINFO_URL:
            assert request.headers["Authorization"] == "Bearer access-token"
            return httpx.Response(200, json={"sub": "google-42", "name": "Caio Lima", "email": "caio@example.com"})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def test_google_login_flow_sets_session(oauth_settings):
    calls = []
    app = create_app(oauth_settings)
    app.state.google_transport = _google_transport(calls)

    with TestClient(app) as client:
        start = client.get("/auth/google", follow_redirects=False)
        location = urlparse(start.headers["location"])
        params = parse_qs(location.query)

        assert start.status_code in (302, 307)
        assert f"{location.scheme}://{location.netloc}{location.path}" == google_oauth_service.AUTH_URL
        assert params["client_id"] == ["client-id"]
        assert params["scope"] == ["openid email profile"]

        callback = client.get(
            "/auth/google/callback",
            params={"code": "auth-code", "state": params["state"][0]},
            follow_redirects=False,
        )
        assert callback.status_code in (302, 307)
        assert callback.headers["location"] == "http://localhost:8501"

        me = client.get("/api/current_user").json()
        assert me["name"] == "Caio Lima"
        assert client.post("/api/log", json={"date": "2024-03-05", "status": "failed"}).status_code == 200
        assert client.get("/api/logs").json() == [{"date": "2024-03-05", "status": "failed"}]

        client.get("/auth/logout", follow_redirects=False)
        assert client.get("/api/logs").status_code == 401
        assert client.get("/api/current_user").json() is None

    assert calls == [google_oauth_service.TOKEN_URL, google_oauth_service.USERINFO_URL]


def test_google_callback_rejects_state_mismatch(oauth_settings):
    app = create_app(oauth_settings)
    app.state.google_transport = _google_transport([])

    with TestClient(app) as client:
        client.get("/auth/google", follow_redirects=False)
        response = client.get(
            "/auth/google/callback",
            params={"code": "auth-code", "state": "forged"},
            follow_redirects=False,
        )

        assert response.status_code == 400
        assert response.json() == {"error": "State mismatch"}
        assert client.get("/api/current_user").json() is None


def test_google_failure_is_bad_gateway(oauth_settings):
    app = create_app(oauth_settings)
    app.state.google_transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))

    with TestClient(app) as client:
        start = client.get("/auth/google", follow_redirects=False)
        state = parse_qs(urlparse(start.headers["location"]).query)["state"][0]
        response = client.get(
            "/auth/google/callback",
            params={"code": "auth-code", "state": state},
            follow_redirects=False,
        )

    assert response.status_code == 502
    assert response.json() == {"error": "Google login failed"}
