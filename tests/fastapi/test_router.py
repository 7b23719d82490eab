from urllib.parse import parse_qs, urlsplit

from fastapi import FastAPI
from fastapi.testclient import TestClient

from smart_launch._storage import MemorySessionStore
from smart_launch.exceptions import PatientFetchFailed
from smart_launch.utils._pkce import calculate_s256_challenge

from ..conftest import ISSUER, TENANT_ID, FakeFhirClient, FakeTokenExchanger


def test_openapi_paths(test_app: FastAPI):
    schema = test_app.openapi()

    assert set(schema["paths"]) == {"/session", "/logout"}
    assert schema["paths"]["/session"]["get"]["operationId"] == "get_session"
    assert schema["paths"]["/logout"]["post"]["operationId"] == "logout"


def test_launch_redirects_to_authorization_server(
    client: TestClient, store: MemorySessionStore
):
    response = client.get(
        "/", params={"iss": ISSUER, "launch": "L1"}, follow_redirects=False
    )

    assert response.status_code == 302

    location = urlsplit(response.headers["Location"])

    assert location.netloc == "authorization.cerner.com"
    assert location.path == (
        f"/tenants/{TENANT_ID}"
        "/protocols/oauth2/profiles/smart-v1/personas/provider/authorize"
    )

    query = parse_qs(location.query)
    verifier = store.get("code_verifier")

    assert verifier is not None
    assert store.get("iss") == ISSUER
    assert query["launch"] == ["L1"]
    assert query["aud"] == [ISSUER]
    assert query["code_challenge"] == [calculate_s256_challenge(verifier)]


def test_launch_with_invalid_issuer(client: TestClient):
    response = client.get(
        "/", params={"iss": "https://fhir.example.com", "launch": "L1"}
    )

    assert response.status_code == 400
    assert "Issuer has no tenant segment" in response.text


def test_callback_shows_patient_and_rewrites_address(
    client: TestClient,
    store: MemorySessionStore,
    token_exchanger: FakeTokenExchanger,
):
    store.set("code_verifier", "v1")
    store.set("iss", ISSUER)

    response = client.get("/", params={"code": "abc123"})

    assert response.status_code == 200
    assert response.headers["Content-Type"].startswith("text/html")
    assert token_exchanger.calls == [("abc123", "v1", ISSUER)]

    assert "Nancy Smart" in response.text
    assert "Heart Rate" in response.text
    assert "01 Mar 2024 10:00 UTC" in response.text
    assert "window.history.replaceState({}, '', 'http://localhost:3000');" in (
        response.text
    )


def test_callback_without_session_data(
    client: TestClient, token_exchanger: FakeTokenExchanger
):
    response = client.get("/", params={"code": "abc123"})

    assert response.status_code == 400
    assert "Missing verification or issuer data." in response.text
    assert token_exchanger.calls == []


def test_no_session_page_links_to_default_launch(client: TestClient):
    response = client.get("/")

    assert response.status_code == 200
    assert "No active session" in response.text
    assert "Login with Cerner" in response.text
    assert "replaceState" not in response.text


def test_resumed_page_does_not_rewrite_address(
    client: TestClient, active_store: MemorySessionStore
):
    response = client.get("/")

    assert response.status_code == 200
    assert "Nancy Smart" in response.text
    assert "replaceState" not in response.text


def test_patient_fields_are_escaped(
    client: TestClient,
    active_store: MemorySessionStore,
    fhir_client: FakeFhirClient,
):
    fhir_client.patient = {"name": [{"family": "<script>alert(1)</script>"}]}

    response = client.get("/")

    assert "<script>alert(1)</script>" not in response.text
    assert "&lt;script&gt;" in response.text


def test_session_json(client: TestClient, active_store: MemorySessionStore):
    response = client.get("/session")

    assert response.status_code == 200

    data = response.json()

    assert data["state"] == "active"
    assert data["path"] == "resume"
    assert data["patient"] == {
        "id": "12724066",
        "name": "Nancy Smart",
        "gender": "female",
        "birth_date": "1980-08-11",
        "active": True,
        "address": "1234 Main St, Kansas City, MO 64105",
    }
    assert data["observations"] == [
        {
            "code": "Heart Rate",
            "value": 72,
            "unit": "/min",
            "effective": "2024-03-01T10:00:00Z",
        }
    ]
    assert data["error"] is None
    assert "status_code" not in data


def test_session_ignores_query_parameters(
    client: TestClient,
    store: MemorySessionStore,
    token_exchanger: FakeTokenExchanger,
):
    response = client.get("/session", params={"code": "abc123"})

    assert response.json()["state"] == "no_session"
    assert token_exchanger.calls == []
    assert store.data == {}


def test_logout(client: TestClient, active_store: MemorySessionStore):
    response = client.post("/logout", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["Location"] == "./"
    assert active_store.data == {}

    response = client.get("/session")

    assert response.json()["state"] == "no_session"


def test_logout_then_reload_lands_in_no_session(
    client: TestClient, active_store: MemorySessionStore
):
    response = client.post("/logout")

    assert response.status_code == 200
    assert "No active session" in response.text


def test_session_json_error_keeps_status_out_of_body(
    client: TestClient,
    active_store: MemorySessionStore,
    fhir_client: FakeFhirClient,
):
    fhir_client.patient_error = PatientFetchFailed()

    response = client.get("/session")

    assert response.status_code == 502
    assert response.json()["error"] == "FHIR Patient read failed"
    assert "status_code" not in response.json()
