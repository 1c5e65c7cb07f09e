from __future__ import annotations

import json

import pyotp
import pytest
from fastapi.testclient import TestClient

from apps.api.main.app import create_app
from duokey.contexts.credentials.adapters.outbound.persistence import InMemoryAccountStore

_APP_ID = "https://example.com"


@pytest.fixture
def store() -> InMemoryAccountStore:
    store = InMemoryAccountStore()
    store.add_account(api_key="key-1")
    store.add_account(api_key="inactive", activated=False)
    return store


@pytest.fixture
def client(store: InMemoryAccountStore) -> TestClient:
    """
    Build API test client over an in-memory store.

    Args:
        store: Provisioned in-memory store.
    Returns:
        TestClient: Client for the credentials API.
    Assumptions:
        `test` environment does not require a Postgres DSN.
    Raises:
        None.
    Side Effects:
        None.
    """
    return TestClient(create_app(environ={"DUOKEY_ENV": "test"}, store=store))


@pytest.fixture
def headers(api_secret: str) -> dict[str, str]:
    return {"X-Api-Key": "key-1", "X-Api-Secret": api_secret}


def test_totp_enroll_and_validate_over_http(
    client: TestClient,
    headers: dict[str, str],
) -> None:
    """
    Verify `POST /totp` and `POST /totp/{uuid}/validate` contracts.

    Args:
        client: API test client.
        headers: Valid API credential headers.
    Returns:
        None.
    Assumptions:
        Wrong codes answer 401 with `invalid_totp_code`.
    Raises:
        AssertionError: If HTTP payloads differ from the API contract.
    Side Effects:
        None.
    """
    enrolled = client.post("/totp", headers=headers, json={"label": "alice", "issuer": "Acme"})
    body = enrolled.json()
    code = pyotp.TOTP(body["totpKey"]).now()
    wrong_code = f"{(int(code) + 500_000) % 1_000_000:06d}"

    valid = client.post(f"/totp/{body['uuid']}/validate", headers=headers, json={"code": code})
    invalid = client.post(
        f"/totp/{body['uuid']}/validate",
        headers=headers,
        json={"code": wrong_code},
    )

    assert enrolled.status_code == 200
    assert set(body) == {"uuid", "totpKey", "imageUrl"}
    assert body["imageUrl"].startswith("data:image/png;base64,")
    assert valid.status_code == 200
    assert valid.json() == {"message": "Valid", "status": 200}
    assert invalid.status_code == 401
    assert invalid.json() == {"detail": {"error": "invalid_totp_code", "message": "Invalid"}}


def test_totp_enroll_accepts_missing_body(client: TestClient, headers: dict[str, str]) -> None:
    response = client.post("/totp", headers=headers)

    assert response.status_code == 200
    assert response.json()["uuid"]


def test_totp_validate_without_code_is_bad_request(
    client: TestClient,
    headers: dict[str, str],
) -> None:
    enrolled = client.post("/totp", headers=headers).json()

    response = client.post(f"/totp/{enrolled['uuid']}/validate", headers=headers, json={})

    assert response.status_code == 400
    assert response.json() == {
        "detail": {"error": "invalid_request", "message": "code (as a string) is required"}
    }


@pytest.mark.parametrize(
    "request_headers",
    [
        {},
        {"X-Api-Key": "key-1"},
        {"X-Api-Key": "unknown", "X-Api-Secret": "c2VjcmV0"},
        {"X-Api-Key": "inactive", "X-Api-Secret": "c2VjcmV0"},
    ],
)
def test_credentials_routes_reject_unauthorized_callers(
    client: TestClient,
    request_headers: dict[str, str],
) -> None:
    totp = client.post("/totp", headers=request_headers)
    u2f = client.post("/u2f/registrations", headers=request_headers, json={"appId": _APP_ID})

    for response in (totp, u2f):
        assert response.status_code == 401
        assert response.json() == {"detail": {"error": "unauthorized", "message": "Unauthorized"}}


def test_u2f_register_authenticate_and_delete_over_http(
    client: TestClient,
    headers: dict[str, str],
    soft_u2f_device,
) -> None:
    """
    Verify the U2F HTTP ceremony from registration to deletion.

    Args:
        client: API test client.
        headers: Valid API credential headers.
        soft_u2f_device: Software authenticator fixture.
    Returns:
        None.
    Assumptions:
        Challenges use U2F JavaScript API field names.
    Raises:
        AssertionError: If any HTTP contract step differs.
    Side Effects:
        None.
    """
    started = client.post("/u2f/registrations", headers=headers, json={"appId": _APP_ID})
    start_body = started.json()
    credential_uuid = start_body["uuid"]

    registered = client.post(
        f"/u2f/{credential_uuid}/registration/validate",
        headers=headers,
        json={"signResult": soft_u2f_device.register(challenge=start_body["challenge"])},
    )
    auth = client.post(f"/u2f/{credential_uuid}/authentications", headers=headers)
    auth_body = auth.json()
    sign_response = soft_u2f_device.authenticate(challenge=auth_body)
    validated = client.post(
        f"/u2f/{credential_uuid}/authentication/validate",
        headers=headers,
        json={"signResult": json.dumps(sign_response)},
    )
    replayed = client.post(
        f"/u2f/{credential_uuid}/authentication/validate",
        headers=headers,
        json={"signResult": sign_response},
    )
    deleted = client.delete(f"/u2f/{credential_uuid}", headers=headers)
    after_delete = client.post(f"/u2f/{credential_uuid}/authentications", headers=headers)

    assert started.status_code == 200
    assert start_body["challenge"]["version"] == "U2F_V2"
    assert start_body["challenge"]["appId"] == _APP_ID
    assert set(start_body["challenge"]) == {"version", "appId", "challenge"}
    assert registered.status_code == 200
    assert registered.json() == {"uuid": credential_uuid, "registered": True}
    assert auth.status_code == 200
    assert set(auth_body) == {"uuid", "version", "challenge", "appId", "keyHandle"}
    assert validated.status_code == 200
    assert validated.json() == {"message": "Valid", "status": 200}
    assert replayed.status_code == 409
    assert replayed.json()["detail"]["error"] == "credential_state_conflict"
    assert deleted.status_code == 204
    assert after_delete.status_code == 404
    assert after_delete.json() == {
        "detail": {
            "error": "credential_not_found",
            "message": "No U2F entry found with that uuid for that API Key.",
        }
    }


def test_u2f_registration_requires_app_id(client: TestClient, headers: dict[str, str]) -> None:
    response = client.post("/u2f/registrations", headers=headers, json={})

    assert response.status_code == 400
    assert response.json() == {"detail": {"error": "invalid_request", "message": "appId is required"}}


def test_u2f_rejected_registration_proof_is_bad_request(
    client: TestClient,
    headers: dict[str, str],
) -> None:
    started = client.post("/u2f/registrations", headers=headers, json={"appId": _APP_ID}).json()

    response = client.post(
        f"/u2f/{started['uuid']}/registration/validate",
        headers=headers,
        json={"signResult": {"errorCode": 5}},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == {
        "error": "u2f_registration_failed",
        "message": "client reported error TIMEOUT",
    }


def test_u2f_registration_signed_for_other_app_id_is_bad_request(
    client: TestClient,
    headers: dict[str, str],
    soft_u2f_device,
) -> None:
    started = client.post("/u2f/registrations", headers=headers, json={"appId": _APP_ID}).json()
    forged = soft_u2f_device.register(
        challenge=started["challenge"],
        app_id_override="https://evil.example",
    )

    response = client.post(
        f"/u2f/{started['uuid']}/registration/validate",
        headers=headers,
        json={"signResult": forged},
    )
    retried = client.post(
        f"/u2f/{started['uuid']}/registration/validate",
        headers=headers,
        json={"signResult": soft_u2f_device.register(challenge=started["challenge"])},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == {
        "error": "u2f_registration_failed",
        "message": "registration signature is invalid",
    }
    assert retried.status_code == 200
    assert retried.json() == {"uuid": started["uuid"], "registered": True}


def test_u2f_sign_result_of_wrong_type_is_validation_error(
    client: TestClient,
    headers: dict[str, str],
) -> None:
    started = client.post("/u2f/registrations", headers=headers, json={"appId": _APP_ID}).json()

    response = client.post(
        f"/u2f/{started['uuid']}/registration/validate",
        headers=headers,
        json={"signResult": [1, 2]},
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"


def test_create_app_exposes_account_store(store: InMemoryAccountStore) -> None:
    app = create_app(environ={"DUOKEY_ENV": "test"}, store=store)

    assert app.state.account_store is store
