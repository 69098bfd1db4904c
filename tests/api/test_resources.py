"""API resource tests."""

from uuid import uuid4

import falcon
import falcon.asgi
import pytest
from falcon.testing import TestClient

from signflow.domain.exceptions import ConflictError, DocumentBusy, PersistenceError
from signflow.interfaces.api.resources.common import error_response

from tests.conftest import SIGNATURE


def _create(client: TestClient, **overrides) -> dict:
    body = {"title": "Lease", "key": "leases/lease.pdf", "page_count": 1}
    body.update(overrides)
    r = client.simulate_post("/v1/documents", json=body)
    assert r.status_code == 201, r.json
    return r.json


def _add_signer(client: TestClient, document_id: str, email: str, **extra) -> dict:
    r = client.simulate_post(f"/v1/documents/{document_id}/signers", json={"email": email, **extra})
    assert r.status_code == 201, r.json
    return r.json


def _add_field(client: TestClient, document_id: str, **extra) -> dict:
    body = {"type": "signature", "label": "Sign here", "page_number": 1,
            "x": 72, "y": 600, "width": 180, "height": 40}
    body.update(extra)
    r = client.simulate_post(f"/v1/documents/{document_id}/fields", json=body)
    assert r.status_code == 201, r.json
    return r.json


def _as(signer: dict, **headers) -> dict:
    return {"X-User-Id": signer["id"], **headers}


class TestDocuments:
    def test_create_and_get(self, client: TestClient) -> None:
        created = _create(client, description="Flat 4B")
        document = created["document"]
        assert document["status"] == "pending"
        assert document["file_url"].endswith("/leases/lease.pdf")
        assert created["signers"] == []

        r = client.simulate_get(f"/v1/documents/{document['id']}")
        assert r.status_code == 200
        assert r.json["document"]["description"] == "Flat 4B"

    def test_list_documents(self, client: TestClient) -> None:
        for _ in range(3):
            _create(client)
        r = client.simulate_get("/v1/documents", params={"limit": 2})
        assert r.status_code == 200
        assert len(r.json["documents"]) == 2
        cursor = r.json["next_cursor"]
        r = client.simulate_get("/v1/documents", params={"limit": 2, "cursor": cursor})
        assert len(r.json["documents"]) == 1
        assert r.json["next_cursor"] is None

    def test_list_documents_rejects_bad_limit(self, client: TestClient) -> None:
        r = client.simulate_get("/v1/documents", params={"limit": 0})
        assert r.status_code == 400

    def test_patch_and_delete(self, client: TestClient) -> None:
        document_id = _create(client)["document"]["id"]
        r = client.simulate_patch(f"/v1/documents/{document_id}", json={"title": "Lease v2"})
        assert r.status_code == 200
        assert r.json["document"]["title"] == "Lease v2"

        r = client.simulate_delete(f"/v1/documents/{document_id}")
        assert r.status_code == 204
        assert client.simulate_get(f"/v1/documents/{document_id}").status_code == 404

    def test_delete_by_other_user_forbidden(self, client: TestClient) -> None:
        document_id = _create(client)["document"]["id"]
        r = client.simulate_delete(
            f"/v1/documents/{document_id}", headers={"X-User-Id": "someone-else"}
        )
        assert r.status_code == 403
        assert r.json["code"] == "permission"


class TestSigningFlow:
    def test_sequential_flow(self, client: TestClient) -> None:
        document_id = _create(client, sequential_signing=True)["document"]["id"]
        alice = _add_signer(client, document_id, "alice@example.com", name="Alice")
        bob = _add_signer(client, document_id, "bob@example.com")
        assert (alice["order"], bob["order"]) == (1, 2)
        field = _add_field(client, document_id, required=True, signer_id=alice["id"])

        r = client.simulate_post(f"/v1/documents/{document_id}/send")
        assert r.status_code == 200
        assert r.json["document"]["status"] == "sent"
        assert r.json["current_signer_id"] == alice["id"]

        r = client.simulate_post(
            f"/v1/documents/{document_id}/signers/{bob['id']}/complete", headers=_as(bob)
        )
        assert r.status_code == 409
        assert r.json["error"] == "not your turn"
        assert r.json["expected"] == "signer order 1"

        status_url = f"/v1/documents/{document_id}/signers/{alice['id']}/status"
        r = client.simulate_get(status_url)
        assert r.json["satisfied"] is False
        assert r.json["findings"][0]["code"] == "required"

        r = client.simulate_post(
            f"/v1/documents/{document_id}/signers/{alice['id']}/complete",
            json={"values": {field["id"]: SIGNATURE}},
            headers=_as(alice),
        )
        assert r.status_code == 200, r.json
        assert r.json["current_signer_id"] == bob["id"]
        assert r.json["fields"][0]["value"] == SIGNATURE

        r = client.simulate_post(
            f"/v1/documents/{document_id}/signers/{bob['id']}/complete", headers=_as(bob)
        )
        assert r.json["document"]["status"] == "signed"
        assert r.json["progress"]["completed"] == 2

        r = client.simulate_get(f"/v1/documents/{document_id}/history")
        actions = [e["action"] for e in r.json["entries"]]
        assert actions[0] == "sent"
        assert actions[-1] == "signed"

    def test_view_and_decline(self, client: TestClient) -> None:
        document_id = _create(client)["document"]["id"]
        signer = _add_signer(client, document_id, "carol@example.com", access_code="2468")
        assert signer["has_access_code"] is True
        assert "access_code" not in signer
        client.simulate_post(f"/v1/documents/{document_id}/send")

        view_url = f"/v1/documents/{document_id}/signers/{signer['id']}/view"
        assert client.simulate_post(view_url, headers=_as(signer)).status_code == 403
        r = client.simulate_post(view_url, headers=_as(signer, **{"X-Access-Code": "2468"}))
        assert r.status_code == 200
        assert r.json["document"]["status"] == "viewed"

        r = client.simulate_post(
            f"/v1/documents/{document_id}/signers/{signer['id']}/decline",
            json={"reason": "wrong address"},
            headers=_as(signer, **{"X-Access-Code": "2468"}),
        )
        assert r.json["document"]["status"] == "declined"
        assert r.json["signers"][0]["decline_reason"] == "wrong address"

    def test_field_value_validation_error(self, client: TestClient) -> None:
        document_id = _create(client)["document"]["id"]
        signer = _add_signer(client, document_id, "dan@example.com")
        field = _add_field(client, document_id, type="email", label="Email", signer_id=signer["id"])
        client.simulate_post(f"/v1/documents/{document_id}/send")

        r = client.simulate_put(
            f"/v1/documents/{document_id}/fields/{field['id']}/value",
            json={"value": "not-an-email", "signer_id": signer["id"]},
            headers=_as(signer),
        )
        assert r.status_code == 400
        assert r.json["errors"][0]["field_id"] == field["id"]
        assert r.json["errors"][0]["code"] == "format"

    def test_remind_and_cancel(self, client: TestClient) -> None:
        document_id = _create(client)["document"]["id"]
        _add_signer(client, document_id, "erin@example.com")
        client.simulate_post(f"/v1/documents/{document_id}/send")

        assert client.simulate_post(f"/v1/documents/{document_id}/remind").status_code == 200
        r = client.simulate_post(f"/v1/documents/{document_id}/cancel", json={"reason": "typo"})
        assert r.json["document"]["status"] == "canceled"
        r = client.simulate_post(f"/v1/documents/{document_id}/cancel")
        assert r.status_code == 409


class TestErrors:
    def test_unauthenticated(self, anonymous_client: TestClient) -> None:
        r = anonymous_client.simulate_get("/v1/documents")
        assert r.status_code == 401

    def test_invalid_body(self, client: TestClient) -> None:
        r = client.simulate_post("/v1/documents", json={"key": "x.pdf", "color": "red"})
        assert r.status_code == 400
        fields = {e["field"] for e in r.json["errors"]}
        assert {"title", "color"} <= fields

    @pytest.mark.parametrize("rule", ["luhn", {"kind": "checksum"}])
    def test_unknown_validation_rule_rejected(self, client: TestClient, rule) -> None:
        document_id = _create(client)["document"]["id"]
        body = {"type": "text", "label": "Card", "page_number": 1,
                "x": 72, "y": 600, "width": 180, "height": 40, "validation_rule": rule}
        r = client.simulate_post(f"/v1/documents/{document_id}/fields", json=body)
        assert r.status_code == 400
        assert {e["field"] for e in r.json["errors"]} == {"validation_rule"}
        assert client.simulate_get(f"/v1/documents/{document_id}").json["fields"] == []

    def test_malformed_json(self, client: TestClient) -> None:
        r = client.simulate_post(
            "/v1/documents", body="{not json", headers={"Content-Type": "application/json"}
        )
        assert r.status_code == 400

    def test_invalid_uuid(self, client: TestClient) -> None:
        r = client.simulate_get("/v1/documents/not-a-uuid")
        assert r.status_code == 400

    def test_unknown_document(self, client: TestClient) -> None:
        r = client.simulate_post(f"/v1/documents/{uuid4()}/send")
        assert r.status_code == 404
        assert r.json["code"] == "not_found"

    def test_send_without_signers(self, client: TestClient) -> None:
        document_id = _create(client)["document"]["id"]
        r = client.simulate_post(f"/v1/documents/{document_id}/send")
        assert r.status_code == 409
        assert r.json["code"] == "workflow_violation"

    def test_unhandled_error_is_500(self, client: TestClient, coordinator, monkeypatch) -> None:
        async def boom(document_id):
            raise RuntimeError("boom")

        monkeypatch.setattr(coordinator, "get_document", boom)
        r = client.simulate_get(f"/v1/documents/{uuid4()}")
        assert r.status_code == 500
        assert r.json["code"] == "error"


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (ConflictError("stale"), falcon.HTTP_409),
        (DocumentBusy("busy"), falcon.HTTP_503),
        (PersistenceError("db down"), falcon.HTTP_503),
    ],
)
def test_error_response_status(error, status) -> None:
    resp = falcon.asgi.Response()
    error_response(resp, error)
    assert resp.status == status
    assert resp.media["code"] == error.code
