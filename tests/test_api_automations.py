"""API tests for automations, mock invocations and reserved artifact routes."""

from fastapi.testclient import TestClient

from ritual_weave.api import create_app
from ritual_weave.config import Settings
from ritual_weave.invocations import InvocationBroker

AUTOMATION = {
    "trigger": "on_run_complete",
    "call": {"capability_id": "notify.send", "payload_template": {"text": "Done!"}},
}


class TestAutomationEndpoints:
    def test_create_global_automation(self, client):
        response = client.post("/automations", json=AUTOMATION)

        assert response.status_code == 201
        automation = response.json()["automation"]
        assert automation["trigger"] == "on_run_complete"
        assert automation["call"] == AUTOMATION["call"]
        assert "ritual_key" not in automation

    def test_unknown_ritual(self, client):
        response = client.post("/automations", json={**AUTOMATION, "ritual_key": "ghost"})
        assert response.status_code == 404
        assert response.json() == {"error": "ritual_not_found"}

    def test_invalid_trigger(self, client):
        response = client.post("/automations", json={**AUTOMATION, "trigger": "whenever"})
        assert response.status_code == 400
        assert response.json() == {"error": "invalid_trigger_type"}

    def test_payload_template_must_be_object(self, client):
        body = {
            "trigger": "on_run_start",
            "call": {"capability_id": "notify.send", "payload_template": ["x"]},
        }
        response = client.post("/automations", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "payload_template_must_be_object"}

    def test_idempotent_create(self, client):
        headers = {"Idempotency-Key": "automation-1"}
        first = client.post("/automations", json=AUTOMATION, headers=headers)
        second = client.post("/automations", json=AUTOMATION, headers=headers)

        assert first.status_code == second.status_code == 201
        assert first.json() == second.json()
        assert len(client.get("/automations").json()["automations"]) == 1

    def test_retry_with_unparseable_body_replays(self, client):
        headers = {"Idempotency-Key": "automation-1"}
        first = client.post("/automations", json=AUTOMATION, headers=headers)

        retry = client.post(
            "/automations",
            content=b"{not json",
            headers={**headers, "Content-Type": "application/json"},
        )
        assert retry.status_code == 201
        assert retry.json() == first.json()

    def test_unparseable_body_without_key(self, client):
        response = client.post(
            "/automations",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "invalid_json"}

    def test_list_with_ritual_filter(self, client):
        client.post("/rituals", json={"ritual_key": "laundry", "name": "Laundry"})
        client.post("/rituals", json={"ritual_key": "dishes", "name": "Dishes"})
        client.post("/automations", json={**AUTOMATION, "ritual_key": "laundry"})
        client.post("/automations", json={**AUTOMATION, "ritual_key": "dishes"})
        client.post("/automations", json=AUTOMATION)

        everything = client.get("/automations").json()["automations"]
        assert len(everything) == 3

        laundry = client.get("/automations", params={"ritual_key": "laundry"}).json()
        assert [a.get("ritual_key") for a in laundry["automations"]] == ["laundry", None]


class TestInvocationEndpoints:
    def test_request_invocation(self, client):
        response = client.post(
            "/invocations/request",
            json={"capability_id": "notify.send", "payload": {"text": "hi"}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "pending"
        assert body["capability_id"] == "notify.send"
        assert body["invocation_url"].endswith("/" + body["invocation_id"])
        assert body["idempotency_key"]

    def test_header_key_wins_over_body(self, client):
        response = client.post(
            "/invocations/request",
            json={
                "capability_id": "notify.send",
                "payload": {},
                "idempotency_key": "from-body",
            },
            headers={"Idempotency-Key": "from-header"},
        )
        assert response.json()["idempotency_key"] == "from-header"

    def test_body_key_used_without_header(self, client):
        response = client.post(
            "/invocations/request",
            json={
                "capability_id": "notify.send",
                "payload": {},
                "idempotency_key": "from-body",
            },
        )
        assert response.json()["idempotency_key"] == "from-body"

    def test_invalid_request(self, client):
        response = client.post("/invocations/request", json={"capability_id": "x"})
        assert response.status_code == 400
        assert response.json() == {"error": "payload_must_be_object"}

    def test_base_url_from_settings(self, state):
        settings = Settings(invocation_base_url="https://hub.local/calls/")
        client = TestClient(create_app(state=state, settings=settings))

        body = client.post(
            "/invocations/request", json={"capability_id": "x", "payload": {}}
        ).json()
        assert body["invocation_url"] == f"https://hub.local/calls/{body['invocation_id']}"


class TestInvocationBroker:
    def test_unique_ids(self):
        broker = InvocationBroker("https://hub.local")
        first = broker.request({"capability_id": "x", "payload": {}})
        second = broker.request({"capability_id": "x", "payload": {}})
        assert first["invocation_id"] != second["invocation_id"]
        assert first["idempotency_key"] != second["idempotency_key"]


class TestArtifactEndpoints:
    def test_create_artifact_not_implemented(self, client):
        response = client.post("/artifacts", json={"name": "photo.jpg"})
        assert response.status_code == 501
        assert response.json() == {"error": "not_implemented"}
