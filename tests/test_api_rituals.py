"""API tests for ritual and run endpoints."""

import pytest


def create_ritual(client, **overrides):
    body = {
        "ritual_key": "trash-day",
        "name": "Trash day",
        "instant_runs": True,
        "inputs": [{"type": "external_link", "value": "https://city.local/x"}],
    }
    body.update(overrides)
    return client.post("/rituals", json=body)


class TestRitualEndpoints:
    """Tests for /rituals."""

    def test_create_ritual(self, client):
        response = create_ritual(client)

        assert response.status_code == 201
        ritual = response.json()["ritual"]
        assert ritual == {
            "ritual_key": "trash-day",
            "name": "Trash day",
            "instant_runs": True,
            "cadence": None,
            "inputs": [{"type": "external_link", "value": "https://city.local/x"}],
            "created_at": "2024-06-01T12:00:00.000Z",
            "updated_at": "2024-06-01T12:00:00.000Z",
            "runs": [],
        }

    def test_cadence_round_trips(self, client):
        create_ritual(client, cadence="Fridays 7am")
        response = client.get("/rituals/trash-day")
        assert response.json()["ritual"]["cadence"] == "Fridays 7am"

    def test_input_label_round_trips(self, client):
        create_ritual(
            client,
            inputs=[
                {"type": "external_link", "value": "https://city.local/x", "label": "City"}
            ],
        )
        ritual = client.get("/rituals/trash-day").json()["ritual"]
        assert ritual["inputs"][0]["label"] == "City"

    def test_duplicate_ritual(self, client):
        create_ritual(client)
        response = create_ritual(client, name="Other name")
        assert response.status_code == 409
        assert response.json() == {"error": "ritual_already_exists"}

    @pytest.mark.parametrize(
        "overrides,code",
        [
            ({"ritual_key": ""}, "ritual_key_required"),
            ({"name": None}, "name_required"),
            ({"instant_runs": "true"}, "instant_runs_must_be_boolean"),
            ({"inputs": [{"type": "document", "value": "x"}]}, "unsupported_input_type"),
        ],
    )
    def test_invalid_body(self, client, overrides, code):
        response = create_ritual(client, **overrides)
        assert response.status_code == 400
        assert response.json() == {"error": code}

    def test_key_with_slash_is_rejected(self, client):
        response = create_ritual(client, ritual_key="a/b")
        assert response.status_code == 400
        assert response.json() == {"error": "invalid_ritual_key"}
        assert client.get("/rituals").json()["rituals"] == []

    def test_invalid_json(self, client):
        response = client.post(
            "/rituals",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "invalid_json"}

    def test_body_must_be_object(self, client):
        response = client.post("/rituals", json=["trash-day"])
        assert response.status_code == 400
        assert response.json() == {"error": "body_must_be_object"}

    def test_empty_body_reads_as_empty_object(self, client):
        response = client.post("/rituals")
        assert response.status_code == 400
        assert response.json() == {"error": "ritual_key_required"}

    def test_list_rituals(self, client):
        create_ritual(client)
        create_ritual(client, ritual_key="laundry", name="Laundry", instant_runs=False)

        rituals = client.get("/rituals").json()["rituals"]
        assert [r["ritual_key"] for r in rituals] == ["trash-day", "laundry"]

    def test_get_unknown_ritual(self, client):
        response = client.get("/rituals/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "ritual_not_found"}


class TestRunEndpoints:
    """Tests for run creation, detail and status."""

    def test_instant_ritual_scenario(self, client):
        assert create_ritual(client).status_code == 201

        response = client.post("/rituals/trash-day/runs", json={})
        assert response.status_code == 201
        run = response.json()["run"]
        assert run["status"] == "complete"
        assert run["run_key"] == "weave-run-trash-day-2024-06-01T12:00:01.000Z"
        assert run["inputs"] == [
            {"type": "external_link", "value": "https://city.local/x"}
        ]
        assert run["activity_log"] == []

        detail = client.get(f"/runs/{run['run_key']}").json()
        assert {"event": "on_run_complete", "status": "complete"}.items() <= (
            detail["next_triggers"][0].items()
        )
        assert detail["ritual"]["ritual_key"] == "trash-day"
        assert "runs" not in detail["ritual"]
        assert detail["attention_items"] == []

    def test_explicit_run_key(self, client):
        create_ritual(client, instant_runs=False)
        response = client.post("/rituals/trash-day/runs", json={"run_key": "run-1"})
        assert response.json()["run"]["run_key"] == "run-1"
        assert response.json()["run"]["status"] == "planned"

        again = client.post("/rituals/trash-day/runs", json={"run_key": "run-1"})
        assert again.status_code == 409
        assert again.json() == {"error": "run_already_exists"}

    def test_run_without_body(self, client):
        create_ritual(client, instant_runs=False)
        response = client.post("/rituals/trash-day/runs")
        assert response.status_code == 201

    def test_invalid_run_key(self, client):
        create_ritual(client)
        response = client.post("/rituals/trash-day/runs", json={"run_key": 7})
        assert response.status_code == 400
        assert response.json() == {"error": "run_key_must_be_string"}

    def test_run_key_with_slash_is_rejected(self, client):
        create_ritual(client)
        response = client.post("/rituals/trash-day/runs", json={"run_key": "run/1"})
        assert response.status_code == 400
        assert response.json() == {"error": "invalid_run_key"}
        assert client.get("/rituals/trash-day").json()["ritual"]["runs"] == []

    def test_run_for_unknown_ritual(self, client):
        response = client.post("/rituals/missing/runs", json={})
        assert response.status_code == 404
        assert response.json() == {"error": "ritual_not_found"}

    def test_ritual_lists_its_runs(self, client):
        create_ritual(client, instant_runs=False)
        client.post("/rituals/trash-day/runs", json={"run_key": "run-1"})
        client.post("/rituals/trash-day/runs", json={"run_key": "run-2"})

        ritual = client.get("/rituals/trash-day").json()["ritual"]
        assert [r["run_key"] for r in ritual["runs"]] == ["run-1", "run-2"]
        assert ritual["updated_at"] == ritual["runs"][-1]["updated_at"]

    def test_get_unknown_run(self, client):
        response = client.get("/runs/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "run_not_found"}

    def test_status_transitions(self, client):
        create_ritual(client, instant_runs=False)
        client.post("/rituals/trash-day/runs", json={"run_key": "run-1"})

        started = client.post("/runs/run-1/status", json={"status": "in_progress"})
        assert started.status_code == 200
        body = started.json()
        assert body["run"]["status"] == "in_progress"
        assert body["run"]["activity_log"][0]["event"] == "on_run_start"
        assert [t["event"] for t in body["next_triggers"]] == [
            "on_run_start",
            "on_run_complete",
        ]

        done = client.post("/runs/run-1/status", json={"status": "complete"})
        assert done.json()["run"]["status"] == "complete"
        assert len(done.json()["run"]["activity_log"]) == 2

        again = client.post("/runs/run-1/status", json={"status": "in_progress"})
        assert again.status_code == 409
        assert again.json() == {"error": "invalid_status_transition"}

    def test_invalid_status(self, client):
        create_ritual(client, instant_runs=False)
        client.post("/rituals/trash-day/runs", json={"run_key": "run-1"})

        response = client.post("/runs/run-1/status", json={"status": "finished"})
        assert response.status_code == 400
        assert response.json() == {"error": "invalid_run_status"}

    def test_status_for_unknown_run(self, client):
        response = client.post("/runs/missing/status", json={"status": "complete"})
        assert response.status_code == 404

    def test_run_artifacts_not_implemented(self, client):
        response = client.get("/runs/anything/artifacts")
        assert response.status_code == 501
        assert response.json() == {"error": "not_implemented"}
