import pytest

from fleetsim.api import create_app
from fleetsim.config import FleetConfig
from fleetsim.fleet_state import FleetState


@pytest.fixture()
def state():
    return FleetState(FleetConfig(fleet_size=120, seed=21))


@pytest.fixture()
def client(state):
    app = create_app(state)
    with app.test_client() as client:
        yield client


def test_snapshot_is_generated_on_demand(client):
    response = client.get("/snapshot")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["total"] == 120
    assert payload["matched"] == 120
    assert len(payload["nodes"]) == 120
    assert payload["events"][0]["title"] == "Snapshot generated"
    assert payload["kpis"]["total"] == 120


def test_snapshot_sort_and_limit(client):
    payload = client.get("/snapshot?sort=health_score&dir=asc&limit=10").get_json()
    scores = [n["health_score"] for n in payload["nodes"]]
    assert len(scores) == 10
    assert scores == sorted(scores)


def test_snapshot_filters(client):
    payload = client.get("/snapshot?status=healthy").get_json()
    assert all(n["status"] == "HEALTHY" for n in payload["nodes"])
    assert payload["matched"] == len(payload["nodes"])


@pytest.mark.parametrize(
    "query",
    ["sort=__dict__", "dir=up", "status=ON_FIRE", "failure=GREMLINS", "limit=-1", "limit=abc"],
)
def test_bad_query_params_are_400(client, query):
    response = client.get(f"/snapshot?{query}")
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_tick_prepends_events_and_keeps_cap(client):
    for _ in range(15):
        response = client.post("/snapshot/tick")
        assert response.status_code == 200
        payload = response.get_json()
        assert payload["new_events"]
        assert payload["total"] == 120
    assert len(payload["events"]) <= 20
    assert payload["events"][: len(payload["new_events"])] == payload["new_events"][:20]


def test_regenerate_with_size(client):
    response = client.post("/snapshot/regenerate", json={"size": 0})
    assert response.status_code == 200
    assert response.get_json()["total"] == 0
    assert response.get_json()["events"][0]["detail"] == "Initialized fleet telemetry for 0 nodes."

    run = client.post("/validate").get_json()
    assert run["summary"] == {"overall_pass": True, "pass_count": 6, "fail_count": 0}


@pytest.mark.parametrize("body", [{"size": -5}, {"size": "ten"}, {"size": True}])
def test_regenerate_rejects_bad_size(client, body):
    assert client.post("/snapshot/regenerate", json=body).status_code == 400


def test_validation_flow_and_exports(client):
    assert client.get("/validation/latest").status_code == 404
    assert client.get("/export/report.md").status_code == 404

    run = client.post("/validate").get_json()
    assert len(run["checks"]) == 6
    assert run["summary"]["pass_count"] + run["summary"]["fail_count"] == 6

    latest = client.get("/validation/latest").get_json()
    assert latest["run_id"] == run["run_id"]

    events = client.get("/events").get_json()["events"]
    assert events[0]["title"].startswith("Validation suite")
    assert run["run_id"] in events[0]["detail"]

    report = client.get("/export/report.md")
    assert report.status_code == 200
    assert report.mimetype == "text/markdown"
    assert run["run_id"] in report.get_data(as_text=True)

    csv_response = client.get("/export/nodes.csv")
    assert csv_response.mimetype == "text/csv"
    lines = csv_response.get_data(as_text=True).split("\n")
    assert lines[0].startswith("node_id,rack,zone,")
    assert len(lines) == 121


def test_health_endpoint(client):
    payload = client.get("/health").get_json()
    assert payload["status"] == "ok"
    client.get("/snapshot")
    assert client.get("/health").get_json()["snapshot_age_ms"] >= 0


def test_regenerate_beyond_max_fleet_size_is_400():
    state = FleetState(FleetConfig(fleet_size=10, seed=3, max_fleet_size=50))
    with create_app(state).test_client() as client:
        response = client.post("/snapshot/regenerate", json={"size": 1_000_000_000})
        assert response.status_code == 400
        assert "max_fleet_size" in response.get_json()["error"]
        assert state.snapshot is None
        assert client.post("/snapshot/regenerate", json={"size": 50}).get_json()["total"] == 50
