import pytest
from fastapi.testclient import TestClient

from app.dependencies import build_deployment_service, get_deployment_service
from app.main import app
from app.models import PublishHistory

from conftest import make_pod

BASE = "/api/v1/openapi"


@pytest.fixture
def api(db, seed, gateway):
    app.dependency_overrides[get_deployment_service] = lambda: build_deployment_service(db, gateway)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(api):
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_upgrade_reports_partial_failure_with_200(api, gateway):
    gateway.handles["b"].fail_with = RuntimeError("connection reset")

    response = api.get(f"{BASE}/upgrade_deployment",
                       params={"deployment": "web", "namespace": "team", "cluster": "a,b", "images": "app=v2"})

    assert response.status_code == 200
    body = response.json()
    assert body["code"] == 200
    assert len(body["errors"]) == 1
    assert body["data"] == {"templates": {"a": 6, "b": 6}, "published": ["a"]}


def test_upgrade_records_api_key_as_author(api, db):
    response = api.get(f"{BASE}/upgrade_deployment",
                       params={"deployment": "web", "namespace": "team", "cluster": "a", "images": "app=v2",
                               "description": "bump"},
                       headers={"X-API-Key": "team-ci"})

    assert response.status_code == 200
    history = db.query(PublishHistory).one()
    assert history.user == "team-ci"
    assert history.message == "[APIKey] bump"


def test_upgrade_without_images(api):
    response = api.get(f"{BASE}/upgrade_deployment",
                       params={"deployment": "web", "namespace": "team", "cluster": "a"})

    assert response.status_code == 400
    assert response.json()["data"] is None
    assert "images" in response.json()["errors"][0]


@pytest.mark.parametrize("replicas", [0, 33])
def test_scale_out_of_range(api, replicas):
    response = api.get(f"{BASE}/scale_deployment",
                       params={"deployment": "web", "namespace": "team", "cluster": "a", "replicas": replicas})

    assert response.status_code == 400
    assert response.json()["code"] == 400


def test_scale_missing_in_cluster(api):
    response = api.get(f"{BASE}/scale_deployment",
                       params={"deployment": "web", "namespace": "team", "cluster": "a", "replicas": 4})

    assert response.status_code == 404


def test_deployment_status(api, gateway):
    gateway.handles["a"].deployments[("team-prod", "web")] = {
        "metadata": {"name": "web", "namespace": "team-prod", "labels": {"app": "web"}},
        "spec": {"replicas": 1},
    }
    gateway.handles["a"].pods = [make_pod("web-1")]

    response = api.get(f"{BASE}/get_deployment_status",
                       params={"deployment": "web", "namespace": "team", "cluster": "a"})

    assert response.status_code == 200
    status = response.json()["status"]
    assert status["healthz"] is True
    assert status["pods"][0]["pod_ip"] == "10.0.0.1"
    assert status["deployment"]["pods_state"]["desired"] == 1


def test_status_of_unreachable_cluster(api):
    response = api.get(f"{BASE}/get_deployment_status",
                       params={"deployment": "web", "namespace": "team", "cluster": "zz"})

    assert response.status_code == 503


def test_publish_history(api):
    api.get(f"{BASE}/upgrade_deployment",
            params={"deployment": "web", "namespace": "team", "cluster": "a,b", "images": "app=v2"})

    response = api.get(f"{BASE}/publish_history", params={"deployment": "web"})

    assert response.status_code == 200
    rows = response.json()
    assert [r["cluster"] for r in rows] == ["b", "a"]
    assert all(r["status"] == "success" and r["template_id"] == 6 for r in rows)
