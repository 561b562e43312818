"""
Fixtures partagées: base SQLite en mémoire, jeu de données 'web' et faux clusters.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import copy
import json
from types import SimpleNamespace

import pytest
from kubernetes.client.rest import ApiException
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.core.exceptions import UnavailableError
from app.dependencies import build_deployment_service
from app.models import (
    App, Cluster, Deployment, DeploymentTemplate, Namespace, PublishStatus, PublishType
)


def make_workload(name, containers=(("app", "v1"), ("sidecar", "v2")), replicas=9):
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": name, "labels": {"tier": "backend"}},
        "spec": {
            "replicas": replicas,
            "selector": {"matchLabels": {"app": name}},
            "template": {
                "metadata": {"labels": {"app": name}},
                "spec": {"containers": [{"name": c, "image": image} for c, image in containers]},
            },
        },
    }


class FakeClusterHandle:
    """Cluster en mémoire exposant la même surface que K8sClient"""

    def __init__(self, name):
        self.cluster = name
        self.deployments = {}
        self.applied = []
        self.pods = []
        self.fail_with = None

    def _key(self, body):
        return body["metadata"]["namespace"], body["metadata"]["name"]

    def get_deployment(self, name, namespace):
        if (namespace, name) not in self.deployments:
            raise ApiException(status=404, reason="Not Found")
        return copy.deepcopy(self.deployments[(namespace, name)])

    def create_or_update_deployment(self, body):
        if self.fail_with is not None:
            raise self.fail_with
        self.deployments[self._key(body)] = copy.deepcopy(body)
        self.applied.append(copy.deepcopy(body))
        return copy.deepcopy(body)

    def update_deployment(self, body):
        if self.fail_with is not None:
            raise self.fail_with
        if self._key(body) not in self.deployments:
            raise ApiException(status=404, reason="Not Found")
        self.deployments[self._key(body)] = copy.deepcopy(body)
        self.applied.append(copy.deepcopy(body))
        return copy.deepcopy(body)

    def get_deployment_detail(self, name, namespace):
        obj = self.get_deployment(name, namespace)
        phases = [p["state"] for p in self.pods]
        return {
            "name": name,
            "namespace": namespace,
            "labels": obj["metadata"].get("labels", {}),
            "create_time": None,
            "pods_state": {
                "current": len(self.pods),
                "desired": obj["spec"].get("replicas", 0),
                "running": phases.count("Running"),
                "pending": phases.count("Pending"),
                "failed": phases.count("Failed"),
                "succeeded": phases.count("Succeeded"),
                "warnings": [],
            },
        }

    def get_pods_by_deployment(self, namespace, name):
        self.get_deployment(name, namespace)
        return copy.deepcopy(self.pods)


class FakeGateway:
    def __init__(self, names):
        self.handles = {name: FakeClusterHandle(name) for name in names}
        self.resolved = []

    def resolve(self, cluster_name):
        self.resolved.append(cluster_name)
        if cluster_name not in self.handles:
            raise UnavailableError(f"Failed to get k8s client(cluster: {cluster_name}): unreachable")
        return self.handles[cluster_name]


def make_pod(name, state="Running", pod_ip="10.0.0.1"):
    return {
        "name": name,
        "namespace": "team-prod",
        "state": state,
        "pod_ip": pod_ip,
        "node_name": "node-1",
        "start_time": None,
        "labels": {"app": "web"},
        "container_status": [{"name": "app", "restart_count": 0, "waiting_reason": None}],
    }


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def seed(db):
    """Déploiement 'web' sur les clusters a et b avec le template 5, 'api' avec le template 3"""
    team = Namespace(name="team", meta_data=json.dumps({"namespace": "team-prod"}))
    other = Namespace(name="other", meta_data=json.dumps({"namespace": "other-prod"}))
    db.add_all([team, other])
    db.flush()

    webapp = App(name="webapp", namespace_id=team.id)
    db.add(webapp)
    db.flush()

    web = Deployment(name="web", app_id=webapp.id, template_id=5,
                     meta_data=json.dumps({"replicas": {"a": 2, "b": 3, "c": 1}}))
    api = Deployment(name="api", app_id=webapp.id, template_id=3,
                     meta_data=json.dumps({"replicas": {"a": 1}}))
    db.add_all([web, api])
    db.flush()

    db.add_all([
        DeploymentTemplate(id=3, deployment_id=api.id, template=json.dumps(make_workload("api")),
                           description="api v1", user="alice"),
        DeploymentTemplate(id=5, deployment_id=web.id, template=json.dumps(make_workload("web")),
                           description="web v1", user="alice"),
    ])
    db.add_all([Cluster(name=name, meta_data="{}") for name in ("a", "b", "c")])
    db.add_all([
        PublishStatus(type=PublishType.DEPLOYMENT, resource_id=web.id, template_id=5, cluster="a"),
        PublishStatus(type=PublishType.DEPLOYMENT, resource_id=web.id, template_id=5, cluster="b"),
        PublishStatus(type=PublishType.DEPLOYMENT, resource_id=api.id, template_id=3, cluster="a"),
    ])
    db.commit()
    return SimpleNamespace(web=web, api=api, team=team, other=other, app=webapp)


@pytest.fixture
def gateway():
    return FakeGateway(["a", "b", "c"])


@pytest.fixture
def service(db, seed, gateway):
    return build_deployment_service(db, gateway)
