import pytest
from kubernetes.client.rest import ApiException
from sqlalchemy.exc import OperationalError

from app.core.exceptions import ApplyFailedError, StatusSyncError, UnavailableError
from app.models import PublishHistory, PublishStatus, ReleaseStatus


@pytest.fixture
def info(service):
    return service.resolver.resolve("web", "team", "a")


def status_of(db, seed, cluster):
    return db.query(PublishStatus).filter_by(resource_id=seed.web.id, cluster=cluster).one()


class TestPublisher:

    def test_success_records_history_and_status(self, service, db, seed, gateway, info):
        service.publisher.publish(info, "ci-key")

        handle = gateway.handles["a"]
        applied = handle.deployments[("team-prod", "web")]
        assert applied["spec"]["replicas"] == 2
        assert applied["metadata"]["namespace"] == "team-prod"

        history = db.query(PublishHistory).one()
        assert history.status == ReleaseStatus.SUCCESS
        assert history.template_id == 5
        assert history.cluster == "a"
        assert history.user == "ci-key"
        assert history.message == "web v1"
        assert history.resource_name == "web"
        assert status_of(db, seed, "a").template_id == 5

    def test_apply_failure_records_failed_history(self, service, db, seed, gateway, info):
        gateway.handles["a"].fail_with = ApiException(status=422, reason="Unprocessable Entity")

        with pytest.raises(ApplyFailedError):
            service.publisher.publish(info, "ci-key")

        history = db.query(PublishHistory).one()
        assert history.status == ReleaseStatus.FAILURE
        assert "Unprocessable Entity" in history.message
        assert status_of(db, seed, "a").template_id == 5

    def test_unreachable_cluster_writes_no_history(self, service, db, gateway, info):
        del gateway.handles["a"]

        with pytest.raises(UnavailableError):
            service.publisher.publish(info, "ci-key")

        assert db.query(PublishHistory).count() == 0

    def test_publishing_twice_is_idempotent(self, service, db, seed, gateway, info):
        service.publisher.publish(info, "ci-key")
        service.publisher.publish(info, "ci-key")

        handle = gateway.handles["a"]
        assert len(handle.deployments) == 1
        assert handle.applied[0] == handle.applied[1]
        statuses = [h.status for h in db.query(PublishHistory).all()]
        assert statuses == [ReleaseStatus.SUCCESS, ReleaseStatus.SUCCESS]
        assert db.query(PublishStatus).filter_by(resource_id=seed.web.id, cluster="a").count() == 1

    def test_status_upsert_failure_is_surfaced(self, service, db, gateway, info, monkeypatch):
        def broken_upsert(*args, **kwargs):
            raise OperationalError("UPDATE publish_status", {}, Exception("database is locked"))

        monkeypatch.setattr(service.publisher.status_repository, "upsert", broken_upsert)

        with pytest.raises(StatusSyncError):
            service.publisher.publish(info, "ci-key")

        # Le workload est bien parti, l'historique le dit
        assert ("team-prod", "web") in gateway.handles["a"].deployments
        assert db.query(PublishHistory).one().status == ReleaseStatus.SUCCESS

    def test_history_write_failure_does_not_block(self, service, db, seed, info, monkeypatch):
        def broken_add(history):
            raise OperationalError("INSERT INTO publish_history", {}, Exception("disk full"))

        monkeypatch.setattr(service.publisher.history_repository, "add", broken_add)

        service.publisher.publish(info, "ci-key")

        assert status_of(db, seed, "a").template_id == 5
