import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import ApplyFailedError, StatusSyncError
from app.external.cluster_gateway import ClusterGateway
from app.models.publish import PublishHistory, PublishType, ReleaseStatus
from app.repositories.publish_repository import PublishStatusRepository, PublishHistoryRepository
from app.services.resolver import DeploymentInfo

logger = logging.getLogger(__name__)


class Publisher:
    """Pousse un deployment résolu sur son cluster et enregistre le résultat"""

    def __init__(
            self,
            gateway: ClusterGateway,
            status_repository: PublishStatusRepository,
            history_repository: PublishHistoryRepository
    ):
        self.gateway = gateway
        self.status_repository = status_repository
        self.history_repository = history_repository

    @contextmanager
    def pending_history(self, history: PublishHistory) -> Iterator[PublishHistory]:
        """Garantit l'écriture de l'historique à la sortie, succès ou échec"""
        try:
            yield history
        finally:
            try:
                self.history_repository.add(history)
            except SQLAlchemyError as e:
                logger.error(
                    f"Echec de l'écriture de l'historique ({history.resource_name} sur {history.cluster}): {e}"
                )

    def publish(self, info: DeploymentInfo, user: str) -> None:
        cluster = info.cluster.name
        handle = self.gateway.resolve(cluster)

        history = PublishHistory(
            type=PublishType.DEPLOYMENT,
            resource_id=info.deployment.id,
            resource_name=info.deployment_object.get("metadata", {}).get("name") or info.deployment.name,
            template_id=info.template.id,
            cluster=cluster,
            user=user,
            message=info.template.description
        )
        with self.pending_history(history):
            try:
                handle.create_or_update_deployment(info.deployment_object)
            except Exception as e:
                history.status = ReleaseStatus.FAILURE
                history.message = str(e)
                raise ApplyFailedError(f"Failed to create or update deployment by k8s client: {e}") from e

            history.status = ReleaseStatus.SUCCESS
            logger.info(f"Template {info.template.id} de {info.deployment.name} publié sur {cluster}")

            try:
                self.status_repository.upsert(PublishType.DEPLOYMENT, info.deployment.id, info.template.id, cluster)
            except SQLAlchemyError as e:
                logger.warning(
                    f"Deployment {info.deployment.name} appliqué sur {cluster} mais statut non enregistré: {e}"
                )
                raise StatusSyncError(
                    f"Deployment applied on {cluster} but publish status was not recorded: {e}"
                ) from e
