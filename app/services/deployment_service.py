from dataclasses import dataclass, field
from typing import List, Dict, Any
import logging

from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.core.exceptions import (
    PublishError, InvalidArgumentError, NotFoundError, UnavailableError, ApplyFailedError
)
from app.external.cluster_gateway import ClusterGateway
from app.models.publish import PublishHistory, PublishType, ReleaseStatus
from app.repositories.deployment_repository import DeploymentRepository
from app.repositories.namespace_repository import NamespaceRepository
from app.repositories.publish_repository import PublishHistoryRepository
from app.services import workload as wl
from app.services.publisher import Publisher
from app.services.resolver import OnlineStateResolver
from app.services.template_merge import BatchErrors, TemplateMerger, parse_image_overrides

logger = logging.getLogger(__name__)


@dataclass
class UpgradeResult:
    errors: List[str] = field(default_factory=list)
    # cluster -> id du nouveau template
    templates: Dict[str, int] = field(default_factory=dict)
    published: List[str] = field(default_factory=list)


def _cluster_error(e: Exception, action: str, cluster: str) -> PublishError:
    if getattr(e, "status", None) == 404:
        return NotFoundError(f"Failed to {action} on {cluster}: not found")
    return UnavailableError(f"Failed to {action} on {cluster}: {e}")


class DeploymentService:
    def __init__(
            self,
            resolver: OnlineStateResolver,
            merger: TemplateMerger,
            publisher: Publisher,
            gateway: ClusterGateway,
            deployment_repository: DeploymentRepository,
            namespace_repository: NamespaceRepository,
            history_repository: PublishHistoryRepository
    ):
        self.resolver = resolver
        self.merger = merger
        self.publisher = publisher
        self.gateway = gateway
        self.deployment_repository = deployment_repository
        self.namespace_repository = namespace_repository
        self.history_repository = history_repository

    def _kube_namespace(self, namespace: str) -> str:
        ns = self.namespace_repository.get_by_field("name", namespace)
        if ns is None:
            raise InvalidArgumentError(f"Failed get namespace by name({namespace})")
        return self.namespace_repository.kube_namespace(ns)

    def get_status(self, deployment: str, namespace: str, cluster: str) -> Dict[str, Any]:
        """État des pods d'un déploiement sur un cluster, lu directement dans le cluster"""
        if not deployment or not namespace or not cluster:
            raise InvalidArgumentError("deployment, namespace and cluster parameters are required")

        kube_namespace = self._kube_namespace(namespace)
        handle = self.gateway.resolve(cluster)

        try:
            detail = handle.get_deployment_detail(deployment, kube_namespace)
            pods = handle.get_pods_by_deployment(kube_namespace, deployment)
        except Exception as e:
            logger.error(f"Echec de la lecture de l'état de {deployment} sur {cluster}: {e}")
            raise _cluster_error(e, "get k8s deployment state", cluster) from e

        pods_state = detail["pods_state"]
        healthz = pods_state["current"] == pods_state["desired"]
        for pod in pods:
            if not pod["pod_ip"] or pod["state"] != "Running":
                healthz = False

        return {"pods": pods, "deployment": detail, "healthz": healthz}

    def upgrade(
            self,
            deployment: str,
            namespace: str,
            cluster: str,
            user: str,
            template_id: int = 0,
            publish: bool = True,
            images: str = "",
            description: str = ""
    ) -> UpgradeResult:
        """Crée (et publie) une nouvelle version de template sur un ou plusieurs clusters"""
        clusters = [c.strip() for c in (cluster or "").split(",") if c.strip()]
        if not clusters:
            raise InvalidArgumentError("Invalid cluster parameter!")

        errors = BatchErrors()
        result = UpgradeResult(errors=errors.messages)

        # Publication d'un template précis: pas de fusion d'images
        if template_id and publish:
            for name in clusters:
                try:
                    info = self.resolver.resolve(deployment, namespace, name, template_id)
                    wl.prepare_for_deploy(info.deployment_object, info.deployment.name,
                                          info.deployment.app.name, info.namespace.name)
                except PublishError as e:
                    errors.add(f"Failed to get online deployment on {name}: {e.message}")
                    continue
                try:
                    self.deployment_repository.set_template(info.deployment, template_id)
                except SQLAlchemyError as e:
                    logger.error(f"Echec de la mise à jour du déploiement {info.deployment.id}: {e}")
                    errors.add(f"Failed to update deployment by id on {name}!")
                    continue
                result.templates[name] = template_id
                self._publish_one(info, user, errors, result)
            return result

        overrides = parse_image_overrides(images)
        groups = self.merger.merge(deployment, namespace, clusters, overrides, user, description, errors)
        for group in groups:
            for info in group.members:
                result.templates[info.cluster.name] = group.template.id

        if not publish or errors:
            return result

        for group in groups:
            for info in group.members:
                self._publish_one(info, user, errors, result)
        return result

    def _publish_one(self, info, user: str, errors: BatchErrors, result: UpgradeResult) -> None:
        try:
            self.publisher.publish(info, user)
        except PublishError as e:
            errors.add(f"Failed to publish deployment on {info.cluster.name}: {e.message}")
            return
        result.published.append(info.cluster.name)

    def scale(
            self,
            deployment: str,
            namespace: str,
            cluster: str,
            replicas: int,
            user: str,
            description: str = ""
    ) -> None:
        """Change le nombre de replicas sans toucher au template"""
        if replicas > settings.MAX_REPLICAS or replicas <= 0:
            raise InvalidArgumentError(
                f"Invalid replicas parameter: {replicas} not in range (0,{settings.MAX_REPLICAS}]"
            )
        if not namespace:
            raise InvalidArgumentError("Invalid namespace parameter")
        if not deployment:
            raise InvalidArgumentError("Invalid deployment parameter")
        if not cluster:
            raise InvalidArgumentError("Invalid cluster parameter")

        kube_namespace = self._kube_namespace(namespace)
        record = self.deployment_repository.get_by_field("name", deployment)
        if record is None:
            raise InvalidArgumentError(f"Failed get deployment by name({deployment})")
        self.deployment_repository.parse_meta_data(record)

        handle = self.gateway.resolve(cluster)
        try:
            deploy_obj = handle.get_deployment(deployment, kube_namespace)
        except Exception as e:
            logger.error(f"Echec de la lecture du deployment {deployment} sur {cluster}: {e}")
            raise _cluster_error(e, "get deployment from k8s client", cluster) from e

        original = deploy_obj.get("spec", {}).get("replicas")
        history = PublishHistory(
            type=PublishType.DEPLOYMENT,
            resource_id=record.id,
            resource_name=deploy_obj["metadata"]["name"],
            template_id=0,
            cluster=cluster,
            user=user,
            message=f"[APIKey][Original Copies: {original}][Target Copies: {replicas}] {description}"
        )
        with self.publisher.pending_history(history):
            wl.set_replicas(deploy_obj, replicas)
            try:
                handle.update_deployment(deploy_obj)
            except Exception as e:
                history.status = ReleaseStatus.FAILURE
                history.message = str(e)
                logger.error(f"Echec du scale de {deployment} sur {cluster}: {e}")
                raise ApplyFailedError(f"Failed to upgrade from k8s client on {cluster}: {e}") from e
            history.status = ReleaseStatus.SUCCESS

        self.deployment_repository.update_replicas(record, cluster, replicas)
        logger.info(f"{deployment} sur {cluster}: {original} -> {replicas} replicas")

    def list_history(self, deployment: str, limit: int = 100) -> List[PublishHistory]:
        record = self.deployment_repository.get_by_name_or_raise(deployment)
        return self.history_repository.list_by_resource(PublishType.DEPLOYMENT, record.id, limit)
