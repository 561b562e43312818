import logging
from dataclasses import dataclass
from typing import Dict, Any

from app.core.exceptions import InvalidArgumentError, PermissionDeniedError, MalformedError
from app.models.cluster import Cluster
from app.models.deployment import Deployment
from app.models.deployment_template import DeploymentTemplate
from app.models.namespace import Namespace
from app.models.publish import PublishType
from app.repositories.cluster_repository import ClusterRepository
from app.repositories.deployment_repository import DeploymentRepository
from app.repositories.namespace_repository import NamespaceRepository, AppRepository
from app.repositories.publish_repository import PublishStatusRepository
from app.repositories.template_repository import DeploymentTemplateRepository
from app.services import workload as wl

logger = logging.getLogger(__name__)


@dataclass
class DeploymentInfo:
    """Jeu de travail d'un cluster, construit à chaque appel et jamais persisté"""
    deployment: Deployment
    template: DeploymentTemplate
    deployment_object: Dict[str, Any]
    cluster: Cluster
    namespace: Namespace


class OnlineStateResolver:
    """Reconstitue depuis la base ce qui fait autorité pour un (déploiement, cluster)"""

    def __init__(
            self,
            deployment_repository: DeploymentRepository,
            template_repository: DeploymentTemplateRepository,
            status_repository: PublishStatusRepository,
            app_repository: AppRepository,
            namespace_repository: NamespaceRepository,
            cluster_repository: ClusterRepository
    ):
        self.deployment_repository = deployment_repository
        self.template_repository = template_repository
        self.status_repository = status_repository
        self.app_repository = app_repository
        self.namespace_repository = namespace_repository
        self.cluster_repository = cluster_repository

    def resolve(self, deployment: str, namespace: str, cluster: str, template_id: int = 0) -> DeploymentInfo:
        if not deployment:
            raise InvalidArgumentError("Invalid deployment parameter!")
        if not namespace:
            raise InvalidArgumentError("Invalid namespace parameter!")
        if not cluster:
            raise InvalidArgumentError("Invalid cluster parameter!")

        record = self.deployment_repository.get_by_name_or_raise(deployment)

        if template_id:
            template = self.template_repository.get_by_id_or_raise(template_id)
            if template.deployment_id != record.id:
                raise PermissionDeniedError("Invalid template id parameter(no permission)!")
        else:
            status = self.status_repository.get_by_cluster_or_raise(PublishType.DEPLOYMENT, record.id, cluster)
            template = self.template_repository.get_by_id_or_raise(status.template_id)
            if template.deployment_id != record.id:
                raise MalformedError(
                    f"Publish status of {deployment} on {cluster} references template {template.id} "
                    f"of another deployment"
                )

        deployment_object = wl.parse_template(template.template)

        app = self.app_repository.get_by_id_or_raise(record.app_id)
        owner_namespace = app.namespace
        kube_namespace = self.namespace_repository.kube_namespace(owner_namespace)
        if namespace != owner_namespace.name:
            raise InvalidArgumentError("Invalid namespace parameter(should be the namespace of the application)")
        wl.set_namespace(deployment_object, kube_namespace)

        wl.set_replicas(deployment_object, self.deployment_repository.replicas_for(record, cluster))

        cluster_obj = self.cluster_repository.get_by_name_or_raise(cluster)

        logger.debug(f"Déploiement {deployment} résolu sur {cluster} avec le template {template.id}")
        return DeploymentInfo(
            deployment=record,
            template=template,
            deployment_object=deployment_object,
            cluster=cluster_obj,
            namespace=owner_namespace
        )
