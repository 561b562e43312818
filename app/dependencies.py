from typing import Optional
from sqlalchemy.orm import Session
from fastapi import Depends, Request

from app.config import settings
from app.core.database import get_db
from app.external.cluster_gateway import ClusterGateway
from app.repositories.cluster_repository import ClusterRepository
from app.repositories.deployment_repository import DeploymentRepository
from app.repositories.namespace_repository import NamespaceRepository, AppRepository
from app.repositories.publish_repository import PublishStatusRepository, PublishHistoryRepository
from app.repositories.template_repository import DeploymentTemplateRepository
from app.services.deployment_service import DeploymentService
from app.services.publisher import Publisher
from app.services.resolver import OnlineStateResolver
from app.services.template_merge import TemplateMerger


# === REPOSITORIES ===
def get_cluster_repository(db: Session = Depends(get_db)) -> ClusterRepository:
    """Factory pour le repository des clusters"""
    return ClusterRepository(db)


# === CLIENTS EXTERNES ===
def get_cluster_gateway(
        cluster_repo: ClusterRepository = Depends(get_cluster_repository)
) -> ClusterGateway:
    return ClusterGateway(cluster_repo)


# === SERVICES ===
def build_deployment_service(db: Session, gateway: ClusterGateway) -> DeploymentService:
    """Assemble le service de déploiement, tous les repositories partagent la session"""
    deployment_repo = DeploymentRepository(db)
    template_repo = DeploymentTemplateRepository(db)
    status_repo = PublishStatusRepository(db)
    history_repo = PublishHistoryRepository(db)
    namespace_repo = NamespaceRepository(db)

    resolver = OnlineStateResolver(
        deployment_repository=deployment_repo,
        template_repository=template_repo,
        status_repository=status_repo,
        app_repository=AppRepository(db),
        namespace_repository=namespace_repo,
        cluster_repository=ClusterRepository(db)
    )
    return DeploymentService(
        resolver=resolver,
        merger=TemplateMerger(resolver, deployment_repo, template_repo),
        publisher=Publisher(gateway, status_repo, history_repo),
        gateway=gateway,
        deployment_repository=deployment_repo,
        namespace_repository=namespace_repo,
        history_repository=history_repo
    )


def get_deployment_service(
        db: Session = Depends(get_db),
        gateway: ClusterGateway = Depends(get_cluster_gateway)
) -> DeploymentService:
    """Factory pour le service de déploiement"""
    return build_deployment_service(db, gateway)


def get_operator(request: Request) -> str:
    """Identité de l'appelant (clé d'API déjà autorisée en amont)"""
    api_key: Optional[str] = request.headers.get(settings.APIKEY_HEADER)
    return api_key or settings.DEFAULT_OPERATOR
