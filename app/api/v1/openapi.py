from fastapi import APIRouter, Depends
from typing import List

from app.api.schemas.openapi import (
    DeploymentStatusResponse, EnvelopeResponse, UpgradeData, PublishHistoryResponse
)
from app.services.deployment_service import DeploymentService
from app.dependencies import get_deployment_service, get_operator

router = APIRouter(prefix="/openapi", tags=["openapi"])


@router.get("/get_deployment_status", response_model=DeploymentStatusResponse)
def get_deployment_status(
        deployment: str,
        namespace: str,
        cluster: str,
        deployment_service: DeploymentService = Depends(get_deployment_service)
):
    """Etat d'un déploiement tel qu'il tourne dans le cluster (healthz inclus)"""
    status = deployment_service.get_status(deployment, namespace, cluster)
    return DeploymentStatusResponse(status=status)


@router.get("/upgrade_deployment", response_model=EnvelopeResponse)
def upgrade_deployment(
        deployment: str,
        namespace: str,
        cluster: str,
        template_id: int = 0,
        publish: bool = True,
        description: str = "",
        images: str = "",
        deployment_service: DeploymentService = Depends(get_deployment_service),
        operator: str = Depends(get_operator)
):
    """Met à jour les images d'un déploiement sur un ou plusieurs clusters (séparés par des virgules).

    Sans template_id, le template en ligne de chaque cluster est repris, les images
    sont remplacées et les clusters partageant un template partagent la nouvelle
    version. Avec template_id et publish=true, ce template est publié tel quel.
    """
    result = deployment_service.upgrade(
        deployment=deployment,
        namespace=namespace,
        cluster=cluster,
        user=operator,
        template_id=template_id,
        publish=publish,
        images=images,
        description=description
    )
    return EnvelopeResponse(
        errors=result.errors,
        data=UpgradeData(templates=result.templates, published=result.published)
    )


@router.get("/scale_deployment", response_model=EnvelopeResponse)
def scale_deployment(
        deployment: str,
        namespace: str,
        cluster: str,
        replicas: int,
        description: str = "",
        deployment_service: DeploymentService = Depends(get_deployment_service),
        operator: str = Depends(get_operator)
):
    """Scale horizontal d'un déploiement, replicas dans (0, 32]"""
    deployment_service.scale(deployment, namespace, cluster, replicas, operator, description)
    return EnvelopeResponse()


@router.get("/publish_history", response_model=List[PublishHistoryResponse])
def get_publish_history(
        deployment: str,
        limit: int = 100,
        deployment_service: DeploymentService = Depends(get_deployment_service)
):
    """Historique des publications d'un déploiement, du plus récent au plus ancien"""
    return [h.to_dict() for h in deployment_service.list_history(deployment, limit)]
