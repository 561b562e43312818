import json
import logging
from typing import Dict, Any
from sqlalchemy.orm import Session
from app.repositories.base_repository import BaseRepository
from app.models.deployment import Deployment
from app.core.exceptions import MalformedError

logger = logging.getLogger(__name__)


class DeploymentRepository(BaseRepository[Deployment]):
    def __init__(self, db: Session):
        super().__init__(Deployment, db)

    def parse_meta_data(self, deployment: Deployment) -> Dict[str, Any]:
        """Décode le blob de métadonnées du déploiement"""
        try:
            meta = json.loads(deployment.meta_data or "{}")
        except ValueError as e:
            raise MalformedError(f"Failed to parse deployment resource metadata: {e}")
        if not isinstance(meta, dict):
            raise MalformedError("Failed to parse deployment resource metadata: not an object")
        return meta

    def replicas_for(self, deployment: Deployment, cluster: str) -> int:
        """Nombre de replicas désiré pour un cluster (0 si absent)"""
        replicas = self.parse_meta_data(deployment).get("replicas") or {}
        return int(replicas.get(cluster, 0))

    def update_replicas(self, deployment: Deployment, cluster: str, replicas: int) -> Deployment:
        """Met à jour le nombre de replicas désiré pour un cluster"""
        meta = self.parse_meta_data(deployment)
        meta.setdefault("replicas", {})[cluster] = replicas
        deployment.meta_data = json.dumps(meta)
        logger.info(f"Replicas de {deployment.name} sur {cluster} -> {replicas}")
        return self.save(deployment)

    def set_template(self, deployment: Deployment, template_id: int) -> Deployment:
        """Fait pointer le déploiement vers un nouveau template désiré"""
        deployment.template_id = template_id
        return self.save(deployment)
