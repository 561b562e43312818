import json
import logging
from sqlalchemy.orm import Session
from app.repositories.base_repository import BaseRepository
from app.models.namespace import Namespace
from app.models.app import App
from app.core.exceptions import MalformedError

logger = logging.getLogger(__name__)


class NamespaceRepository(BaseRepository[Namespace]):
    def __init__(self, db: Session):
        super().__init__(Namespace, db)

    def kube_namespace(self, namespace: Namespace) -> str:
        """Retourne le namespace kubernetes réel porté par les métadonnées"""
        try:
            meta = json.loads(namespace.meta_data or "{}")
        except ValueError as e:
            logger.error(f"Métadonnées invalides pour le namespace {namespace.name}: {e}")
            raise MalformedError(f"Failed to parse namespace metadata: {e}")
        kube_ns = meta.get("namespace") if isinstance(meta, dict) else None
        if not kube_ns:
            raise MalformedError(f"Namespace {namespace.name} metadata has no kubernetes namespace")
        return kube_ns


class AppRepository(BaseRepository[App]):
    def __init__(self, db: Session):
        super().__init__(App, db)
