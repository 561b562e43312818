import logging
from typing import List
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from app.repositories.base_repository import BaseRepository
from app.models.publish import PublishStatus, PublishHistory, PublishType
from app.core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class PublishStatusRepository(BaseRepository[PublishStatus]):
    def __init__(self, db: Session):
        super().__init__(PublishStatus, db)

    def get_by_cluster(self, publish_type: PublishType, resource_id: int, cluster: str):
        try:
            return (self.db.query(PublishStatus)
                    .filter(PublishStatus.type == publish_type)
                    .filter(PublishStatus.resource_id == resource_id)
                    .filter(PublishStatus.cluster == cluster)
                    .first())
        except SQLAlchemyError as e:
            self.db.rollback()
            raise e

    def get_by_cluster_or_raise(self, publish_type: PublishType, resource_id: int, cluster: str) -> PublishStatus:
        status = self.get_by_cluster(publish_type, resource_id, cluster)
        if status is None:
            raise NotFoundError(f"Failed to get publish status by cluster: no publish on {cluster}")
        return status

    def upsert(self, publish_type: PublishType, resource_id: int, template_id: int, cluster: str) -> PublishStatus:
        """Crée ou met à jour le pointeur 'template en ligne' d'un cluster"""
        status = self.get_by_cluster(publish_type, resource_id, cluster)
        if status is None:
            status = PublishStatus(type=publish_type, resource_id=resource_id, cluster=cluster)
        status.template_id = template_id
        return self.save(status)


class PublishHistoryRepository(BaseRepository[PublishHistory]):
    def __init__(self, db: Session):
        super().__init__(PublishHistory, db)

    def add(self, history: PublishHistory) -> PublishHistory:
        return self.save(history)

    def list_by_resource(self, publish_type: PublishType, resource_id: int, limit: int = 100) -> List[PublishHistory]:
        """Historique d'une ressource, du plus récent au plus ancien"""
        return (self.db.query(PublishHistory)
                .filter(PublishHistory.type == publish_type)
                .filter(PublishHistory.resource_id == resource_id)
                .order_by(PublishHistory.id.desc())
                .limit(limit)
                .all())
