from sqlalchemy.orm import Session
from app.repositories.base_repository import BaseRepository
from app.models.cluster import Cluster


class ClusterRepository(BaseRepository[Cluster]):
    def __init__(self, db: Session):
        super().__init__(Cluster, db)
