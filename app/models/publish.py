import enum
from sqlalchemy import Column, String, Integer, Text, Enum, UniqueConstraint
from .base import BaseModel


class PublishType(str, enum.Enum):
    DEPLOYMENT = "deployment"


class ReleaseStatus(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class PublishStatus(BaseModel):
    """Template actuellement en ligne pour une ressource sur un cluster"""
    __tablename__ = "publish_status"
    __table_args__ = (
        UniqueConstraint("type", "resource_id", "cluster", name="uq_publish_status_resource_cluster"),
    )

    type = Column(Enum(PublishType), default=PublishType.DEPLOYMENT, nullable=False)
    resource_id = Column(Integer, nullable=False, index=True)
    template_id = Column(Integer, nullable=False)
    cluster = Column(String(128), nullable=False)


class PublishHistory(BaseModel):
    """Journal append-only des tentatives de publication"""
    __tablename__ = "publish_history"

    type = Column(Enum(PublishType), default=PublishType.DEPLOYMENT, nullable=False)
    resource_id = Column(Integer, nullable=False, index=True)
    resource_name = Column(String(128), nullable=False)
    template_id = Column(Integer, default=0, nullable=False)
    cluster = Column(String(128), nullable=False)
    user = Column(String(128), default="")
    message = Column(Text, default="")
    status = Column(Enum(ReleaseStatus), nullable=True)

    def to_dict(self):
        """Convertit le modèle en dictionnaire"""
        return {
            "id": self.id,
            "type": self.type.value if self.type else None,
            "resource_id": self.resource_id,
            "resource_name": self.resource_name,
            "template_id": self.template_id,
            "cluster": self.cluster,
            "user": self.user,
            "message": self.message,
            "status": self.status.value if self.status else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
