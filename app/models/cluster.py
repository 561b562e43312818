from sqlalchemy import Column, String, Boolean, Text
from .base import BaseModel


class Cluster(BaseModel):
    __tablename__ = "clusters"

    name = Column(String(128), unique=True, index=True, nullable=False)
    description = Column(Text)

    # {"kube_config": "<kubeconfig yaml>", "context": "<kube context>"}
    meta_data = Column(Text, default="{}")

    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Cluster(name='{self.name}', active={self.is_active})>"
