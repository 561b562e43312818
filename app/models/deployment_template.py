from sqlalchemy import Column, String, Integer, ForeignKey, Text
from sqlalchemy.orm import relationship
from .base import BaseModel


class DeploymentTemplate(BaseModel):
    """Version immuable d'un template: toute modification crée une nouvelle ligne"""
    __tablename__ = "deployment_templates"

    deployment_id = Column(Integer, ForeignKey("deployments.id"), nullable=False, index=True)

    # Objet deployment kubernetes sérialisé en JSON (sans namespace ni replicas)
    template = Column(Text, nullable=False)
    description = Column(Text, default="")
    user = Column(String(128), default="")

    deployment = relationship("Deployment", back_populates="templates")

    def __repr__(self):
        return f"<DeploymentTemplate(id={self.id}, deployment_id={self.deployment_id})>"
