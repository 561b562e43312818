from sqlalchemy import Column, String, Integer, ForeignKey, Text
from sqlalchemy.orm import relationship
from .base import BaseModel


class Deployment(BaseModel):
    __tablename__ = "deployments"

    name = Column(String(128), unique=True, index=True, nullable=False)
    app_id = Column(Integer, ForeignKey("apps.id"), nullable=False)

    # Template désiré (0 tant qu'aucun n'a été adopté)
    template_id = Column(Integer, default=0, nullable=False)

    # {"replicas": {"<cluster>": <int>}, ...}
    meta_data = Column(Text, default="{}")

    app = relationship("App", back_populates="deployments")
    templates = relationship("DeploymentTemplate", back_populates="deployment")

    def __repr__(self):
        return f"<Deployment(name='{self.name}', template_id={self.template_id})>"
