from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from .base import BaseModel


class App(BaseModel):
    __tablename__ = "apps"

    name = Column(String(128), nullable=False)
    namespace_id = Column(Integer, ForeignKey("namespaces.id"), nullable=False)

    namespace = relationship("Namespace", back_populates="apps")
    deployments = relationship("Deployment", back_populates="app")
