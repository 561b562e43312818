from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship
from .base import BaseModel


class Namespace(BaseModel):
    __tablename__ = "namespaces"

    name = Column(String(128), unique=True, index=True, nullable=False)

    # {"namespace": "<namespace kubernetes>"}
    meta_data = Column(Text, default="{}")

    apps = relationship("App", back_populates="namespace")

    def __repr__(self):
        return f"<Namespace(name='{self.name}')>"
