from sqlalchemy.orm import Session
from app.repositories.base_repository import BaseRepository
from app.models.deployment_template import DeploymentTemplate


class DeploymentTemplateRepository(BaseRepository[DeploymentTemplate]):
    def __init__(self, db: Session):
        super().__init__(DeploymentTemplate, db)

    def add(self, deployment_id: int, template: str, description: str, user: str) -> int:
        """Insère toujours une nouvelle version et retourne son id"""
        tpl = self.create({
            "deployment_id": deployment_id,
            "template": template,
            "description": description,
            "user": user,
        })
        return tpl.id
