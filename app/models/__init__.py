from .base import BaseModel
from .cluster import Cluster
from .namespace import Namespace
from .app import App
from .deployment import Deployment
from .deployment_template import DeploymentTemplate
from .publish import PublishStatus, PublishHistory, PublishType, ReleaseStatus

__all__ = [
    "BaseModel", "Cluster", "Namespace", "App", "Deployment", "DeploymentTemplate",
    "PublishStatus", "PublishHistory", "PublishType", "ReleaseStatus",
]
