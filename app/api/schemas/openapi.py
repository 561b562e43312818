from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional, Dict, Any


class ContainerStatus(BaseModel):
    name: str
    restart_count: int


class Pod(BaseModel):
    name: str
    namespace: str
    state: Optional[str]
    pod_ip: str
    node_name: Optional[str]
    start_time: Optional[datetime]
    labels: Dict[str, str]
    container_status: List[ContainerStatus]


class PodInfo(BaseModel):
    current: int
    desired: int
    running: int
    pending: int
    failed: int
    succeeded: int
    warnings: List[str]


class DeploymentState(BaseModel):
    name: str
    namespace: str
    labels: Dict[str, str]
    create_time: Optional[datetime]
    pods_state: PodInfo


class DeploymentStatus(BaseModel):
    pods: List[Pod]
    deployment: DeploymentState
    healthz: bool


class DeploymentStatusResponse(BaseModel):
    code: int = 200
    errors: List[str] = []
    status: DeploymentStatus


class UpgradeData(BaseModel):
    """Clusters publiés et template retenu par cluster"""
    templates: Dict[str, int]
    published: List[str]


class EnvelopeResponse(BaseModel):
    """Réponse standard: les erreurs partielles sont dans 'errors' avec un code 200"""
    code: int = 200
    errors: List[str] = []
    data: Optional[Any] = None


class PublishHistoryResponse(BaseModel):
    id: int
    type: str
    resource_id: int
    resource_name: str
    template_id: int
    cluster: str
    user: Optional[str]
    message: Optional[str]
    status: Optional[str]
    created_at: Optional[str]
