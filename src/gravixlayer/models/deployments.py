from typing import Optional

from pydantic import BaseModel, ConfigDict


class Deployment(BaseModel):
    model_config = ConfigDict(extra="allow", protected_namespaces=())

    deployment_id: str
    deployment_name: str
    model_name: str = ""
    status: str = ""
    user_email: Optional[str] = None
    created_at: Optional[str] = None
    gpu_model: Optional[str] = None
    gpu_count: int = 1
    min_replicas: int = 1
    max_replicas: Optional[int] = None
    hw_type: Optional[str] = None
    hardware: Optional[str] = None


class DeploymentResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    deployment_id: str = ""
    message: str = ""
    status: str = ""
