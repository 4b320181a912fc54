from typing import Dict, List, Optional
from nso_operator.types.base import BaseModel
from nso_operator.types.models.service_port import ServicePort
from nso_operator.types.models.container_template import ContainerEnvVar


class AdminCredentials(BaseModel):
    """NSO admin user. The password is read from the `password` key of a secret."""

    username: str
    password_secret_ref: str


class NSOSpec(BaseModel):
    """NSO CRD spec"""

    image: str
    service_name: str
    replicas: int
    label_selector: Dict[str, str]
    ports: List[ServicePort]
    nso_config_ref: str
    admin_credentials: AdminCredentials
    env: Optional[List[ContainerEnvVar]]
