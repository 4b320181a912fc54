from typing import Optional, Union
from nso_operator.types.base import BaseModel


class ServicePort(BaseModel):
    """A port exposed by the NSO headless service."""

    name: Optional[str]
    port: int
    target_port: Optional[Union[int, str]]
    protocol: Optional[str]
    app_protocol: Optional[str]
    node_port: Optional[int]
