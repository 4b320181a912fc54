from typing import Optional
from nso_operator.types.base import BaseModel


class ConfigMapKeySelector(BaseModel):
    key: str
    name: str
    optional: Optional[bool]


class SecretKeySelector(BaseModel):
    key: str
    name: str
    optional: Optional[bool]


class ObjectFieldSelector(BaseModel):
    field_path: str
    api_version: Optional[str]


class ContainerEnvVarSource(BaseModel):
    config_map_key_ref: Optional[ConfigMapKeySelector]
    secret_key_ref: Optional[SecretKeySelector]
    field_ref: Optional[ObjectFieldSelector]


class ContainerEnvVar(BaseModel):
    name: str
    value: Optional[str]
    value_from: Optional[ContainerEnvVarSource]
