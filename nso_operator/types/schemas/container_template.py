from marshmallow import fields
from nso_operator.types.base import BaseSchema
from nso_operator.types.models import (
    ContainerEnvVar,
    ContainerEnvVarSource,
    ConfigMapKeySelector,
    SecretKeySelector,
    ObjectFieldSelector,
)


class ConfigMapKeySelectorSchema(BaseSchema):
    """Schema for ConfigMap Key Selector."""

    __model__ = ConfigMapKeySelector
    key = fields.Str(
        data_key="key",
        required=True,
        allow_none=False,
    )
    name = fields.Str(
        data_key="name",
        required=True,
        allow_none=False,
    )
    optional = fields.Bool(
        data_key="optional",
        required=False,
        allow_none=True,
        load_default=None,
    )


class SecretKeySelectorSchema(BaseSchema):
    """Schema for Secret Key Selector."""

    __model__ = SecretKeySelector
    key = fields.Str(
        data_key="key",
        required=True,
        allow_none=False,
    )
    name = fields.Str(
        data_key="name",
        required=True,
        allow_none=False,
    )
    optional = fields.Bool(
        data_key="optional",
        required=False,
        allow_none=True,
        load_default=None,
    )


class ObjectFieldSelectorSchema(BaseSchema):
    __model__ = ObjectFieldSelector
    field_path = fields.Str(
        data_key="fieldPath",
        required=True,
        allow_none=False,
    )
    api_version = fields.Str(
        data_key="apiVersion",
        required=False,
        allow_none=True,
        load_default=None,
    )


class ContainerEnvVarSourceSchema(BaseSchema):
    """Schema for Container Environment Variable Source."""

    __model__ = ContainerEnvVarSource
    config_map_key_ref = fields.Nested(
        ConfigMapKeySelectorSchema(),
        data_key="configMapKeyRef",
        required=False,
        allow_none=True,
        load_default=None,
    )
    secret_key_ref = fields.Nested(
        SecretKeySelectorSchema(),
        data_key="secretKeyRef",
        required=False,
        allow_none=True,
        load_default=None,
    )
    field_ref = fields.Nested(
        ObjectFieldSelectorSchema(),
        data_key="fieldRef",
        required=False,
        allow_none=True,
        load_default=None,
    )


class ContainerEnvVarSchema(BaseSchema):
    """Schema for Container Environment Variables."""

    __model__ = ContainerEnvVar
    name = fields.Str(
        data_key="name",
        required=True,
        allow_none=False,
    )
    value = fields.Str(
        data_key="value",
        required=False,
        allow_none=True,
        load_default=None,
    )
    value_from = fields.Nested(
        ContainerEnvVarSourceSchema(),
        data_key="valueFrom",
        required=False,
        allow_none=True,
        load_default=None,
    )
