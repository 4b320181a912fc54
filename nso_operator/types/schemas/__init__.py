from .container_template import (
    ConfigMapKeySelectorSchema,
    SecretKeySelectorSchema,
    ObjectFieldSelectorSchema,
    ContainerEnvVarSourceSchema,
    ContainerEnvVarSchema,
)
from .service_port import ServicePortSchema
from .nso_spec import AdminCredentialsSchema, NSOSpecSchema
from .packagebundle_spec import (
    AccessCredentialsSchema,
    PackageSourceSchema,
    PackageBundleSpecSchema,
)
from .packagebundle_status import PackageBundleStatusSchema

__all__ = [
    "ConfigMapKeySelectorSchema",
    "SecretKeySelectorSchema",
    "ObjectFieldSelectorSchema",
    "ContainerEnvVarSourceSchema",
    "ContainerEnvVarSchema",
    "ServicePortSchema",
    "AdminCredentialsSchema",
    "NSOSpecSchema",
    "AccessCredentialsSchema",
    "PackageSourceSchema",
    "PackageBundleSpecSchema",
    "PackageBundleStatusSchema",
]
