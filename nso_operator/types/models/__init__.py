from .container_template import (
    ConfigMapKeySelector,
    SecretKeySelector,
    ObjectFieldSelector,
    ContainerEnvVarSource,
    ContainerEnvVar,
)
from .service_port import ServicePort
from .nso_spec import AdminCredentials, NSOSpec
from .nso_resources import NSOResources
from .packagebundle_spec import (
    OriginType,
    AccessCredentials,
    PackageSource,
    PackageBundleSpec,
)
from .packagebundle_status import PackageBundlePhase, PackageBundleStatus
from .packagebundle_resources import PackageBundleResources
from .reconcile import ReconcileRequest, ReconcileResult

__all__ = [
    "ConfigMapKeySelector",
    "SecretKeySelector",
    "ObjectFieldSelector",
    "ContainerEnvVarSource",
    "ContainerEnvVar",
    "ServicePort",
    "AdminCredentials",
    "NSOSpec",
    "NSOResources",
    "OriginType",
    "AccessCredentials",
    "PackageSource",
    "PackageBundleSpec",
    "PackageBundlePhase",
    "PackageBundleStatus",
    "PackageBundleResources",
    "ReconcileRequest",
    "ReconcileResult",
]
