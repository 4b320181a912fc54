from .base import BaseResource
from .phase import derive_phase
from .nso import NSO
from .packagebundle import PackageBundle

__all__ = [
    "BaseResource",
    "derive_phase",
    "NSO",
    "PackageBundle",
]
