from enum import Enum
from typing import Optional
from nso_operator.types.base import BaseModel


class PackageBundlePhase(Enum):
    PENDING = "Pending"
    CONTAINER_CREATING = "ContainerCreating"
    DOWNLOADING = "Downloading"
    DOWNLOADED = "Downloaded"
    FAILED_TO_DOWNLOAD = "FailedToDownload"

    @property
    def is_terminal(self) -> bool:
        return self in (
            PackageBundlePhase.DOWNLOADED,
            PackageBundlePhase.FAILED_TO_DOWNLOAD,
        )

    @property
    def is_in_progress(self) -> bool:
        return self in (
            PackageBundlePhase.CONTAINER_CREATING,
            PackageBundlePhase.DOWNLOADING,
        )


class PackageBundleStatus(BaseModel):
    """Observed state of a PackageBundle, written only by the operator."""

    phase: Optional[PackageBundlePhase]
    message: Optional[str]
    job_name: Optional[str]
    last_transition_time: Optional[str]
