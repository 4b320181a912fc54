from typing import Optional, Tuple
from nso_operator.types.models import PackageBundlePhase
from kubernetes_asyncio.client import V1Job

JOB_COMPLETE = "Complete"
JOB_FAILED = "Failed"

MSG_JOB_NOT_FOUND = "Job not found"
MSG_DOWNLOADED = "Package download completed successfully"
MSG_DOWNLOAD_FAILED = "Package download failed"
MSG_DOWNLOADING = "Package download in progress"
MSG_CONTAINER_CREATING = "Job is creating containers"
MSG_UNKNOWN = "Job status unknown"


def _true_condition(job: V1Job, condition_type: str):
    for condition in job.status.conditions or []:
        if condition.type == condition_type and condition.status == "True":
            return condition
    return None


def derive_phase(job: Optional[V1Job]) -> Tuple[PackageBundlePhase, str]:
    """Map the observed state of a download Job to a PackageBundle phase and message.

    A true Complete condition wins over a true Failed condition wherever each
    appears in the condition list. A Job that matches no rule maps to Pending,
    which is not terminal.
    """
    if job is None:
        return PackageBundlePhase.PENDING, MSG_JOB_NOT_FOUND
    if job.status is None:
        return PackageBundlePhase.CONTAINER_CREATING, MSG_CONTAINER_CREATING

    if _true_condition(job, JOB_COMPLETE):
        return PackageBundlePhase.DOWNLOADED, MSG_DOWNLOADED
    failed = _true_condition(job, JOB_FAILED)
    if failed:
        return PackageBundlePhase.FAILED_TO_DOWNLOAD, failed.message or MSG_DOWNLOAD_FAILED

    active = job.status.active or 0
    succeeded = job.status.succeeded or 0
    failures = job.status.failed or 0
    if active > 0:
        return PackageBundlePhase.DOWNLOADING, MSG_DOWNLOADING
    if succeeded == 0 and failures == 0:
        return PackageBundlePhase.CONTAINER_CREATING, MSG_CONTAINER_CREATING
    return PackageBundlePhase.PENDING, MSG_UNKNOWN
