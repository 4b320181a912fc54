import os
from typing import Any

_TRUE, _FALSE = {"True", "true", "yes", "1"}, {"False", "false", "no", "0"}


def _getenv(name: str, *default: Any) -> Any:
    try:
        v = os.environ[name]
        if v in _TRUE:
            return True
        elif v in _FALSE:
            return False
        else:
            return v
    except KeyError:
        pass
    if default:
        return default[0]
    raise KeyError(name)


# ------------------------------------------------
# ---- Defaults and environment variables ----
# ------------------------------------------------

#: Seconds to wait before polling a running package download Job again
PACKAGE_POLL_INTERVAL_SECONDS = float(_getenv("PACKAGE_POLL_INTERVAL_SECONDS", 30))

#: Seconds to wait before re-running a reconcile that just created a child resource
REQUEUE_DELAY_SECONDS = float(_getenv("REQUEUE_DELAY_SECONDS", 0))

#: Seconds to wait before retrying a reconcile that failed with an API error
ERROR_REQUEUE_DELAY_SECONDS = float(_getenv("ERROR_REQUEUE_DELAY_SECONDS", 30))

#: Maximum attempts when a status write hits an optimistic concurrency conflict
STATUS_UPDATE_MAX_RETRIES = int(_getenv("STATUS_UPDATE_MAX_RETRIES", 5))

#: Seconds to sleep between status write attempts after a conflict
STATUS_UPDATE_RETRY_DELAY_SECONDS = float(
    _getenv("STATUS_UPDATE_RETRY_DELAY_SECONDS", 0.01)
)

#: Container image used by the package download Job
DOWNLOADER_IMAGE = _getenv("DOWNLOADER_IMAGE", "alpine/git")

#: Storage requested for package bundles that do not declare a size
DEFAULT_STORAGE_SIZE = _getenv("DEFAULT_STORAGE_SIZE", "1Gi")

#: Number of retries before the package download Job is considered failed
DOWNLOAD_JOB_BACKOFF_LIMIT = int(_getenv("DOWNLOAD_JOB_BACKOFF_LIMIT", 3))

#: Seconds a finished package download Job is retained before cleanup
DOWNLOAD_JOB_TTL_SECONDS = int(_getenv("DOWNLOAD_JOB_TTL_SECONDS", 300))

#: Maximum number of concurrent kopf workers
WORKER_LIMIT = int(_getenv("WORKER_LIMIT", 4))


class Settings:
    """Operator settings"""

    package_poll_interval_seconds: float = PACKAGE_POLL_INTERVAL_SECONDS
    requeue_delay_seconds: float = REQUEUE_DELAY_SECONDS
    error_requeue_delay_seconds: float = ERROR_REQUEUE_DELAY_SECONDS
    status_update_max_retries: int = STATUS_UPDATE_MAX_RETRIES
    status_update_retry_delay_seconds: float = STATUS_UPDATE_RETRY_DELAY_SECONDS
    downloader_image: str = DOWNLOADER_IMAGE
    default_storage_size: str = DEFAULT_STORAGE_SIZE
    download_job_backoff_limit: int = DOWNLOAD_JOB_BACKOFF_LIMIT
    download_job_ttl_seconds: int = DOWNLOAD_JOB_TTL_SECONDS
    worker_limit: int = WORKER_LIMIT

    def __init__(
        self,
        *args,
        package_poll_interval_seconds: float = None,
        requeue_delay_seconds: float = None,
        error_requeue_delay_seconds: float = None,
        status_update_max_retries: int = None,
        status_update_retry_delay_seconds: float = None,
        downloader_image: str = None,
        default_storage_size: str = None,
        download_job_backoff_limit: int = None,
        download_job_ttl_seconds: int = None,
        worker_limit: int = None,
        **kwargs,
    ):
        if package_poll_interval_seconds is not None:
            self.package_poll_interval_seconds = package_poll_interval_seconds

        if requeue_delay_seconds is not None:
            self.requeue_delay_seconds = requeue_delay_seconds

        if error_requeue_delay_seconds is not None:
            self.error_requeue_delay_seconds = error_requeue_delay_seconds

        if status_update_max_retries is not None:
            if status_update_max_retries < 1:
                raise ValueError("status_update_max_retries must be at least 1")
            self.status_update_max_retries = status_update_max_retries

        if status_update_retry_delay_seconds is not None:
            self.status_update_retry_delay_seconds = status_update_retry_delay_seconds

        if downloader_image is not None:
            self.downloader_image = downloader_image

        if default_storage_size is not None:
            self.default_storage_size = default_storage_size

        if download_job_backoff_limit is not None:
            self.download_job_backoff_limit = download_job_backoff_limit

        if download_job_ttl_seconds is not None:
            self.download_job_ttl_seconds = download_job_ttl_seconds

        if worker_limit is not None:
            self.worker_limit = worker_limit
