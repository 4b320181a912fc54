import json
import kopf
from typing import Any, Dict, Optional
from kubernetes_asyncio.client import ApiException
from nso_operator.types.models import ReconcileResult

_ALREADY_EXISTS = "alreadyexists"
_NOT_FOUND = "notfound"
_CONFLICT = "conflict"


def _error_body(ex: ApiException) -> Dict[str, Any]:
    try:
        body = json.loads(ex.body) if ex.body else {}
    except (TypeError, ValueError):
        return {}
    return body if isinstance(body, dict) else {}


def _reason(ex: ApiException) -> str:
    return str(_error_body(ex).get("reason", "")).lower()


def not_found_error(ex: Exception) -> bool:
    if not isinstance(ex, ApiException):
        return False
    return ex.status == 404 or _reason(ex) == _NOT_FOUND


def already_exists_error(ex: Exception) -> bool:
    if not isinstance(ex, ApiException):
        return False
    return _reason(ex) == _ALREADY_EXISTS


def conflict_error(ex: Exception) -> bool:
    """True for an optimistic concurrency conflict (stale resourceVersion).

    The API server answers 409 for both a stale write and a create of an
    existing name; only the former is a conflict.
    """
    if not isinstance(ex, ApiException):
        return False
    if already_exists_error(ex):
        return False
    return ex.status == 409 or _reason(ex) == _CONFLICT


def describe_api_exception(ex: ApiException) -> str:
    message = f"Kubernetes API error ({ex.status}): {ex.reason}"
    body = _error_body(ex)
    if "message" in body:
        message = f"{message} - {body['message']}"
    return message


def convert_api_exception(
    ex: ApiException, permanent: bool = False, delay: float = 30
) -> kopf.TemporaryError:
    """Convert a kubernetes ApiException into a kopf error.

    Args:
        ex: The ApiException to convert
        permanent: If True, a PermanentError is returned and kopf will not retry.
        delay: Seconds kopf waits before retrying a TemporaryError.

    Returns:
        kopf.TemporaryError or kopf.PermanentError carrying the HTTP status and
        the server's message. The caller raises it.
    """
    message = describe_api_exception(ex)
    if permanent:
        return kopf.PermanentError(message)
    return kopf.TemporaryError(message, delay=delay)


def requeue_error(
    result: ReconcileResult, requeue_delay: float = 0
) -> Optional[kopf.TemporaryError]:
    """Kopf error that reschedules the handler for a requeueing result, else None."""
    if result.is_done:
        return None
    if result.requeue_after is not None:
        return kopf.TemporaryError("Requeued", delay=result.requeue_after)
    return kopf.TemporaryError("Requeued", delay=requeue_delay)
