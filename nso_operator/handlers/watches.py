import kopf
import logging
from logging import Logger
from typing import List
from marshmallow import ValidationError
from kubernetes_asyncio.client import ApiException
from nso_operator.types.models import ReconcileRequest
from nso_operator.types.schemas import NSOSpecSchema
from nso_operator.resources import NSO
from nso_operator.handlers.nso import reconcile
from nso_operator.utils.errors import describe_api_exception

SECRET_KIND = "Secret"
CONFIG_MAP_KIND = "ConfigMap"

logger = logging.getLogger(__name__)


def references(nso_body: dict, kind: str, name: str) -> bool:
    """True if the NSO's spec points at the secret or config map `name`."""
    spec = NSOSpecSchema().load(nso_body.get("spec") or {})
    if kind == SECRET_KIND:
        return spec.admin_credentials.password_secret_ref == name
    if kind == CONFIG_MAP_KIND:
        return spec.nso_config_ref == name
    return False


async def map_resource_to_requests(
    kind: str, name: str, namespace: str
) -> List[ReconcileRequest]:
    """Reconcile requests for every NSO in `namespace` that depends on the changed object.

    A failure to list NSOs drops this trigger and yields no requests.
    """
    try:
        items = await NSO.default(namespace).search(namespace)
    except Exception as ex:
        logger.warning(f"Failed to list NSOs in {namespace} for {kind} {name}: {ex}")
        return []

    requests = []
    for item in items:
        metadata = item.get("metadata", {})
        try:
            matches = references(item, kind, name)
        except Exception as ex:
            logger.warning(f"Skipping NSO {metadata.get('name')} with invalid spec: {ex}")
            continue
        if matches:
            requests.append(ReconcileRequest(namespace, metadata["name"]))
    return requests


async def reconcile_dependents(
    kind: str, name: str, namespace: str, event_type: str, logger: Logger
) -> None:
    """Reconcile each dependent NSO; one failing NSO does not hold back the rest."""
    if event_type == "DELETED":
        return
    for request in await map_resource_to_requests(kind, name, namespace):
        logger.info(f"{kind} {name} changed, reconciling NSO {request.name}")
        try:
            # kopf never retries event handlers; run creation passes back to back
            result = await reconcile(request, kind.lower(), logger)
            while not result.is_done:
                result = await reconcile(request, kind.lower(), logger)
        except ValidationError as ex:
            logger.error(f"Invalid spec for NSO {request.name}: {ex.messages}")
        except ApiException as ex:
            logger.error(
                f"Failed to reconcile NSO {request.name} after {kind} {name} "
                f"changed: {describe_api_exception(ex)}"
            )


@kopf.on.event("v1", "secrets")
async def secret_event(type, name, namespace, logger, **kwargs):
    """Reconcile NSOs whose admin password secret changed."""
    await reconcile_dependents(SECRET_KIND, name, namespace, type, logger)


@kopf.on.event("v1", "configmaps")
async def config_map_event(type, name, namespace, logger, **kwargs):
    """Reconcile NSOs whose configuration changed."""
    await reconcile_dependents(CONFIG_MAP_KIND, name, namespace, type, logger)
