import kopf
import logging
from logging import Logger
from marshmallow import ValidationError
from kubernetes_asyncio.client import ApiException
from nso_operator.types.models import ReconcileRequest, ReconcileResult
from nso_operator.resources import PackageBundle
from nso_operator.utils.errors import convert_api_exception, requeue_error
from nso_operator.utils.helpers import KeyedLocks

KIND = "PackageBundle"

reconciliation_locks = KeyedLocks()


async def reconcile(
    request: ReconcileRequest, trigger_source: str = "change", logger: Logger = None
) -> ReconcileResult:
    """Run one reconcile pass for the PackageBundle named by `request`."""
    logger = logger or logging.getLogger(__name__)
    sensor = PackageBundle.sensor
    async with reconciliation_locks.hold((request.namespace, request.name)):
        sensor_state = sensor.on_reconcile_start(
            KIND, request.name, request.namespace, trigger_source
        )
        try:
            body = await PackageBundle.default(request.namespace, logger).fetch(
                request.name, request.namespace
            )
            if body is None:
                logger.info(
                    f"PackageBundle {request.namespace}/{request.name} not found, "
                    "ignoring since it must have been deleted"
                )
                result = ReconcileResult.done()
            else:
                bundle = PackageBundle.from_body(body, logger=logger)
                result = await bundle.reconcile()
        except Exception as ex:
            sensor.on_reconcile_complete(
                KIND, request.name, request.namespace, sensor_state, "error", ex
            )
            raise
        sensor.on_reconcile_complete(
            KIND,
            request.name,
            request.namespace,
            sensor_state,
            "done" if result.is_done else "requeue",
        )
        return result


async def run_reconcile(
    request: ReconcileRequest, trigger_source: str, logger: Logger
) -> None:
    """Reconcile and translate the outcome into kopf's retry semantics."""
    try:
        result = await reconcile(request, trigger_source, logger)
    except ValidationError as ex:
        raise kopf.PermanentError(f"Invalid PackageBundle spec: {ex.messages}")
    except ApiException as ex:
        logger.error(
            f"Failed to reconcile PackageBundle {request.name}: {ex.status} {ex.reason}"
        )
        raise convert_api_exception(
            ex, delay=PackageBundle.conf.error_requeue_delay_seconds
        )
    error = requeue_error(result, PackageBundle.conf.requeue_delay_seconds)
    if error:
        raise error


@kopf.on.resume(
    PackageBundle.GROUP_NAME, PackageBundle.GROUP_VERSION, PackageBundle.PLURAL_NAME
)
@kopf.on.create(
    PackageBundle.GROUP_NAME, PackageBundle.GROUP_VERSION, PackageBundle.PLURAL_NAME
)
@kopf.on.update(
    PackageBundle.GROUP_NAME, PackageBundle.GROUP_VERSION, PackageBundle.PLURAL_NAME
)
async def reconciliation(name, namespace, logger, **kwargs):
    """Reconcile PackageBundle resources."""
    await run_reconcile(ReconcileRequest(namespace, name), "change", logger)
