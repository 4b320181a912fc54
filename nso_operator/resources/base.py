import logging
from functools import cached_property, partial
from logging import Logger
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple
from nso_operator.common.models.labels import Labels
from nso_operator.sensors import OperatorSensor
from nso_operator.types.settings import Settings
from nso_operator.utils.errors import not_found_error
from kubernetes_asyncio.client import (
    ApiException,
    AppsV1Api,
    BatchV1Api,
    CoreV1Api,
    CustomObjectsApi,
    V1Job,
    V1OwnerReference,
    V1PersistentVolumeClaim,
    V1Service,
    V1StatefulSet,
)
from kubernetes_asyncio.client.api_client import ApiClient

Fetcher = Callable[[str, str], Awaitable[Optional[Any]]]
Creator = Callable[[str, Any], Awaitable[Any]]


class BaseResource:
    """Base resource model."""

    NSO_OPERATOR_NAME = "nso-operator"
    KIND: str = None

    logger: Logger
    conf: Settings = Settings()
    sensor: OperatorSensor = OperatorSensor()  # no-op until the operator starts
    shared_api_client: ApiClient = None  # Shared across all resource instances

    _name: str
    _namespace: str
    _labels: Labels
    owner_reference: Optional[V1OwnerReference] = None

    def __init__(
        self,
        name: str,
        namespace: str,
        labels: Labels = None,
        conf: Settings = None,
        logger: Logger = None,
    ):
        self._name = name
        self._namespace = namespace
        self._labels = labels or Labels.empty()
        if conf is not None:
            self.conf = conf
        self.logger = logger or logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return self._name

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def labels(self) -> Labels:
        return self._labels

    @cached_property
    def api_client(self) -> ApiClient:
        # Use the shared API client if available, otherwise create a new one
        if self.shared_api_client is not None:
            return self.shared_api_client
        return ApiClient()

    @cached_property
    def core_v1_api(self) -> CoreV1Api:
        return CoreV1Api(self.api_client)

    @cached_property
    def apps_v1_api(self) -> AppsV1Api:
        return AppsV1Api(self.api_client)

    @cached_property
    def batch_v1_api(self) -> BatchV1Api:
        return BatchV1Api(self.api_client)

    @cached_property
    def custom_objects_api(self) -> CustomObjectsApi:
        return CustomObjectsApi(self.api_client)

    @classmethod
    def prepare_owner_reference(cls, body: Dict) -> V1OwnerReference:
        """Controller reference from a custom resource body to its children."""
        metadata = body.get("metadata", {})
        return V1OwnerReference(
            api_version=body.get("apiVersion"),
            kind=body.get("kind"),
            name=metadata.get("name"),
            uid=metadata.get("uid"),
            controller=True,
            block_owner_deletion=True,
        )

    def owner_references(self):
        return [self.owner_reference] if self.owner_reference else None

    @cached_property
    def existence_handlers(self) -> Dict[str, Tuple[Fetcher, Creator]]:
        """Fetch and create coroutines for each child kind the operator manages."""
        return {
            "Service": (
                partial(self.fetch_service, self.core_v1_api),
                partial(self.create_service, self.core_v1_api),
            ),
            "StatefulSet": (
                partial(self.fetch_stateful_set, self.apps_v1_api),
                partial(self.create_stateful_set, self.apps_v1_api),
            ),
            "PersistentVolumeClaim": (
                partial(self.fetch_persistent_volume_claim, self.core_v1_api),
                partial(self.create_persistent_volume_claim, self.core_v1_api),
            ),
            "Job": (
                partial(self.fetch_job, self.batch_v1_api),
                partial(self.create_job, self.batch_v1_api),
            ),
        }

    async def ensure_exists(self, desired: Any) -> bool:
        """Create `desired` unless an object of the same kind and name exists.

        An existing object is never compared with or patched towards `desired`.

        Returns:
            True if the object was created by this call, False if it already existed.

        Raises:
            ApiException: any lookup error other than not found, and any create error.
            ValueError: the kind of `desired` is not managed by the operator.
        """
        kind = desired.kind
        if kind not in self.existence_handlers:
            raise ValueError(f"Unsupported resource kind: {kind}")
        fetch, create = self.existence_handlers[kind]
        name = desired.metadata.name
        namespace = desired.metadata.namespace or self.namespace

        current = await fetch(name, namespace)
        if current is not None:
            self.logger.debug(f"{kind} {namespace}/{name} already exists")
            return False

        self.logger.info(f"Creating {kind} {namespace}/{name}")
        try:
            await create(namespace, desired)
        except ApiException as ex:
            self.logger.error(
                f"Failed to create {kind} {namespace}/{name}: {ex.status} {ex.reason}"
            )
            self.sensor.on_resource_created(
                self.KIND, self.name, self.namespace, kind, name, False
            )
            raise
        self.sensor.on_resource_created(
            self.KIND, self.name, self.namespace, kind, name, True
        )
        return True

    async def fetch_service(
        self, core_v1_api: CoreV1Api, name: str, namespace: str
    ) -> V1Service:
        """Retrieve the latest state of a service"""
        try:
            return await core_v1_api.read_namespaced_service(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise

    async def create_service(
        self, core_v1_api: CoreV1Api, namespace: str, service: V1Service
    ):
        return await core_v1_api.create_namespaced_service(
            namespace=namespace, body=service
        )

    async def fetch_stateful_set(
        self, apps_v1_api: AppsV1Api, name: str, namespace: str
    ) -> V1StatefulSet:
        try:
            return await apps_v1_api.read_namespaced_stateful_set(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise

    async def create_stateful_set(
        self, apps_v1_api: AppsV1Api, namespace: str, stateful_set: V1StatefulSet
    ):
        return await apps_v1_api.create_namespaced_stateful_set(
            namespace=namespace, body=stateful_set
        )

    async def fetch_persistent_volume_claim(
        self, core_v1_api: CoreV1Api, name: str, namespace: str
    ) -> V1PersistentVolumeClaim:
        try:
            return await core_v1_api.read_namespaced_persistent_volume_claim(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise

    async def create_persistent_volume_claim(
        self, core_v1_api: CoreV1Api, namespace: str, pvc: V1PersistentVolumeClaim
    ):
        return await core_v1_api.create_namespaced_persistent_volume_claim(
            namespace=namespace, body=pvc
        )

    async def fetch_job(self, batch_v1_api: BatchV1Api, name: str, namespace: str) -> V1Job:
        try:
            return await batch_v1_api.read_namespaced_job(name=name, namespace=namespace)
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise

    async def create_job(self, batch_v1_api: BatchV1Api, namespace: str, job: V1Job):
        return await batch_v1_api.create_namespaced_job(namespace=namespace, body=job)

    async def get_custom_object(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        name: str,
    ):
        try:
            return await custom_objects_api.get_namespaced_custom_object(
                group=group,
                version=version,
                namespace=namespace,
                plural=plural,
                name=name,
            )
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise

    async def list_custom_objects(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        label_selector: str = None,
    ):
        return await custom_objects_api.list_namespaced_custom_object(
            group=group,
            version=version,
            namespace=namespace,
            plural=plural,
            label_selector=label_selector,
        )

    async def replace_custom_object_status(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        name: str,
        body: Dict,
    ):
        return await custom_objects_api.replace_namespaced_custom_object_status(
            group=group,
            version=version,
            namespace=namespace,
            plural=plural,
            name=name,
            body=body,
        )
