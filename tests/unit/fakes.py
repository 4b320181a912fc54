"""In-memory stand-ins for the kubernetes_asyncio API groups the operator calls."""

import copy
import json
from collections import defaultdict
from typing import Dict, List, Tuple
from kubernetes_asyncio.client import ApiException


def api_exception(status: int, reason: str, message: str = "") -> ApiException:
    ex = ApiException(status=status, reason=reason)
    ex.body = json.dumps({"kind": "Status", "reason": reason, "message": message})
    return ex


def not_found(kind: str, name: str) -> ApiException:
    return api_exception(404, "NotFound", f'{kind} "{name}" not found')


def already_exists(kind: str, name: str) -> ApiException:
    return api_exception(409, "AlreadyExists", f'{kind} "{name}" already exists')


def conflict(kind: str, name: str) -> ApiException:
    return api_exception(
        409,
        "Conflict",
        f'Operation cannot be fulfilled on {kind} "{name}": '
        "the object has been modified; please apply your changes to the latest version",
    )


class FakeCluster:
    """Object store keyed by (kind, namespace, name) with injectable failures."""

    def __init__(self):
        self.objects: Dict[Tuple[str, str, str], object] = {}
        self.calls: List[Tuple[str, dict]] = []
        self._failures: Dict[str, List[Exception]] = defaultdict(list)
        self._resource_version = 0
        self.core_v1_api = FakeCoreV1Api(self)
        self.apps_v1_api = FakeAppsV1Api(self)
        self.batch_v1_api = FakeBatchV1Api(self)
        self.custom_objects_api = FakeCustomObjectsApi(self)

    def fail(self, method: str, exception: Exception, times: int = 1):
        """Make the next `times` calls of `method` raise `exception`."""
        self._failures[method].extend([exception] * times)

    def record(self, method: str, **kwargs):
        self.calls.append((method, kwargs))
        if self._failures[method]:
            raise self._failures[method].pop(0)

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    def next_resource_version(self) -> str:
        self._resource_version += 1
        return str(self._resource_version)

    def read(self, kind: str, name: str, namespace: str):
        try:
            return self.objects[(kind, namespace, name)]
        except KeyError:
            raise not_found(kind, name)

    def create(self, kind: str, namespace: str, body):
        key = (kind, namespace, body.metadata.name)
        if key in self.objects:
            raise already_exists(kind, body.metadata.name)
        self.objects[key] = body
        return body

    def get(self, kind: str, namespace: str, name: str):
        return self.objects.get((kind, namespace, name))

    def of_kind(self, kind: str) -> list:
        return [obj for (k, _, _), obj in self.objects.items() if k == kind]

    def add_custom_object(self, plural: str, body: dict) -> dict:
        body = copy.deepcopy(body)
        metadata = body.setdefault("metadata", {})
        metadata["resourceVersion"] = self.next_resource_version()
        self.objects[(plural, metadata["namespace"], metadata["name"])] = body
        return body

    def custom_object(self, plural: str, namespace: str, name: str) -> dict:
        return self.objects[(plural, namespace, name)]

    def touch_custom_object(self, plural: str, namespace: str, name: str):
        """Simulate a concurrent writer bumping the stored resourceVersion."""
        obj = self.custom_object(plural, namespace, name)
        obj["metadata"]["resourceVersion"] = self.next_resource_version()


class FakeCoreV1Api:
    def __init__(self, cluster: FakeCluster):
        self.cluster = cluster

    async def read_namespaced_service(self, name, namespace):
        self.cluster.record("read_namespaced_service", name=name, namespace=namespace)
        return self.cluster.read("Service", name, namespace)

    async def create_namespaced_service(self, namespace, body):
        self.cluster.record("create_namespaced_service", namespace=namespace, body=body)
        return self.cluster.create("Service", namespace, body)

    async def read_namespaced_persistent_volume_claim(self, name, namespace):
        self.cluster.record(
            "read_namespaced_persistent_volume_claim", name=name, namespace=namespace
        )
        return self.cluster.read("PersistentVolumeClaim", name, namespace)

    async def create_namespaced_persistent_volume_claim(self, namespace, body):
        self.cluster.record(
            "create_namespaced_persistent_volume_claim", namespace=namespace, body=body
        )
        return self.cluster.create("PersistentVolumeClaim", namespace, body)


class FakeAppsV1Api:
    def __init__(self, cluster: FakeCluster):
        self.cluster = cluster

    async def read_namespaced_stateful_set(self, name, namespace):
        self.cluster.record(
            "read_namespaced_stateful_set", name=name, namespace=namespace
        )
        return self.cluster.read("StatefulSet", name, namespace)

    async def create_namespaced_stateful_set(self, namespace, body):
        self.cluster.record(
            "create_namespaced_stateful_set", namespace=namespace, body=body
        )
        return self.cluster.create("StatefulSet", namespace, body)


class FakeBatchV1Api:
    def __init__(self, cluster: FakeCluster):
        self.cluster = cluster

    async def read_namespaced_job(self, name, namespace):
        self.cluster.record("read_namespaced_job", name=name, namespace=namespace)
        return self.cluster.read("Job", name, namespace)

    async def create_namespaced_job(self, namespace, body):
        self.cluster.record("create_namespaced_job", namespace=namespace, body=body)
        return self.cluster.create("Job", namespace, body)


class FakeCustomObjectsApi:
    def __init__(self, cluster: FakeCluster):
        self.cluster = cluster

    async def get_namespaced_custom_object(self, group, version, namespace, plural, name):
        self.cluster.record(
            "get_namespaced_custom_object", namespace=namespace, plural=plural, name=name
        )
        return copy.deepcopy(self.cluster.read(plural, name, namespace))

    async def list_namespaced_custom_object(
        self, group, version, namespace, plural, label_selector=None
    ):
        self.cluster.record(
            "list_namespaced_custom_object", namespace=namespace, plural=plural
        )
        items = [
            copy.deepcopy(obj)
            for (kind, ns, _), obj in self.cluster.objects.items()
            if kind == plural and ns == namespace
        ]
        return {"items": items}

    async def replace_namespaced_custom_object_status(
        self, group, version, namespace, plural, name, body
    ):
        self.cluster.record(
            "replace_namespaced_custom_object_status",
            namespace=namespace,
            plural=plural,
            name=name,
            body=body,
        )
        stored = self.cluster.read(plural, name, namespace)
        if body["metadata"].get("resourceVersion") != stored["metadata"]["resourceVersion"]:
            raise conflict(plural, name)
        stored["status"] = copy.deepcopy(body.get("status"))
        stored["metadata"]["resourceVersion"] = self.cluster.next_resource_version()
        return copy.deepcopy(stored)
