"""Unit tests for mapping Secret and ConfigMap changes to NSO reconciles."""

import copy
import pytest
from marshmallow import ValidationError
from unittest.mock import AsyncMock, Mock
from nso_operator.handlers import watches
from nso_operator.types.models import ReconcileRequest, ReconcileResult
from tests.unit.fakes import api_exception


def nso(body: dict, name: str, namespace: str, secret: str, config: str) -> dict:
    body = copy.deepcopy(body)
    body["metadata"].update({"name": name, "namespace": namespace})
    body["spec"]["adminCredentials"]["passwordSecretRef"] = secret
    body["spec"]["nsoConfigRef"] = config
    return body


@pytest.fixture
def nsos(cluster, nso_body):
    cluster.add_custom_object("nsos", nso(nso_body, "a", "ns1", "s1", "c1"))
    cluster.add_custom_object("nsos", nso(nso_body, "b", "ns1", "s2", "c1"))
    cluster.add_custom_object("nsos", nso(nso_body, "c", "ns2", "s1", "c1"))


class TestMapResourceToRequests:
    @pytest.mark.asyncio
    async def test_secret(self, nsos):
        requests = await watches.map_resource_to_requests("Secret", "s1", "ns1")
        assert requests == [ReconcileRequest("ns1", "a")]

    @pytest.mark.asyncio
    async def test_config_map(self, nsos):
        requests = await watches.map_resource_to_requests("ConfigMap", "c1", "ns1")
        assert sorted(requests) == [
            ReconcileRequest("ns1", "a"),
            ReconcileRequest("ns1", "b"),
        ]

    @pytest.mark.asyncio
    async def test_secret_name_does_not_match_config_map(self, nsos):
        assert await watches.map_resource_to_requests("ConfigMap", "s1", "ns1") == []

    @pytest.mark.asyncio
    async def test_other_namespace(self, nsos):
        requests = await watches.map_resource_to_requests("Secret", "s1", "ns2")
        assert requests == [ReconcileRequest("ns2", "c")]

    @pytest.mark.asyncio
    async def test_list_failure_yields_nothing(self, cluster, nsos):
        cluster.fail("list_namespaced_custom_object", api_exception(500, "InternalError"))
        assert await watches.map_resource_to_requests("Secret", "s1", "ns1") == []

    @pytest.mark.asyncio
    async def test_invalid_nso_is_skipped(self, cluster, nsos):
        cluster.add_custom_object(
            "nsos", {"metadata": {"name": "bad", "namespace": "ns1"}, "spec": {}}
        )
        requests = await watches.map_resource_to_requests("Secret", "s1", "ns1")
        assert requests == [ReconcileRequest("ns1", "a")]


class TestReconcileDependents:
    @pytest.mark.asyncio
    async def test_runs_until_done(self, monkeypatch, nsos):
        reconcile = AsyncMock(
            side_effect=[
                ReconcileResult.requeue_now(),
                ReconcileResult.requeue_now(),
                ReconcileResult.done(),
            ]
        )
        monkeypatch.setattr(watches, "reconcile", reconcile)
        await watches.reconcile_dependents("Secret", "s1", "ns1", "MODIFIED", Mock())
        assert reconcile.await_count == 3
        assert reconcile.call_args[0][:2] == (ReconcileRequest("ns1", "a"), "secret")

    @pytest.mark.asyncio
    async def test_deleted_event_is_ignored(self, monkeypatch, cluster, nsos):
        reconcile = AsyncMock()
        monkeypatch.setattr(watches, "reconcile", reconcile)
        await watches.reconcile_dependents("Secret", "s1", "ns1", "DELETED", Mock())
        reconcile.assert_not_awaited()
        assert cluster.count("list_namespaced_custom_object") == 0

    @pytest.mark.asyncio
    async def test_creates_children_of_dependent_nso(self, cluster, nsos):
        await watches.reconcile_dependents("Secret", "s1", "ns1", None, Mock())
        assert cluster.get("Service", "ns1", "nso-headless")
        assert cluster.get("StatefulSet", "ns1", "a")
        assert cluster.get("StatefulSet", "ns1", "b") is None

    @pytest.mark.asyncio
    async def test_failing_nso_does_not_block_the_rest(self, cluster, nso_body):
        for name in ("a", "b"):
            body = nso(nso_body, name, "ns1", "nso-admin", "c1")
            body["spec"]["serviceName"] = f"svc-{name}"
            cluster.add_custom_object("nsos", body)
        cluster.fail("create_namespaced_service", api_exception(403, "Forbidden"))
        logger = Mock()

        await watches.reconcile_dependents(
            "Secret", "nso-admin", "ns1", "MODIFIED", logger
        )

        assert cluster.get("Service", "ns1", "svc-a") is None
        assert cluster.get("Service", "ns1", "svc-b") is not None
        assert cluster.get("StatefulSet", "ns1", "b") is not None
        errors = [call[0][0] for call in logger.error.call_args_list]
        assert any(
            "Failed to reconcile NSO a" in e and "403" in e for e in errors
        )

    @pytest.mark.asyncio
    async def test_invalid_nso_during_reconcile_is_logged(self, monkeypatch, nsos):
        reconcile = AsyncMock(side_effect=ValidationError({"image": ["Missing"]}))
        monkeypatch.setattr(watches, "reconcile", reconcile)
        logger = Mock()
        await watches.reconcile_dependents("ConfigMap", "c1", "ns1", "MODIFIED", logger)
        assert reconcile.await_count == 2
        assert logger.error.call_count == 2
