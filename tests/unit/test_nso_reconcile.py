"""Unit tests for the NSO reconcile pass."""

import pytest
from kubernetes_asyncio.client import ApiException
from nso_operator.handlers import nso as nso_handler
from nso_operator.types.models import ReconcileRequest, ReconcileResult
from tests.unit.fakes import api_exception

REQUEST = ReconcileRequest("nso-system", "nso-1")


@pytest.fixture
def stored_nso(cluster, nso_body):
    return cluster.add_custom_object("nsos", nso_body)


class TestNSOReconcile:
    @pytest.mark.asyncio
    async def test_missing_nso_is_done(self, cluster):
        result = await nso_handler.reconcile(REQUEST)
        assert result == ReconcileResult.done()
        assert cluster.of_kind("Service") == []

    @pytest.mark.asyncio
    async def test_creates_service_then_stateful_set(self, cluster, stored_nso):
        assert await nso_handler.reconcile(REQUEST) == ReconcileResult.requeue_now()
        assert len(cluster.of_kind("Service")) == 1
        assert cluster.of_kind("StatefulSet") == []

        assert await nso_handler.reconcile(REQUEST) == ReconcileResult.requeue_now()
        assert len(cluster.of_kind("StatefulSet")) == 1

        assert await nso_handler.reconcile(REQUEST) == ReconcileResult.done()
        assert cluster.count("create_namespaced_service") == 1
        assert cluster.count("create_namespaced_stateful_set") == 1

    @pytest.mark.asyncio
    async def test_api_error_propagates(self, cluster, stored_nso, sensor):
        cluster.fail("create_namespaced_service", api_exception(500, "InternalError"))
        with pytest.raises(ApiException):
            await nso_handler.reconcile(REQUEST)
        args = sensor.on_reconcile_complete.call_args[0]
        assert args[4] == "error"

    @pytest.mark.asyncio
    async def test_reports_to_sensor(self, cluster, stored_nso, sensor):
        await nso_handler.reconcile(REQUEST, trigger_source="secret")
        sensor.on_reconcile_start.assert_called_once_with(
            "NSO", "nso-1", "nso-system", "secret"
        )
        assert sensor.on_reconcile_complete.call_args[0][4] == "requeue"
