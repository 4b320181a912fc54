"""Prometheus monitoring backend for the NSO operator.

PrometheusMonitor turns sensor events into metrics exposed by
prometheus_client:

1. Reconcile loop health: pass counts and durations per kind and result
2. Child resource creation: creates per child kind and outcome
3. PackageBundle status: phase transitions and status write conflicts
"""

from typing import Dict, Optional, Any
import time
import logging

from prometheus_client import Counter, Histogram

from nso_operator.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class PrometheusMonitor(OperatorSensor):
    """Prometheus metrics monitor for the NSO operator.

    Metrics are registered once per process in the default registry, so only
    one instance should be created.
    """

    def __init__(self):
        super().__init__()

        # =============================================================================
        # Reconciliation Loop Metrics
        # =============================================================================

        self.reconcile_duration = Histogram(
            "nsoop_reconcile_duration_seconds",
            "Time spent in a reconcile pass",
            labelnames=["kind", "namespace", "trigger_source", "result"],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
        )

        self.reconcile_total = Counter(
            "nsoop_reconcile_total",
            "Total number of reconcile passes",
            labelnames=["kind", "namespace", "trigger_source", "result"],
        )

        # =============================================================================
        # Kubernetes Resource Metrics
        # =============================================================================

        self.resource_created_total = Counter(
            "nsoop_resource_created_total",
            "Total number of child resource create attempts",
            labelnames=["kind", "namespace", "resource_kind", "result"],
        )

        # =============================================================================
        # PackageBundle Status Metrics
        # =============================================================================

        self.phase_transitions_total = Counter(
            "nsoop_phase_transitions_total",
            "Total number of PackageBundle phase transitions",
            labelnames=["namespace", "from_phase", "to_phase"],
        )

        self.status_update_conflicts_total = Counter(
            "nsoop_status_update_conflicts_total",
            "Total number of PackageBundle status writes rejected as stale",
            labelnames=["namespace"],
        )

        logger.info("PrometheusMonitor initialized with all metrics")

    def on_reconcile_start(
        self,
        kind: str,
        name: str,
        namespace: str,
        trigger_source: str,
    ) -> Optional[Dict[str, Any]]:
        return {"start_time": time.monotonic(), "trigger_source": trigger_source}

    def on_reconcile_complete(
        self,
        kind: str,
        name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        result: str,
        error: Optional[Exception] = None,
    ) -> None:
        if not state:
            return
        trigger_source = state.get("trigger_source", "unknown")
        labels = dict(
            kind=kind,
            namespace=namespace,
            trigger_source=trigger_source,
            result=result,
        )
        self.reconcile_duration.labels(**labels).observe(
            time.monotonic() - state["start_time"]
        )
        self.reconcile_total.labels(**labels).inc()

    def on_resource_created(
        self,
        kind: str,
        name: str,
        namespace: str,
        resource_kind: str,
        resource_name: str,
        success: bool,
    ) -> None:
        self.resource_created_total.labels(
            kind=kind,
            namespace=namespace,
            resource_kind=resource_kind,
            result="success" if success else "error",
        ).inc()

    def on_phase_transition(
        self,
        name: str,
        namespace: str,
        from_phase: Optional[str],
        to_phase: str,
    ) -> None:
        self.phase_transitions_total.labels(
            namespace=namespace,
            from_phase=from_phase or "",
            to_phase=to_phase,
        ).inc()

    def on_status_update_conflict(
        self,
        name: str,
        namespace: str,
        attempt: int,
    ) -> None:
        self.status_update_conflicts_total.labels(namespace=namespace).inc()
