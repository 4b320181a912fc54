"""Sensor delegation for fan-out pattern.

SensorDelegate routes every sensor event to each registered backend. A
failing backend is logged and never interrupts reconciliation.
"""

from typing import Set, Dict, Optional, Any
import logging

from nso_operator.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class SensorDelegate(OperatorSensor):
    """Delegate sensor that fans out events to multiple backends.

    State tracking is per sensor: the delegate's start hooks return a dict
    keyed by sensor, and complete hooks hand each sensor its own state back.

    Example:
        delegate = SensorDelegate()
        delegate.add(PrometheusMonitor())

        state = delegate.on_reconcile_start("NSO", "nso-1", "default", "create")
        delegate.on_reconcile_complete("NSO", "nso-1", "default", state, "done")
    """

    def __init__(self) -> None:
        self._sensors: Set[OperatorSensor] = set()

    def add(self, sensor: OperatorSensor) -> None:
        logger.info(f"Adding sensor: {sensor.__class__.__name__}")
        self._sensors.add(sensor)

    def remove(self, sensor: OperatorSensor) -> None:
        logger.info(f"Removing sensor: {sensor.__class__.__name__}")
        self._sensors.discard(sensor)

    def clear(self) -> None:
        logger.info(f"Clearing {len(self._sensors)} sensors")
        self._sensors.clear()

    def _dispatch(self, hook: str, *args) -> None:
        for sensor in self._sensors:
            try:
                getattr(sensor, hook)(*args)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self,
        kind: str,
        name: str,
        namespace: str,
        trigger_source: str,
    ) -> Optional[Dict[OperatorSensor, Any]]:
        """Delegate reconcile_start to all sensors.

        Returns:
            Dict mapping each sensor to its returned state, or None if no sensors
        """
        if not self._sensors:
            return None

        states = {}
        for sensor in self._sensors:
            try:
                state = sensor.on_reconcile_start(kind, name, namespace, trigger_source)
                if state is not None:
                    states[sensor] = state
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.on_reconcile_start: {e}",
                    exc_info=True,
                )

        return states if states else None

    def on_reconcile_complete(
        self,
        kind: str,
        name: str,
        namespace: str,
        state: Optional[Dict[OperatorSensor, Any]],
        result: str,
        error: Optional[Exception] = None,
    ) -> None:
        for sensor in self._sensors:
            try:
                sensor_state = state.get(sensor) if state else None
                sensor.on_reconcile_complete(
                    kind, name, namespace, sensor_state, result, error
                )
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.on_reconcile_complete: {e}",
                    exc_info=True,
                )

    # =============================================================================
    # Resource Operation Hooks
    # =============================================================================

    def on_resource_created(
        self,
        kind: str,
        name: str,
        namespace: str,
        resource_kind: str,
        resource_name: str,
        success: bool,
    ) -> None:
        self._dispatch(
            "on_resource_created",
            kind,
            name,
            namespace,
            resource_kind,
            resource_name,
            success,
        )

    # =============================================================================
    # Status Hooks
    # =============================================================================

    def on_phase_transition(
        self,
        name: str,
        namespace: str,
        from_phase: Optional[str],
        to_phase: str,
    ) -> None:
        self._dispatch("on_phase_transition", name, namespace, from_phase, to_phase)

    def on_status_update_conflict(
        self,
        name: str,
        namespace: str,
        attempt: int,
    ) -> None:
        self._dispatch("on_status_update_conflict", name, namespace, attempt)
