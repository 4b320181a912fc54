"""Base sensor classes for operator monitoring.

This module defines the OperatorSensor class that exposes lifecycle hooks
for the events the reconcilers produce. All hooks are no-ops by default so
subclasses override only the events they care about.

Hooks come in two shapes:
- paired hooks (on_reconcile_start / on_reconcile_complete), where the start
  hook returns an optional state dict handed back to the complete hook
- single-shot hooks for point events such as a child being created
"""

from typing import Dict, Optional, Any
import logging

logger = logging.getLogger(__name__)


class OperatorSensor:
    """Base sensor class for NSO operator monitoring.

    Example:
        class LoggingSensor(OperatorSensor):
            def on_reconcile_start(self, kind, name, namespace, trigger_source):
                return {'start_time': time.monotonic()}

            def on_reconcile_complete(self, kind, name, namespace, state, result, error=None):
                duration = time.monotonic() - state['start_time']
                logger.info(f"Reconciled {kind} {name} in {duration}s")
    """

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self,
        kind: str,
        name: str,
        namespace: str,
        trigger_source: str,
    ) -> Optional[Dict[str, Any]]:
        """Called when a reconcile pass begins.

        Args:
            kind: Custom resource kind (NSO or PackageBundle)
            name: Custom resource name
            namespace: Kubernetes namespace
            trigger_source: What triggered the pass (create, update, resume, secret, configmap)

        Returns:
            Optional state dict passed to on_reconcile_complete
        """
        pass

    def on_reconcile_complete(
        self,
        kind: str,
        name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        result: str,
        error: Optional[Exception] = None,
    ) -> None:
        """Called when a reconcile pass ends.

        Args:
            result: One of "done", "requeue" or "error"
            error: The exception raised by the pass, if any
        """
        pass

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
        """Called after the operator attempted to create a missing child resource."""
        pass

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
        """Called after a PackageBundle status write changed the phase."""
        pass

    def on_status_update_conflict(
        self,
        name: str,
        namespace: str,
        attempt: int,
    ) -> None:
        """Called when a status write lost an optimistic concurrency race."""
        pass
