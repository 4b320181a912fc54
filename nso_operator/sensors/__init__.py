"""NSO Operator Sensor Framework.

Hook-based instrumentation of reconcile passes, child creation and
PackageBundle phase changes.

Usage:
    from nso_operator.sensors import SensorDelegate, PrometheusMonitor

    delegate = SensorDelegate()
    delegate.add(PrometheusMonitor())
"""

from nso_operator.sensors.base import OperatorSensor
from nso_operator.sensors.delegate import SensorDelegate
from nso_operator.sensors.prometheus import PrometheusMonitor
from nso_operator.sensors.server import init_metrics_server

__all__ = [
    "OperatorSensor",
    "SensorDelegate",
    "PrometheusMonitor",
    "init_metrics_server",
]
