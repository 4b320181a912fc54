import pytest
from unittest.mock import Mock
import nso_operator.resources.base as base
from nso_operator.resources.base import BaseResource
from nso_operator.sensors import OperatorSensor
from nso_operator.types.settings import Settings
from tests.unit.fakes import FakeCluster

NAMESPACE = "nso-system"


@pytest.fixture
def settings():
    return Settings(
        requeue_delay_seconds=0,
        status_update_retry_delay_seconds=0,
    )


@pytest.fixture
def sensor():
    return Mock(spec=OperatorSensor)


@pytest.fixture
def cluster(monkeypatch, settings, sensor):
    """Route every kubernetes API call made by the resources to an in-memory cluster."""
    cluster = FakeCluster()
    monkeypatch.setattr(BaseResource, "shared_api_client", Mock())
    monkeypatch.setattr(BaseResource, "conf", settings)
    monkeypatch.setattr(BaseResource, "sensor", sensor)
    monkeypatch.setattr(base, "CoreV1Api", lambda api_client: cluster.core_v1_api)
    monkeypatch.setattr(base, "AppsV1Api", lambda api_client: cluster.apps_v1_api)
    monkeypatch.setattr(base, "BatchV1Api", lambda api_client: cluster.batch_v1_api)
    monkeypatch.setattr(
        base, "CustomObjectsApi", lambda api_client: cluster.custom_objects_api
    )
    return cluster


@pytest.fixture
def nso_body():
    return {
        "apiVersion": "orchestration.cisco.com/v1alpha1",
        "kind": "NSO",
        "metadata": {"name": "nso-1", "namespace": NAMESPACE, "uid": "uid-nso-1"},
        "spec": {
            "image": "cisco/nso:6.4",
            "serviceName": "nso-headless",
            "replicas": 1,
            "labelSelector": {"app": "nso"},
            "ports": [{"name": "http", "port": 8080}],
            "nsoConfigRef": "nso-config",
            "adminCredentials": {"username": "admin", "passwordSecretRef": "nso-admin"},
        },
    }


@pytest.fixture
def bundle_body():
    return {
        "apiVersion": "orchestration.cisco.com/v1alpha1",
        "kind": "PackageBundle",
        "metadata": {"name": "pb1", "namespace": NAMESPACE, "uid": "uid-pb1"},
        "spec": {
            "targetName": "nso1",
            "origin": "SCM",
            "source": {"url": "https://git.example.com/packages.git"},
        },
    }
