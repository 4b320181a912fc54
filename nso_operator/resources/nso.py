from logging import Logger
from typing import Callable, Dict, List, Optional
from nso_operator.types.settings import Settings
from nso_operator.types.models import (
    NSOSpec,
    NSOResources,
    ContainerEnvVar,
    ReconcileResult,
)
from nso_operator.types.schemas import NSOSpecSchema
from nso_operator.resources.base import BaseResource
from kubernetes_asyncio.client import (
    V1ObjectMeta,
    V1Service,
    V1ServiceSpec,
    V1ServicePort,
    V1StatefulSet,
    V1StatefulSetSpec,
    V1LabelSelector,
    V1PodTemplateSpec,
    V1PodSpec,
    V1Container,
    V1ContainerPort,
    V1EnvVar,
    V1EnvVarSource,
    V1ConfigMapKeySelector,
    V1SecretKeySelector,
    V1ObjectFieldSelector,
    V1Volume,
    V1VolumeMount,
    V1ConfigMapVolumeSource,
    V1KeyToPath,
)


class NSO(BaseResource):
    """NSO kubernetes resource."""

    KIND = "NSO"
    GROUP_NAME = "orchestration.cisco.com"
    GROUP_VERSION = "v1alpha1"
    PLURAL_NAME = "nsos"

    NSO_CONTAINER_NAME = "ncs"
    HTTP_PORT_NAME = "http"
    HTTP_PORT = 8080
    HTTPS_PORT_NAME = "https"
    HTTPS_PORT = 8888
    CONFIG_MOUNT_PATH = "/etc/ncs/ncs.conf"
    CONFIG_FILE_MODE = 0o600
    ADMIN_USERNAME_ENV = "ADMIN_USERNAME"
    ADMIN_PASSWORD_ENV = "ADMIN_PASSWORD"
    ADMIN_PASSWORD_KEY = "password"

    service_name: str
    stateful_set_name: str
    spec: NSOSpec

    @classmethod
    def from_spec(
        cls,
        name: str,
        namespace: str,
        spec: NSOSpec,
        conf: Settings = None,
        logger: Logger = None,
    ) -> "NSO":
        nso = NSO(name, namespace, conf=conf, logger=logger)
        nso.spec = spec
        nso.service_name = NSOResources.service_name(spec.service_name)
        nso.stateful_set_name = NSOResources.stateful_set_name(name)
        return nso

    @classmethod
    def from_body(
        cls, body: Dict, conf: Settings = None, logger: Logger = None
    ) -> "NSO":
        """Build from a raw custom object. Raises marshmallow.ValidationError on a bad spec."""
        metadata = body["metadata"]
        spec = NSOSpecSchema().load(body.get("spec") or {})
        nso = cls.from_spec(
            metadata["name"], metadata["namespace"], spec, conf=conf, logger=logger
        )
        nso.owner_reference = cls.prepare_owner_reference(body)
        return nso

    @classmethod
    def default(cls, namespace: str = None, logger: Logger = None) -> "NSO":
        """An NSO handle without a spec, used for lookups."""
        return NSO(name=None, namespace=namespace, logger=logger)

    @property
    def builders(self) -> Dict[str, Callable]:
        return {
            "Service": self.prepare_service,
            "StatefulSet": self.prepare_stateful_set,
        }

    async def reconcile(self) -> ReconcileResult:
        """Make sure the headless service and the stateful set exist."""
        # The service must exist before the stateful set refers to it
        for build in self.builders.values():
            if await self.ensure_exists(build()):
                return ReconcileResult.requeue_now()
        return ReconcileResult.done()

    async def fetch(self, name: str, namespace: str) -> Optional[Dict]:
        """Fetch actual NSO in kubernetes."""
        return await self.get_custom_object(
            self.custom_objects_api,
            namespace=namespace,
            group=self.GROUP_NAME,
            version=self.GROUP_VERSION,
            plural=self.PLURAL_NAME,
            name=name,
        )

    async def search(self, namespace: str) -> List[Dict]:
        """List NSOs in a namespace."""
        result = await self.list_custom_objects(
            self.custom_objects_api,
            namespace=namespace,
            group=self.GROUP_NAME,
            version=self.GROUP_VERSION,
            plural=self.PLURAL_NAME,
        )
        return result.get("items", [])

    def prepare_service(self) -> V1Service:
        """Build the headless service fronting the NSO pods."""
        return V1Service(
            api_version="v1",
            kind="Service",
            metadata=V1ObjectMeta(
                name=self.service_name,
                namespace=self.namespace,
                labels=dict(self.spec.label_selector),
                owner_references=self.owner_references(),
            ),
            spec=V1ServiceSpec(
                type="ClusterIP",
                cluster_ip="None",
                selector=dict(self.spec.label_selector),
                ports=self.prepare_service_ports(),
            ),
        )

    def prepare_service_ports(self) -> List[V1ServicePort]:
        return [
            V1ServicePort(
                name=port.name,
                port=port.port,
                target_port=port.target_port,
                protocol=port.protocol,
                app_protocol=port.app_protocol,
                node_port=port.node_port,
            )
            for port in self.spec.ports
        ]

    def prepare_env_vars(self) -> List[V1EnvVar]:
        """Admin credentials first, then user entries in declaration order.

        User entries named like the admin variables are kept as declared.
        """
        env_vars = [
            V1EnvVar(
                name=self.ADMIN_USERNAME_ENV,
                value=self.spec.admin_credentials.username,
            ),
            V1EnvVar(
                name=self.ADMIN_PASSWORD_ENV,
                value_from=V1EnvVarSource(
                    secret_key_ref=V1SecretKeySelector(
                        name=self.spec.admin_credentials.password_secret_ref,
                        key=self.ADMIN_PASSWORD_KEY,
                    )
                ),
            ),
        ]
        env_vars.extend(self.prepare_user_env_var(cev) for cev in self.spec.env or [])
        return env_vars

    def prepare_user_env_var(self, cev: ContainerEnvVar) -> V1EnvVar:
        if not cev.value_from:
            return V1EnvVar(name=cev.name, value=cev.value)
        source = cev.value_from
        if source.config_map_key_ref:
            value_from = V1EnvVarSource(
                config_map_key_ref=V1ConfigMapKeySelector(
                    key=source.config_map_key_ref.key,
                    name=source.config_map_key_ref.name,
                    optional=source.config_map_key_ref.optional,
                )
            )
        elif source.secret_key_ref:
            value_from = V1EnvVarSource(
                secret_key_ref=V1SecretKeySelector(
                    key=source.secret_key_ref.key,
                    name=source.secret_key_ref.name,
                    optional=source.secret_key_ref.optional,
                )
            )
        elif source.field_ref:
            value_from = V1EnvVarSource(
                field_ref=V1ObjectFieldSelector(
                    field_path=source.field_ref.field_path,
                    api_version=source.field_ref.api_version,
                )
            )
        else:
            value_from = None
        return V1EnvVar(name=cev.name, value=cev.value, value_from=value_from)

    def prepare_container_ports(self) -> List[V1ContainerPort]:
        return [
            V1ContainerPort(name=self.HTTP_PORT_NAME, container_port=self.HTTP_PORT),
            V1ContainerPort(name=self.HTTPS_PORT_NAME, container_port=self.HTTPS_PORT),
        ]

    def prepare_volumes(self) -> List[V1Volume]:
        return [
            V1Volume(
                name=NSOResources.config_volume_name(),
                config_map=V1ConfigMapVolumeSource(
                    name=self.spec.nso_config_ref,
                    items=[
                        V1KeyToPath(
                            key=NSOResources.CONFIG_FILE_NAME,
                            path=NSOResources.CONFIG_FILE_NAME,
                            mode=self.CONFIG_FILE_MODE,
                        )
                    ],
                ),
            )
        ]

    def prepare_volume_mounts(self) -> List[V1VolumeMount]:
        return [
            V1VolumeMount(
                name=NSOResources.config_volume_name(),
                mount_path=self.CONFIG_MOUNT_PATH,
                sub_path=NSOResources.CONFIG_FILE_NAME,
                read_only=True,
            )
        ]

    def prepare_nso_container(self) -> V1Container:
        return V1Container(
            name=self.NSO_CONTAINER_NAME,
            image=self.spec.image,
            ports=self.prepare_container_ports(),
            env=self.prepare_env_vars(),
            volume_mounts=self.prepare_volume_mounts(),
        )

    def prepare_pod_template(self) -> V1PodTemplateSpec:
        """Pod labels equal the label selector and nothing else."""
        return V1PodTemplateSpec(
            metadata=V1ObjectMeta(labels=dict(self.spec.label_selector)),
            spec=V1PodSpec(
                containers=[self.prepare_nso_container()],
                volumes=self.prepare_volumes(),
            ),
        )

    def prepare_stateful_set(self) -> V1StatefulSet:
        """Build stateful set resource."""
        return V1StatefulSet(
            api_version="apps/v1",
            kind="StatefulSet",
            metadata=V1ObjectMeta(
                name=self.stateful_set_name,
                namespace=self.namespace,
                owner_references=self.owner_references(),
            ),
            spec=V1StatefulSetSpec(
                service_name=self.service_name,
                replicas=self.spec.replicas,
                selector=V1LabelSelector(match_labels=dict(self.spec.label_selector)),
                template=self.prepare_pod_template(),
            ),
        )
