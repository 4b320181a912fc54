import asyncio
import shlex
from logging import Logger
from typing import Callable, Dict, List, Optional, Tuple
from nso_operator.common.models.labels import Labels
from nso_operator.types.settings import Settings
from nso_operator.types.models import (
    PackageBundleSpec,
    PackageBundleStatus,
    PackageBundlePhase,
    PackageBundleResources,
    ReconcileResult,
)
from nso_operator.types.schemas import PackageBundleSpecSchema, PackageBundleStatusSchema
from nso_operator.resources.base import BaseResource
from nso_operator.resources.phase import derive_phase
from nso_operator.utils.errors import conflict_error, describe_api_exception
from nso_operator.utils.helpers import now
from kubernetes_asyncio.client import (
    ApiException,
    V1ObjectMeta,
    V1PersistentVolumeClaim,
    V1PersistentVolumeClaimSpec,
    V1PersistentVolumeClaimVolumeSource,
    V1ResourceRequirements,
    V1Job,
    V1JobSpec,
    V1PodTemplateSpec,
    V1PodSpec,
    V1Container,
    V1EnvVar,
    V1EnvVarSource,
    V1SecretKeySelector,
    V1SecretVolumeSource,
    V1Volume,
    V1VolumeMount,
)

MSG_CREATED = "PackageBundle created"
MSG_JOB_CREATED = "Job created, waiting for containers"


class PackageBundle(BaseResource):
    """PackageBundle kubernetes resource."""

    KIND = "PackageBundle"
    GROUP_NAME = "orchestration.cisco.com"
    GROUP_VERSION = "v1alpha1"
    PLURAL_NAME = "packagebundles"
    COMPONENT_TYPE = "package-bundle"

    DOWNLOADER_CONTAINER_NAME = "downloader"
    PACKAGES_DIR = "/packages"
    CHECKOUT_DIR = "/tmp/package-source"
    SSH_KEY_DIR = "/etc/git-secret"
    SSH_KEY_FILE = "ssh-privatekey"
    SSH_KEY_MODE = 0o400
    HTTP_USERNAME_KEY = "username"
    HTTP_PASSWORD_KEY = "password"
    ACCESS_MODE = "ReadWriteOnce"

    spec: PackageBundleSpec
    status: PackageBundleStatus
    persistent_volume_claim_name: str
    job_name: str

    def __init__(
        self,
        name: str,
        namespace: str,
        target_name: str = None,
        conf: Settings = None,
        logger: Logger = None,
    ):
        labels = Labels.generate_default_labels(
            name,
            self.KIND,
            self.COMPONENT_TYPE,
            target_name or name,
            self.NSO_OPERATOR_NAME,
        )
        if target_name:
            labels.include_nso_target(target_name)
        super().__init__(name, namespace, labels=labels, conf=conf, logger=logger)

    @classmethod
    def from_spec(
        cls,
        name: str,
        namespace: str,
        spec: PackageBundleSpec,
        status: PackageBundleStatus = None,
        conf: Settings = None,
        logger: Logger = None,
    ) -> "PackageBundle":
        bundle = PackageBundle(
            name, namespace, target_name=spec.target_name, conf=conf, logger=logger
        )
        bundle.spec = spec
        bundle.status = status or PackageBundleStatusSchema().load({})
        bundle.persistent_volume_claim_name = (
            PackageBundleResources.persistent_volume_claim_name(name, spec.target_name)
        )
        bundle.job_name = PackageBundleResources.job_name(name)
        return bundle

    @classmethod
    def from_body(
        cls, body: Dict, conf: Settings = None, logger: Logger = None
    ) -> "PackageBundle":
        """Build from a raw custom object. Raises marshmallow.ValidationError on a bad spec."""
        metadata = body["metadata"]
        spec = PackageBundleSpecSchema().load(body.get("spec") or {})
        status = PackageBundleStatusSchema().load(body.get("status") or {})
        bundle = cls.from_spec(
            metadata["name"],
            metadata["namespace"],
            spec,
            status=status,
            conf=conf,
            logger=logger,
        )
        bundle.owner_reference = cls.prepare_owner_reference(body)
        return bundle

    @classmethod
    def default(cls, namespace: str = None, logger: Logger = None) -> "PackageBundle":
        """A PackageBundle handle without a spec, used for lookups."""
        return PackageBundle(name=None, namespace=namespace, logger=logger)

    @property
    def builders(self) -> Dict[str, Callable]:
        return {
            "PersistentVolumeClaim": self.prepare_persistent_volume_claim,
            "Job": self.prepare_job,
        }

    async def reconcile(self) -> ReconcileResult:
        """Drive the bundle from Pending to a terminal download phase.

        Creates the storage claim, then the download Job, each on its own pass,
        and afterwards mirrors the Job's progress into the status.
        """
        if self.status.phase is None:
            await self.update_phase(PackageBundlePhase.PENDING, MSG_CREATED, "")
        elif self.status.phase == PackageBundlePhase.DOWNLOADED:
            self.logger.debug(f"PackageBundle {self.name} already downloaded")
            return ReconcileResult.done()

        try:
            created = await self.ensure_exists(self.prepare_persistent_volume_claim())
        except ApiException as ex:
            await self.try_update_phase(
                PackageBundlePhase.FAILED_TO_DOWNLOAD,
                f"Failed to create PersistentVolumeClaim: {describe_api_exception(ex)}",
                "",
            )
            raise
        if created:
            return ReconcileResult.requeue_now()

        try:
            created = await self.ensure_exists(self.prepare_job())
        except ApiException as ex:
            await self.try_update_phase(
                PackageBundlePhase.FAILED_TO_DOWNLOAD,
                f"Failed to create Job: {describe_api_exception(ex)}",
                self.job_name,
            )
            raise
        if created:
            await self.try_update_phase(
                PackageBundlePhase.CONTAINER_CREATING, MSG_JOB_CREATED, self.job_name
            )
            return ReconcileResult.requeue_now()

        phase, message = await self.fetch_job_phase()
        await self.update_phase(phase, message, self.job_name)
        if phase.is_in_progress:
            return ReconcileResult.requeue_later(self.conf.package_poll_interval_seconds)
        return ReconcileResult.done()

    async def fetch_job_phase(self) -> Tuple[PackageBundlePhase, str]:
        job = await self.fetch_job(self.batch_v1_api, self.job_name, self.namespace)
        phase, message = derive_phase(job)
        self.logger.info(f"Job {self.job_name} observed as {phase.value}: {message}")
        return phase, message

    async def fetch(self, name: str, namespace: str) -> Optional[Dict]:
        """Fetch actual PackageBundle in kubernetes."""
        return await self.get_custom_object(
            self.custom_objects_api,
            namespace=namespace,
            group=self.GROUP_NAME,
            version=self.GROUP_VERSION,
            plural=self.PLURAL_NAME,
            name=name,
        )

    async def fetch_latest(self) -> Dict:
        """Fetch the stored object. A missing object raises ApiException(404)."""
        return await self.custom_objects_api.get_namespaced_custom_object(
            group=self.GROUP_NAME,
            version=self.GROUP_VERSION,
            namespace=self.namespace,
            plural=self.PLURAL_NAME,
            name=self.name,
        )

    async def update_phase(
        self, phase: PackageBundlePhase, message: str, job_name: str
    ) -> bool:
        """Persist a phase if it differs from the stored one.

        Each attempt re-reads the stored object and writes against its
        resourceVersion. Stale writes are retried up to
        `status_update_max_retries` attempts; the last conflict propagates.

        Returns:
            True if the status was written.
        """
        attempts = self.conf.status_update_max_retries
        for attempt in range(1, attempts + 1):
            latest = await self.fetch_latest()
            stored = latest.get("status") or {}
            stored_phase = PackageBundleStatusSchema().load(stored).phase
            if stored_phase == phase:
                self.logger.debug(f"PackageBundle {self.name} already {phase.value}")
                return False

            body = dict(latest)
            body["status"] = dict(
                stored,
                phase=phase.value,
                message=message,
                jobName=job_name,
                lastTransitionTime=now(),
            )
            try:
                await self.replace_custom_object_status(
                    self.custom_objects_api,
                    namespace=self.namespace,
                    group=self.GROUP_NAME,
                    version=self.GROUP_VERSION,
                    plural=self.PLURAL_NAME,
                    name=self.name,
                    body=body,
                )
            except ApiException as ex:
                if not conflict_error(ex):
                    raise
                self.sensor.on_status_update_conflict(self.name, self.namespace, attempt)
                if attempt == attempts:
                    raise
                self.logger.info(
                    f"Status of PackageBundle {self.name} changed concurrently, "
                    f"retrying ({attempt}/{attempts})"
                )
                await asyncio.sleep(self.conf.status_update_retry_delay_seconds)
                continue

            from_phase = stored_phase.value if stored_phase else None
            self.logger.info(
                f"PackageBundle {self.name} phase {from_phase} -> {phase.value}: {message}"
            )
            self.sensor.on_phase_transition(
                self.name, self.namespace, from_phase, phase.value
            )
            self.status.phase = phase
            self.status.message = message
            self.status.job_name = job_name
            self.status.last_transition_time = body["status"]["lastTransitionTime"]
            return True

    async def try_update_phase(
        self, phase: PackageBundlePhase, message: str, job_name: str
    ) -> bool:
        """Best effort status write; a failure is logged and otherwise ignored."""
        try:
            return await self.update_phase(phase, message, job_name)
        except ApiException as ex:
            self.logger.error(
                f"Failed to set PackageBundle {self.name} to {phase.value}: "
                f"{describe_api_exception(ex)}"
            )
            return False

    def prepare_persistent_volume_claim(self) -> V1PersistentVolumeClaim:
        """Build the claim that receives the downloaded packages."""
        return V1PersistentVolumeClaim(
            api_version="v1",
            kind="PersistentVolumeClaim",
            metadata=V1ObjectMeta(
                name=self.persistent_volume_claim_name,
                namespace=self.namespace,
                labels=self.labels.as_dict(),
                owner_references=self.owner_references(),
            ),
            spec=V1PersistentVolumeClaimSpec(
                access_modes=[self.ACCESS_MODE],
                resources=V1ResourceRequirements(
                    requests={"storage": self.storage_size}
                ),
            ),
        )

    @property
    def storage_size(self) -> str:
        return self.spec.storage_size or self.conf.default_storage_size

    def prepare_clone_script(self) -> str:
        """Shell script the downloader container runs."""
        source = self.spec.source
        options = []
        if self.spec.insecure_tls:
            options.append("-c http.sslVerify=false")
        if source.branch:
            options.append(f"--branch {shlex.quote(source.branch)} --single-branch")
        clone = " ".join(["git clone", *options, shlex.quote(source.url)])

        lines = []
        if self.http_auth_secret_ref:
            lines.append(
                "git config --global credential.helper "
                "'!f() { echo \"username=${GIT_USERNAME}\"; "
                "echo \"password=${GIT_PASSWORD}\"; }; f'"
            )
        if source.path:
            path = source.path.strip("/")
            lines.append(f"{clone} {self.CHECKOUT_DIR}")
            lines.append(
                f"cp -r {self.CHECKOUT_DIR}/{shlex.quote(path)}/. {self.PACKAGES_DIR}/"
            )
        else:
            lines.append(f"cd {self.PACKAGES_DIR} && {clone}")
        return " && ".join(lines)

    @property
    def ssh_key_secret_ref(self) -> Optional[str]:
        credentials = self.spec.credentials
        return credentials.ssh_key_secret_ref if credentials else None

    @property
    def http_auth_secret_ref(self) -> Optional[str]:
        credentials = self.spec.credentials
        return credentials.http_auth_secret_ref if credentials else None

    def prepare_env_vars(self) -> List[V1EnvVar]:
        env_vars = []
        if self.ssh_key_secret_ref:
            env_vars.append(
                V1EnvVar(
                    name="GIT_SSH_COMMAND",
                    value=(
                        f"ssh -i {self.SSH_KEY_DIR}/{self.SSH_KEY_FILE} "
                        "-o StrictHostKeyChecking=no -o UserKnownHostsFile=/dev/null"
                    ),
                )
            )
        if self.http_auth_secret_ref:
            for env_name, key in (
                ("GIT_USERNAME", self.HTTP_USERNAME_KEY),
                ("GIT_PASSWORD", self.HTTP_PASSWORD_KEY),
            ):
                env_vars.append(
                    V1EnvVar(
                        name=env_name,
                        value_from=V1EnvVarSource(
                            secret_key_ref=V1SecretKeySelector(
                                name=self.http_auth_secret_ref, key=key
                            )
                        ),
                    )
                )
        return env_vars

    def prepare_volumes(self) -> List[V1Volume]:
        volumes = [
            V1Volume(
                name=PackageBundleResources.storage_volume_name(),
                persistent_volume_claim=V1PersistentVolumeClaimVolumeSource(
                    claim_name=self.persistent_volume_claim_name
                ),
            )
        ]
        if self.ssh_key_secret_ref:
            volumes.append(
                V1Volume(
                    name=PackageBundleResources.ssh_key_volume_name(),
                    secret=V1SecretVolumeSource(
                        secret_name=self.ssh_key_secret_ref,
                        default_mode=self.SSH_KEY_MODE,
                    ),
                )
            )
        return volumes

    def prepare_volume_mounts(self) -> List[V1VolumeMount]:
        volume_mounts = [
            V1VolumeMount(
                name=PackageBundleResources.storage_volume_name(),
                mount_path=self.PACKAGES_DIR,
            )
        ]
        if self.ssh_key_secret_ref:
            volume_mounts.append(
                V1VolumeMount(
                    name=PackageBundleResources.ssh_key_volume_name(),
                    mount_path=self.SSH_KEY_DIR,
                    read_only=True,
                )
            )
        return volume_mounts

    def prepare_downloader_container(self) -> V1Container:
        return V1Container(
            name=self.DOWNLOADER_CONTAINER_NAME,
            image=self.conf.downloader_image,
            command=["/bin/sh"],
            args=["-c", self.prepare_clone_script()],
            env=self.prepare_env_vars() or None,
            volume_mounts=self.prepare_volume_mounts(),
        )

    def prepare_job(self) -> V1Job:
        """Build the Job that clones the package source into the claim."""
        return V1Job(
            api_version="batch/v1",
            kind="Job",
            metadata=V1ObjectMeta(
                name=self.job_name,
                namespace=self.namespace,
                labels=self.labels.as_dict(),
                owner_references=self.owner_references(),
            ),
            spec=V1JobSpec(
                backoff_limit=self.conf.download_job_backoff_limit,
                ttl_seconds_after_finished=self.conf.download_job_ttl_seconds,
                template=V1PodTemplateSpec(
                    spec=V1PodSpec(
                        restart_policy="Never",
                        containers=[self.prepare_downloader_container()],
                        volumes=self.prepare_volumes(),
                    )
                ),
            ),
        )
