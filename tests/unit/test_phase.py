"""Unit tests for mapping download Job state to PackageBundle phases."""

from kubernetes_asyncio.client import V1Job, V1JobCondition, V1JobStatus, V1ObjectMeta
from nso_operator.resources.phase import derive_phase
from nso_operator.types.models import PackageBundlePhase


def job_with(**status) -> V1Job:
    return V1Job(metadata=V1ObjectMeta(name="download-pb1"), status=V1JobStatus(**status))


def condition(type_: str, status: str = "True", message: str = None) -> V1JobCondition:
    return V1JobCondition(type=type_, status=status, message=message)


class TestDerivePhase:
    """Tests for derive_phase."""

    def test_missing_job_is_pending(self):
        assert derive_phase(None) == (PackageBundlePhase.PENDING, "Job not found")

    def test_complete_condition_is_downloaded(self):
        job = job_with(succeeded=1, conditions=[condition("Complete")])
        assert derive_phase(job) == (
            PackageBundlePhase.DOWNLOADED,
            "Package download completed successfully",
        )

    def test_failed_condition_uses_its_message(self):
        job = job_with(failed=4, conditions=[condition("Failed", message="X")])
        assert derive_phase(job) == (PackageBundlePhase.FAILED_TO_DOWNLOAD, "X")

    def test_failed_condition_without_message_uses_default(self):
        job = job_with(failed=4, conditions=[condition("Failed")])
        assert derive_phase(job) == (
            PackageBundlePhase.FAILED_TO_DOWNLOAD,
            "Package download failed",
        )

    def test_complete_wins_over_failed(self):
        job = job_with(
            conditions=[condition("Failed", message="boom"), condition("Complete")]
        )
        phase, _ = derive_phase(job)
        assert phase == PackageBundlePhase.DOWNLOADED

    def test_false_conditions_are_ignored(self):
        job = job_with(active=1, conditions=[condition("Failed", status="False")])
        assert derive_phase(job) == (
            PackageBundlePhase.DOWNLOADING,
            "Package download in progress",
        )

    def test_active_job_is_downloading(self):
        phase, _ = derive_phase(job_with(active=1))
        assert phase == PackageBundlePhase.DOWNLOADING

    def test_idle_job_is_creating_containers(self):
        assert derive_phase(job_with(active=0, succeeded=0, failed=0)) == (
            PackageBundlePhase.CONTAINER_CREATING,
            "Job is creating containers",
        )

    def test_job_without_status_is_creating_containers(self):
        phase, _ = derive_phase(V1Job(metadata=V1ObjectMeta(name="download-pb1")))
        assert phase == PackageBundlePhase.CONTAINER_CREATING

    def test_unmatched_state_falls_back_to_pending(self):
        assert derive_phase(job_with(active=0, failed=1)) == (
            PackageBundlePhase.PENDING,
            "Job status unknown",
        )
        assert not PackageBundlePhase.PENDING.is_terminal


class TestPackageBundlePhase:
    def test_terminal_phases(self):
        terminal = {p for p in PackageBundlePhase if p.is_terminal}
        assert terminal == {
            PackageBundlePhase.DOWNLOADED,
            PackageBundlePhase.FAILED_TO_DOWNLOAD,
        }

    def test_in_progress_phases(self):
        in_progress = {p for p in PackageBundlePhase if p.is_in_progress}
        assert in_progress == {
            PackageBundlePhase.CONTAINER_CREATING,
            PackageBundlePhase.DOWNLOADING,
        }
