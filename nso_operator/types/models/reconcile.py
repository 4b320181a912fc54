from typing import NamedTuple, Optional


class ReconcileRequest(NamedTuple):
    """Identifies the object a reconcile trigger concerns."""

    namespace: str
    name: str


class ReconcileResult(NamedTuple):
    """Outcome of a single reconcile pass."""

    requeue: bool = False
    requeue_after: Optional[float] = None

    @classmethod
    def done(cls) -> "ReconcileResult":
        return cls()

    @classmethod
    def requeue_now(cls) -> "ReconcileResult":
        return cls(requeue=True)

    @classmethod
    def requeue_later(cls, delay: float) -> "ReconcileResult":
        return cls(requeue=True, requeue_after=delay)

    @property
    def is_done(self) -> bool:
        return not self.requeue
