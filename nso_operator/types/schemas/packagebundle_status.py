from marshmallow import fields, pre_load
from nso_operator.types.base import BaseSchema
from nso_operator.types.models import PackageBundlePhase, PackageBundleStatus

KNOWN_PHASES = {phase.value for phase in PackageBundlePhase}


class PackageBundleStatusSchema(BaseSchema):
    """Reads the stored status. Keys owned by kopf itself pass through untouched."""

    __model__ = PackageBundleStatus

    phase = fields.Enum(
        PackageBundlePhase,
        by_value=True,
        data_key="phase",
        allow_none=True,
        load_default=None,
    )
    message = fields.Str(data_key="message", allow_none=True, load_default=None)
    job_name = fields.Str(data_key="jobName", allow_none=True, load_default=None)
    last_transition_time = fields.Str(
        data_key="lastTransitionTime", allow_none=True, load_default=None
    )

    @pre_load
    def unset_unknown_phase(self, data, **kwargs):
        """An empty or unrecognized stored phase reads as no phase at all."""
        if data.get("phase") not in KNOWN_PHASES:
            data = dict(data, phase=None)
        return data
