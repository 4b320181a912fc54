from marshmallow import fields
from nso_operator.types.base import BaseSchema
from nso_operator.types.models import ServicePort


class ServicePortSchema(BaseSchema):
    __model__ = ServicePort

    name = fields.Str(data_key="name", allow_none=True, load_default=None)
    port = fields.Int(data_key="port", required=True)
    target_port = fields.Raw(data_key="targetPort", allow_none=True, load_default=None)
    protocol = fields.Str(data_key="protocol", allow_none=True, load_default=None)
    app_protocol = fields.Str(
        data_key="appProtocol", allow_none=True, load_default=None
    )
    node_port = fields.Int(data_key="nodePort", allow_none=True, load_default=None)
