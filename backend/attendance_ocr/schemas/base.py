from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    snake_case in Python, camelCase on the wire (roster uploads, API
    responses, validation events consumed by the notification subsystem).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
