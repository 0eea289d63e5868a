"""Schema Base — camelCase wire names over snake_case Python attributes.

Design Decisions:
    - alias_generator=to_camel + populate_by_name: clients send/receive
      subjectId, services keep subject_id (ADR: wire compatibility with existing clients)
    - from_attributes: responses built straight from core records
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )
