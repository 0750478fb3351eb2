# mobile_service/schemas/base.py
"""
Shared base for API models. The booking and staff frontends speak camelCase
(timeSlot, mechanicId); Python code uses snake_case.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
