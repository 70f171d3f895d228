"""
storefront/schemas/base.py

Purpose: Shared request model base

- Accepts camelCase JSON (the SPA's wire format) and snake_case alike
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
