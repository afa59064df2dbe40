"""
Shared pydantic base classes.

``ApiModel`` gives every schema camelCase aliases for the JSON wire
format while still accepting snake_case field names on input.
"""

from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class SocialLinks(ApiModel):
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    youtube: Optional[str] = None
    tiktok: Optional[str] = None
    linkedin: Optional[str] = None


class OkResponse(ApiModel):
    ok: bool = True
