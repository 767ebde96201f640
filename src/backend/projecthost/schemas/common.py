"""Shared pydantic base for the public JSON API and registrar payloads.

Python attributes are snake_case; the wire format is camelCase (projectName,
customDomain, usingProviderDNS...). Both spellings are accepted on input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    message: str
    request_id: str = ""
