"""Pydantic request/response schemas.

Learn: Field names are snake_case in Python and camelCase on the wire
(categoryId, accessToken, ...). CamelModel handles the translation, and
populate_by_name lets tests and services build models with either name.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


def reject_nulls(model: BaseModel, *fields: str) -> None:
    """Explicit null is only allowed on nullable columns in a PATCH body."""
    for name in fields:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")
