"""
Schema Base - Shared pydantic configuration
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """
    Base for every request/response schema.

    Fields are snake_case in Python and camelCase on the wire
    (sprints_quantity <-> sprintsQuantity). Input accepts both spellings.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,  # Allow creation from SQLAlchemy models
    )

def clean_optional_text(value):
    """Trim strings and turn blank ones into None"""
    if value is None:
        return None
    value = str(value).strip()
    return value or None

TEXT_MAX_LENGTH = 255  # Matches the VARCHAR(255) columns

def clean_short_text(value):
    """clean_optional_text for VARCHAR(255) columns; longer values are rejected"""
    value = clean_optional_text(value)
    if value is not None and len(value) > TEXT_MAX_LENGTH:
        raise ValueError(f'Value cannot exceed {TEXT_MAX_LENGTH} characters (database constraint)')
    return value
