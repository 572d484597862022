"""
Base Pydantic schemas
"""

from uuid import UUID
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base schema with common configuration
    """

    model_config = ConfigDict(
        from_attributes=True,  # Enable ORM mode (SQLAlchemy compatibility)
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=False,  # Return enum objects, not string values
    )


class IDSchema(BaseSchema):
    """
    Schema with UUID ID
    """

    id: UUID
