"""
Base schemas with common functionality.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, create_model
from pydantic.alias_generators import to_camel
from typing import Optional

class BaseSchema(BaseModel):
    """
    Base schema for the dashboard API.

    Fields are snake_case in Python and camelCase on the wire; either spelling
    is accepted on input.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @classmethod
    def create_update_model(cls, name: str = None):
        """
        Create an update model based on this schema with all fields optional.
        Useful for PATCH endpoints where all fields should be optional.
        """
        if not name:
            name = f"{cls.__name__}Update"

        fields = {
            field_name: (Optional[field.annotation], None)
            for field_name, field in cls.model_fields.items()
        }
        return create_model(name, __base__=BaseSchema, **fields)

class TimestampedSchema(BaseSchema):
    """Base schema for models with timestamp fields"""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
