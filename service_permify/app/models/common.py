"""
Shared value types for Permify request models.
"""

from typing import Optional

from pydantic import BaseModel, Field

from shared.errors import ValidationError


class EntityRef(BaseModel):
    """A typed entity instance, e.g. ``document:1``."""
    type: str = Field(..., description="Entity type")
    id: str = Field(..., description="Entity ID")

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"


def parse_entity_ref(reference: str, default_type: Optional[str] = None) -> EntityRef:
    """Parse a ``type:id`` reference.

    A bare id is accepted only when ``default_type`` is given.
    """
    entity_type, sep, entity_id = reference.partition(":")
    if not sep:
        if default_type is None or not reference:
            raise ValidationError(
                f"Invalid entity reference '{reference}', expected 'type:id'",
                details={"reference": reference}
            )
        return EntityRef(type=default_type, id=reference)

    if not entity_type or not entity_id:
        raise ValidationError(
            f"Invalid entity reference '{reference}', expected 'type:id'",
            details={"reference": reference}
        )
    return EntityRef(type=entity_type, id=entity_id)
