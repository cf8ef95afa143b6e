"""
Database schema description: the property types this project reads.
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional


class FieldType(Enum):
    TITLE = "title"
    DATE = "date"
    STATUS = "status"
    SELECT = "select"
    UNKNOWN = "unknown"

    @classmethod
    def from_tag(cls, tag: Any) -> "FieldType":
        for member in cls:
            if member.value == tag and member is not cls.UNKNOWN:
                return member
        return cls.UNKNOWN


class SchemaDescriptor:
    """
    Property name to ``FieldType`` table for one Notion database.

    Built fresh from a ``databases.retrieve`` response for every operation.
    """

    def __init__(self, field_types: Optional[Mapping[str, FieldType]] = None):
        self.field_types: Dict[str, FieldType] = dict(field_types or {})

    @classmethod
    def from_database(cls, database: Optional[Mapping[str, Any]]) -> "SchemaDescriptor":
        """
        Build a descriptor from a Notion database object.

        Args:
            database: Response of the database retrieve endpoint

        Returns:
            Descriptor; empty when ``database`` has no properties
        """
        properties = (database or {}).get("properties") or {}
        return cls({
            name: FieldType.from_tag(prop.get("type") if isinstance(prop, Mapping) else None)
            for name, prop in properties.items()
        })

    def type_of(self, name: str) -> Optional[FieldType]:
        """Type of a property, or None if the database has no such property."""
        return self.field_types.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.field_types

    def __repr__(self) -> str:
        types = {name: field_type.value for name, field_type in self.field_types.items()}
        return f"SchemaDescriptor({types})"
