"""Generic record object used as the default materialization target."""

from typing import Any, Dict, Hashable, Mapping

from pydantic import BaseModel, Field

from querykv.errors import MaterializationError
from querykv.query.values import copy_attributes


class Record(BaseModel):
    """A record key together with its (projected) attributes."""

    key: Any = Field(..., description="Record key")
    attributes: Dict[str, Any] = Field(default_factory=dict, description="Attribute name to value")

    def get(self, name: str, default: Any = None) -> Any:
        """Get an attribute value, or default if the attribute is absent."""
        return self.attributes.get(name, default)


def record_from_entry(entry: Any) -> Record:
    """Build a Record from an Entry(key, attributes)."""
    key, attributes = entry
    return Record(key=key, attributes=copy_attributes(attributes))


def record_key(record: Record) -> Hashable:
    """Inverse of record_from_entry."""
    return record.key


def require_attribute(attributes: Mapping[str, Any], name: str) -> Any:
    """
    Get an attribute an object maker cannot do without.

    A stored null is returned as None; only a missing attribute fails.

    Raises:
        MaterializationError: If the attribute is absent
    """
    if name not in attributes:
        raise MaterializationError(
            f"Missing required attribute: {name}",
            details={"attribute": name, "present": sorted(attributes)},
        )
    return attributes[name]
