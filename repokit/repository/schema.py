"""Explicit per-entity schema: primary key name and mass-assignable fields."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class EntitySchema:
    """
    Describes how a repository may write an entity.

    ``fillable`` is the ordered whitelist of attributes that bulk assignment
    (create/update/make) is allowed to set. Anything else in an attribute map
    is ignored on write.
    """

    fillable: Tuple[str, ...]
    primary_key: str = "id"
    # Python type of the primary key, used to coerce request strings ("5" -> 5)
    key_type: Optional[type] = int
    hidden: Tuple[str, ...] = field(default=())

    def __post_init__(self):
        object.__setattr__(self, "fillable", tuple(self.fillable))
        object.__setattr__(self, "hidden", tuple(self.hidden))
        if len(set(self.fillable)) != len(self.fillable):
            raise ValueError(f"Duplicate fillable attributes: {self.fillable}")

    def is_fillable(self, attribute: str) -> bool:
        return attribute in self.fillable

    def fillable_from(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Keep only the fillable keys of ``data``."""
        return {key: value for key, value in data.items() if self.is_fillable(key)}

    def coerce_key(self, value: Any) -> Any:
        if self.key_type is int and isinstance(value, str) and value.strip().isdigit():
            return int(value)
        return value
