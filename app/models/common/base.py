"""Base classes for all domain entities and schemas."""

from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any

from pydantic import BaseModel


@dataclass
class BaseEntity:
    """Base class for all entities."""

    def to_dict(self) -> dict[str, Any]:
        """Convert entity to dictionary."""
        return asdict(self)


@lru_cache(maxsize=None)
def _alias_map(cls: type[BaseModel]) -> dict[str, str]:
    """Map of alias -> attribute name for a model class."""
    return {f.alias: name for name, f in cls.model_fields.items() if f.alias}


class BaseSchema(BaseModel):
    """Base model whose fields are reachable by attribute name or camelCase alias."""

    class Config:
        populate_by_name = True

    def fact(self, name: str) -> Any:
        """Read a field by attribute name, alias or extra key. Missing -> None."""
        cls = type(self)
        if name in cls.model_fields:
            return getattr(self, name)
        attr = _alias_map(cls).get(name)
        if attr is not None:
            return getattr(self, attr)
        return (self.model_extra or {}).get(name)

    def to_json(self) -> dict[str, Any]:
        """Dump with aliases, JSON-safe."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
