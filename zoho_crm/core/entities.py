"""Entity containers returned by the API clients."""

from collections.abc import Callable, Iterable
from typing import Any


class Entity:
    """
    A record or object returned by the API, backed by a dictionary.

    Attribute values are accessed with get(), or with item access.
    """

    def __init__(self, attributes: dict[str, Any] | None = None):
        self._attributes = dict(attributes or {})

    def get(self, name: str, default: Any = None) -> Any:
        """Get an attribute value, or a default if it is missing."""
        return self._attributes.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self._attributes[name] = value

    def has(self, name: str) -> bool:
        return name in self._attributes

    def to_dict(self) -> dict[str, Any]:
        """Return a copy of the entity attributes."""
        return dict(self._attributes)

    def __getitem__(self, name: str) -> Any:
        return self._attributes[name]

    def __contains__(self, name: str) -> bool:
        return name in self._attributes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return type(self) is type(other) and self._attributes == other._attributes

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._attributes!r})"


class Collection(list):
    """Ordered list of entities with a few convenience accessors."""

    def __init__(self, items: Iterable[Any] = ()):
        super().__init__(items)

    def first(self) -> Any:
        """Return the first item, or None if the collection is empty."""
        return self[0] if self else None

    def last(self) -> Any:
        """Return the last item, or None if the collection is empty."""
        return self[-1] if self else None

    def filter(self, predicate: Callable[[Any], bool]) -> "Collection":
        """Return a new collection with the items matching the predicate, in order."""
        return type(self)(item for item in self if predicate(item))

    def pluck(self, name: str) -> list[Any]:
        """Return the value of one attribute for each entity."""
        return [item.get(name) for item in self]

    def to_list(self) -> list[dict[str, Any]]:
        """Convert the entities to plain dictionaries."""
        return [item.to_dict() if isinstance(item, Entity) else item for item in self]
