"""
Weighted entity lists for session bookkeeping.

Characters and threads are tracked the same way: a display name, a
normalized key used for matching, and a weight (1-3) that rises each time
the entity features in a scene. The list type is generic over the entity
class; callers inject a factory that builds a new entity from a name and
weight.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, Protocol, TypeVar


MIN_WEIGHT = 1
MAX_WEIGHT = 3


def normalize_key(name: str) -> str:
    """Matching key for a name: trimmed and lowercased."""
    return name.strip().lower()


class WeightedItem(Protocol):
    name: str
    key: str
    weight: int


@dataclass
class WeightedEntity:
    """A named entity with a bounded weight. `key` is derived from the name."""

    name: str
    weight: int = MIN_WEIGHT
    key: str = field(init=False)

    def __post_init__(self):
        self.key = normalize_key(self.name)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "weight": self.weight}


T = TypeVar("T", bound=WeightedItem)


class WeightedList(Generic[T]):
    """
    Ordered list of weighted entities, at most one per normalized key.

    Iteration follows insertion order. Matching is case-insensitive and
    ignores surrounding whitespace; display names are never rewritten.
    """

    def __init__(
        self,
        factory: Callable[[str, int], T] = WeightedEntity,  # type: ignore[assignment]
        entries: Optional[Iterable[T]] = None,
        max_weight: int = MAX_WEIGHT,
    ):
        self._factory = factory
        self._entries: list[T] = list(entries) if entries is not None else []
        self.max_weight = max_weight

    def add_new(self, names: Iterable[str]) -> list[T]:
        """
        Insert each name not already present, with weight 1.

        Empty names and names whose key is already in the list are skipped.

        Returns:
            The entities that were created
        """
        added: list[T] = []
        for name in names:
            trimmed = name.strip()
            if not trimmed:
                continue
            if self.get(trimmed) is not None:
                continue
            entity = self._factory(trimmed, MIN_WEIGHT)
            self._entries.append(entity)
            added.append(entity)
        return added

    def feature_existing(self, names: Iterable[str]) -> None:
        """
        Reinforce entities that featured in a scene.

        Every occurrence of a name adds 1 to the matching entity's weight,
        capped at max_weight. Unknown names are ignored; nothing is inserted.
        """
        for name in names:
            key = normalize_key(name)
            if not key:
                continue
            for entity in self._entries:
                if entity.key == key:
                    entity.weight = min(self.max_weight, entity.weight + 1)

    def remove(self, names: Iterable[str]) -> None:
        """Delete every entity whose key matches one of the names."""
        keys = {normalize_key(name) for name in names}
        keys.discard("")
        if keys:
            self._entries = [entity for entity in self._entries if entity.key not in keys]

    def get(self, name: str) -> Optional[T]:
        key = normalize_key(name)
        for entity in self._entries:
            if entity.key == key:
                return entity
        return None

    @property
    def entries(self) -> list[T]:
        return list(self._entries)

    def names(self) -> list[str]:
        return [entity.name for entity in self._entries]

    def sorted_by_weight(self) -> list[T]:
        """Heaviest first; equal weights keep insertion order."""
        return sorted(self._entries, key=lambda entity: -entity.weight)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._entries))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def to_list(self) -> list[dict[str, Any]]:
        return [{"name": entity.name, "weight": entity.weight} for entity in self._entries]

    @classmethod
    def from_list(
        cls,
        data: Iterable[dict[str, Any]],
        factory: Callable[[str, int], T] = WeightedEntity,  # type: ignore[assignment]
        max_weight: int = MAX_WEIGHT,
    ) -> "WeightedList[T]":
        """
        Rebuild a list saved by to_list().

        The first entry for a key wins; later duplicates and blank names are
        dropped, and weights are clamped to MIN_WEIGHT..max_weight.
        """
        entries: list[T] = []
        seen: set[str] = set()
        for item in data:
            name = item["name"].strip()
            key = normalize_key(name)
            if not key or key in seen:
                continue
            seen.add(key)
            weight = max(MIN_WEIGHT, min(max_weight, int(item.get("weight", MIN_WEIGHT))))
            entries.append(factory(name, weight))
        return cls(factory=factory, entries=entries, max_weight=max_weight)
