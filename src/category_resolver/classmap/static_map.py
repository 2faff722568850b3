"""
Static Class Map

Read-only `ClassId -> Category` table produced by the offline builder and
loaded once at service start. The artifact is a flat JSON object
`{"Q5": "People", ...}`.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Union

from ..config import settings
from ..core.categories import Category, parse_category

logger = logging.getLogger("resolver.classmap")

BUNDLED_MAP_PATH = Path(__file__).resolve().parent.parent / "data" / "class_to_category.json"


class ClassMapError(ValueError):
    """Raised when a class map artifact is malformed."""


class StaticClassMap(Mapping[str, Category]):
    """
    Immutable mapping of taxonomy class ids to top-level categories.
    """

    def __init__(self, mapping: Mapping[str, Category]) -> None:
        self._map: Mapping[str, Category] = MappingProxyType(dict(mapping))

    def __getitem__(self, class_id: str) -> Category:
        return self._map[class_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._map)

    def __len__(self) -> int:
        return len(self._map)

    def lookup(self, class_id: str) -> Optional[Category]:
        return self._map.get(class_id)

    def category_counts(self) -> Dict[str, int]:
        return dict(Counter(c.value for c in self._map.values()))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, raw: Mapping[str, str]) -> "StaticClassMap":
        """
        Build a map from `{classId: categoryName}`.

        Raises
        ------
        ClassMapError
            If the payload is not an object or names an unknown category.
        """
        if not isinstance(raw, Mapping):
            raise ClassMapError("Class map artifact must be a JSON object.")

        parsed: Dict[str, Category] = {}
        for class_id, name in raw.items():
            try:
                parsed[str(class_id)] = parse_category(name)
            except ValueError as exc:
                raise ClassMapError(f"Invalid category for {class_id}: {name!r}") from exc
        return cls(parsed)

    @classmethod
    def load(cls, path: Union[str, Path, None] = None) -> "StaticClassMap":
        """
        Load the artifact from `path`, `settings.class_map_path`, or the
        bundled default, in that order.
        """
        target = Path(path or settings.class_map_path or BUNDLED_MAP_PATH)
        with target.open("r", encoding="utf-8") as f:
            raw = json.load(f)

        class_map = cls.from_dict(raw)
        logger.info("Loaded static class map from %s (%d classes)", target, len(class_map))
        return class_map

    def to_dict(self) -> Dict[str, str]:
        return {class_id: category.value for class_id, category in self._map.items()}

    def save(self, path: Union[str, Path]) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, sort_keys=False)
