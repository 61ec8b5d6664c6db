"""
Annotation corpus readers and the category directory.

The engine never fetches the corpus itself: a reader loads the annotated
records once per request and the directory resolves rule category ids to
display names. Both are passed explicitly to the engine, there is no
module-level cache.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from autocat.exceptions import CorpusUnavailableError
from autocat.logging_config import get_logger
from autocat.models import AnnotationRecord, Category, UNKNOWN_CATEGORY

logger = get_logger(__name__)


def _load_json_list(path: Path, what: str) -> list[Any]:
    if not path.exists():
        raise CorpusUnavailableError(f"{what} file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CorpusUnavailableError(f"Could not read {what} file {path}: {e}") from e
    if not isinstance(data, list):
        raise CorpusUnavailableError(f"{what} file {path} must hold a JSON array")
    return data


class CategoryDirectory:
    """Resolves rule category ids to category names."""

    def __init__(self, categories: Iterable[Category] = ()):
        self._categories = list(categories)
        self._names = {c.id: c.name for c in self._categories}
        self._known_names = set(self._names.values())

    @classmethod
    def from_raw(cls, raw_categories: Iterable[dict[str, Any]]) -> "CategoryDirectory":
        """Build from stored dicts, accepting `id` or the legacy `_id` field."""
        categories = []
        for raw in raw_categories:
            category_id = raw.get("id", raw.get("_id"))
            if category_id is None or not raw.get("name"):
                logger.warning(f"Skipping category without id or name: {raw}")
                continue
            categories.append(
                Category(
                    id=str(category_id),
                    name=str(raw["name"]),
                    description=raw.get("description"),
                )
            )
        return cls(categories)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "CategoryDirectory":
        return cls.from_raw(_load_json_list(Path(path), "Category"))

    @property
    def categories(self) -> list[Category]:
        return list(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    def resolve(self, category_id: Optional[str]) -> str:
        """
        Category name for a rule's category id.

        An id that is already a known category name resolves to itself.
        Missing or unknown ids resolve to "unknown".
        """
        if not category_id:
            return UNKNOWN_CATEGORY
        if category_id in self._names:
            return self._names[category_id]
        if category_id in self._known_names:
            return category_id
        return UNKNOWN_CATEGORY


class AnnotationCorpusReader(ABC):
    """Source of annotated records."""

    @abstractmethod
    def read_records(self) -> list[AnnotationRecord]:
        """Return every annotated record.

        Raises:
            CorpusUnavailableError: the corpus could not be read
        """


class InMemoryCorpusReader(AnnotationCorpusReader):
    """Corpus held in memory, e.g. records sent in an HTTP request."""

    def __init__(self, records: Iterable[AnnotationRecord] = ()):
        self._records = list(records)

    @classmethod
    def from_raw(cls, raw_records: Iterable[dict[str, Any]]) -> "InMemoryCorpusReader":
        return cls(AnnotationRecord.from_raw(raw) for raw in raw_records)

    def read_records(self) -> list[AnnotationRecord]:
        return list(self._records)


class JsonFileCorpusReader(AnnotationCorpusReader):
    """Corpus exported as a JSON array of annotation records."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def read_records(self) -> list[AnnotationRecord]:
        raw_records = _load_json_list(self.path, "Corpus")
        records = []
        for index, raw in enumerate(raw_records):
            if not isinstance(raw, dict):
                logger.warning(f"Skipping corpus entry #{index}: not an object")
                continue
            records.append(AnnotationRecord.from_raw(raw))
        pattern_count = sum(len(r.annotations) for r in records)
        logger.info(
            f"Loaded {len(records)} annotation records ({pattern_count} patterns) from {self.path}"
        )
        return records
