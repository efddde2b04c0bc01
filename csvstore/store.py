"""
In-memory record store and its CSV-backed extension.

MemoryStore only knows how to hold records in order and find them by identity.
CsvStore fills it from CSV text and writes its contents back out.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional

from .codec import Record, parse_with_report, serialize
from .models import CsvConfig, SerializeOptions
from .rules import AUTO_ID_PROPERTY, DEFAULT_ID_PROPERTY


logger = logging.getLogger(__name__)


class MemoryStore:
    def __init__(self, data: Optional[Iterable[Record]] = None, id_property: str = DEFAULT_ID_PROPERTY):
        self.id_property = id_property
        self.data: List[Record] = []
        self.index: Dict[Hashable, int] = {}
        if data is not None:
            self.load(data)

    def load(self, records: Iterable[Record]) -> None:
        """Replace the store contents, indexing each record by its identity."""
        self.data = list(records)
        self.index = {}
        for i, record in enumerate(self.data):
            self.index[self.get_identity(record)] = i

    def get_identity(self, record: Mapping[str, Any]) -> Any:
        return record.get(self.id_property)

    def get(self, identity: Hashable) -> Optional[Record]:
        i = self.index.get(identity)
        return self.data[i] if i is not None else None

    def __len__(self) -> int:
        return len(self.data)


class CsvStore(MemoryStore):
    """
    Memory store populated from a CSV-formatted string.

    If config.id_property is empty, identities are generated from row order
    (starting at 1) and stored under AUTO_ID_PROPERTY.
    """

    def __init__(self, data: Optional[str] = None, config: Optional[CsvConfig] = None):
        self.config = config or CsvConfig()
        self.field_names: Optional[List[str]] = (
            list(self.config.field_names) if self.config.field_names is not None else None
        )
        self.warnings: List[dict] = []
        super().__init__(id_property=self.config.id_property or AUTO_ID_PROPERTY)
        if data is not None:
            self.set_data(data)

    def set_data(self, text: str) -> None:
        records, field_names, warnings = parse_with_report(text, self.config)
        self.field_names = field_names
        self.warnings = warnings
        if warnings:
            logger.info("Csv: %d rows discarded while loading store", len(warnings))
        self.load(records)

    def to_csv(self, options: Optional[SerializeOptions] = None) -> str:
        """Return the store's data re-exported to CSV."""
        return serialize(self.field_names or [], self.data, options, self.config)
