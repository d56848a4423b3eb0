"""Per-batch memoization of association lookups."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping

from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class LookupEntry:
    computed: bool = False
    table: Dict[Any, Any] = field(default_factory=dict)


class LookupCache:
    """
    Association name -> {record id: value} table for one presentation batch.

    Each table is computed at most once, over every id in the batch, and is
    only stored once complete. Create one per batch; never share across
    requests.
    """

    def __init__(self, record_ids: Iterable[Any] = ()):
        self._batch_ids: List[Any] = list(dict.fromkeys(record_ids))
        self._entries: Dict[str, LookupEntry] = {}

    @property
    def batch_ids(self) -> List[Any]:
        return list(self._batch_ids)

    def is_computed(self, name: str) -> bool:
        entry = self._entries.get(name)
        return bool(entry and entry.computed)

    def fetch(
        self,
        name: str,
        record_ids: Iterable[Any],
        compute_fn: Callable[[List[Any]], Mapping[Any, Any]],
    ) -> Mapping[Any, Any]:
        """
        Return the lookup table for ``name``, computing it on first use.

        Args:
            name: Association name
            record_ids: Ids the caller needs; added to the batch if unseen
            compute_fn: Called once with all batch ids, returns {id: value}

        Returns:
            Read-only view of the table
        """
        entry = self._entries.get(name)
        if entry is None or not entry.computed:
            known = set(self._batch_ids)
            for record_id in record_ids:
                if record_id not in known:
                    self._batch_ids.append(record_id)
                    known.add(record_id)
            table = dict(compute_fn(list(self._batch_ids)) or {})
            entry = LookupEntry(computed=True, table=table)
            self._entries[name] = entry
            logger.debug(f"Computed lookup '{name}' for {len(self._batch_ids)} records")
        return MappingProxyType(entry.table)
