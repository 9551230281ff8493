import logging
from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from services import units
from services.ingredients import Ingredient, display_name, normalize_name

logger = logging.getLogger(__name__)


class AddResult(Enum):
    CREATED = "created"
    MERGED = "merged"
    NEW_BATCH = "new_batch"


def _sort_key(ingredient: Ingredient):
    return (ingredient.key, ingredient.expiry)


class Ledger:
    """Contents of one storage.

    Entries are keyed by normalized ingredient name. A key holds one batch
    per expiry date: adding a batch with a known expiry merges into it,
    a new expiry date starts another batch.
    """

    def __init__(self, storage_name: str):
        if not str(storage_name or "").strip():
            raise ValueError("Storage name cannot be empty.")
        self.storage_name = " ".join(storage_name.split())
        self._entries: Dict[str, List[Ingredient]] = {}

    @property
    def key(self) -> str:
        return normalize_name(self.storage_name)

    def __len__(self) -> int:
        return sum(len(batches) for batches in self._entries.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._entries

    def __repr__(self) -> str:
        return f"Ledger({self.storage_name!r}, entries={len(self)})"

    def add(self, ingredient: Ingredient) -> AddResult:
        batches = self._entries.get(ingredient.key)
        if batches is None:
            self._entries[ingredient.key] = [ingredient]
            logger.debug("Added %s to %s", ingredient.name, self.storage_name)
            return AddResult.CREATED

        for existing in batches:
            if existing.can_merge(ingredient):
                existing.merge(ingredient)
                return AddResult.MERGED

        batches.append(ingredient)
        batches.sort(key=lambda batch: batch.expiry)
        logger.debug(
            "Added new batch of %s (best before %s) to %s",
            ingredient.name,
            ingredient.expiry,
            self.storage_name,
        )
        return AddResult.NEW_BATCH

    def get(self, name: str) -> List[Ingredient]:
        return list(self._entries.get(normalize_name(name), []))

    def remove(self, name: str) -> bool:
        return self._entries.pop(normalize_name(name), None) is not None

    def remove_ingredient(self, ingredient: Ingredient) -> bool:
        batches = self._entries.get(ingredient.key)
        if not batches:
            return False
        for index, batch in enumerate(batches):
            if batch is ingredient:
                del batches[index]
                break
        else:
            return False
        if not batches:
            del self._entries[ingredient.key]
        return True

    def ingredients(self) -> List[Ingredient]:
        return sorted(
            (batch for batches in self._entries.values() for batch in batches),
            key=_sort_key,
        )

    def names(self) -> List[str]:
        return [display_name(key) for key in sorted(self._entries)]

    def find(self, fragment: str) -> List[Ingredient]:
        needle = normalize_name(fragment)
        return [batch for batch in self.ingredients() if needle in batch.key]

    def list_expired(self, today: Optional[date] = None) -> List[Ingredient]:
        today = today or date.today()
        return [batch for batch in self.ingredients() if batch.is_expired(today)]

    def remove_expired(self, today: Optional[date] = None) -> List[Ingredient]:
        expired = self.list_expired(today)
        for batch in expired:
            self.remove_ingredient(batch)
        if expired:
            logger.info("Removed %d expired entries from %s", len(expired), self.storage_name)
        return expired

    def total_value(self) -> float:
        return units.round_amount(sum(batch.value for batch in self.ingredients()))
