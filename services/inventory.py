import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from services import units
from services.errors import DuplicateNameError, EmptyHistoryError, NoCurrentLedgerError
from services.ingredients import Ingredient, normalize_name
from services.ledger import AddResult, Ledger

logger = logging.getLogger(__name__)


class InventoryManager:
    """Owns every storage ledger, the current selection and the navigation history.

    History holds storage keys rather than ledgers, so a removed storage is
    simply dropped from it. A `None` entry stands for "no storage selected".
    """

    def __init__(self):
        self._ledgers: Dict[str, Ledger] = {}
        self._current_key: Optional[str] = None
        self._history: List[Optional[str]] = []

    # --- Storages ---

    def create_ledger(self, name: str) -> Ledger:
        key = normalize_name(name)
        if not key:
            raise ValueError("Storage name cannot be empty.")
        if key in self._ledgers:
            raise DuplicateNameError(f"Storage '{self._ledgers[key].storage_name}' already exists.")
        ledger = Ledger(name)
        self._ledgers[key] = ledger
        logger.info("Storage '%s' created.", ledger.storage_name)
        return ledger

    def remove_ledger(self, name: str) -> bool:
        key = normalize_name(name)
        ledger = self._ledgers.pop(key, None)
        if ledger is None:
            return False
        self._history = [entry for entry in self._history if entry != key]
        if self._current_key == key:
            self._current_key = None
        logger.info("Storage '%s' removed.", ledger.storage_name)
        return True

    def get_ledger(self, name: str) -> Optional[Ledger]:
        return self._ledgers.get(normalize_name(name))

    def ledgers(self) -> List[Ledger]:
        return [self._ledgers[key] for key in sorted(self._ledgers)]

    def storage_names(self) -> List[str]:
        return [ledger.storage_name for ledger in self.ledgers()]

    # --- Navigation ---

    @property
    def current(self) -> Optional[Ledger]:
        if self._current_key is None:
            return None
        return self._ledgers.get(self._current_key)

    @property
    def history(self) -> List[Optional[str]]:
        return list(self._history)

    def require_current(self) -> Ledger:
        ledger = self.current
        if ledger is None:
            raise NoCurrentLedgerError()
        return ledger

    def set_current(self, name: str) -> bool:
        """Select a storage. Unknown names leave the selection untouched and return False."""
        key = normalize_name(name)
        if key not in self._ledgers:
            logger.warning("Navigation to unknown storage '%s' ignored.", name)
            return False
        self._history.append(self._current_key)
        self._current_key = key
        return True

    def go_back(self) -> Optional[Ledger]:
        if not self._history:
            raise EmptyHistoryError("History is empty, there is nowhere to go back to.")
        self._current_key = self._history.pop()
        return self.current

    # --- Current storage ---

    def add_ingredient(self, ingredient: Ingredient) -> AddResult:
        return self.require_current().add(ingredient)

    def remove_ingredient(self, batch: Ingredient) -> bool:
        """Remove one batch from the current storage."""
        return self.require_current().remove_ingredient(batch)

    def find_in_current(self, fragment: str) -> List[Ingredient]:
        return self.require_current().find(fragment)

    def remove_expired_from_current(self, today: Optional[date] = None) -> Tuple[List[Ingredient], float]:
        removed = self.require_current().remove_expired(today)
        lost = units.round_amount(sum(batch.value for batch in removed))
        return removed, lost

    # --- Across storages ---

    def find_everywhere(self, fragment: str) -> Dict[str, List[Ingredient]]:
        found: Dict[str, List[Ingredient]] = {}
        for ledger in self.ledgers():
            matches = ledger.find(fragment)
            if matches:
                found[ledger.storage_name] = matches
        return found

    def aggregate_expired(self, today: Optional[date] = None) -> List[Tuple[str, Ingredient]]:
        today = today or date.today()
        return [
            (ledger.storage_name, batch)
            for ledger in self.ledgers()
            for batch in ledger.list_expired(today)
        ]

    def aggregate_total_value(self) -> float:
        return units.round_amount(sum(ledger.total_value() for ledger in self.ledgers()))

    def entry_count(self) -> int:
        return sum(len(ledger) for ledger in self.ledgers())
