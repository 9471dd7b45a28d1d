"""In-memory pull counts and their persisted representation."""
import json
import math
from typing import Callable, Dict, Iterable, Optional

from .logger import get_logger

logger = get_logger(__name__)


class SaveDataError(ValueError):
    """Raised internally when a persisted payload cannot be used."""


class PullCounterStore:
    """Maps boss ids (or zone names) to the number of attempts."""
    
    def __init__(self, save_data: Optional[Callable[[str], None]] = None):
        """
        Initialize the store.
        
        Args:
            save_data: Called with the serialized counts after every change.
                The call is fire-and-forget; its result is never inspected.
        """
        self.save_data = save_data
        self.pull_counts: Dict[str, int] = {}
    
    def get(self, boss_id: str) -> int:
        return self.pull_counts.get(boss_id, 0)
    
    def increment(self, boss_id: str) -> int:
        """Add one attempt for a boss and return the new count."""
        count = self.pull_counts.get(boss_id, 0) + 1
        self.pull_counts[boss_id] = count
        return count
    
    def reset(self, boss_ids: Iterable[str]) -> None:
        for boss_id in boss_ids:
            self.pull_counts[boss_id] = 0
            logger.info(f"resetting pull count of: {boss_id}")
    
    def as_dict(self) -> Dict[str, int]:
        return dict(self.pull_counts)
    
    def dumps(self) -> str:
        return json.dumps(self.pull_counts, ensure_ascii=False)
    
    def save(self) -> None:
        """Hand the serialized counts to the persistence callback."""
        if self.save_data is None:
            logger.debug("No persistence configured, counts not saved")
            return
        self.save_data(self.dumps())
    
    def load(self, raw) -> bool:
        """
        Replace the counts with a persisted payload.
        
        Args:
            raw: JSON object text mapping ids to counts, or None/'' for no data
            
        Returns:
            True if the payload was applied, False if it was malformed and the
            store was emptied instead
        """
        if raw is None or raw == '':
            self.pull_counts = {}
            logger.info("No saved pull counts, starting empty")
            return True
        
        try:
            self.pull_counts = self._parse(raw)
        except SaveDataError as e:
            logger.error("onSendSaveData parse error")
            logger.error(f"Discarding saved pull counts: {e}")
            self.pull_counts = {}
            return False
        
        logger.info(f"Loaded {len(self.pull_counts)} saved pull count(s)")
        return True
    
    @staticmethod
    def _parse(raw) -> Dict[str, int]:
        if not isinstance(raw, str):
            raise SaveDataError(f"payload is not a string: {raw!r}")
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SaveDataError(f"payload is not JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise SaveDataError(f"payload is not an object: {raw}")
        
        counts = {}
        for boss_id, count in parsed.items():
            # bool is an int subclass but never a valid count
            if isinstance(count, bool) or not isinstance(count, (int, float)):
                raise SaveDataError(f"count for '{boss_id}' is not a number: {count!r}")
            if not math.isfinite(count) or count < 0 or count != int(count):
                raise SaveDataError(f"count for '{boss_id}' is not a non-negative integer: {count!r}")
            counts[boss_id] = int(count)
        return counts
