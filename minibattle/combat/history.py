"""Completed battle history (persistence hand-off)."""
import logging
from typing import List, Optional

from ..config import settings
from .models.battle_result import BattleRecord

logger = logging.getLogger(__name__)


class BattleHistory:
    """
    In-memory store of completed battle records, newest first.

    A persistence layer can subscribe with ``on_record`` to receive each record
    as it is archived.
    """

    def __init__(self, limit: Optional[int] = None, on_record=None):
        self.limit = limit if limit is not None else settings.history_limit
        self.on_record = on_record
        self._records: List[BattleRecord] = []

    def add(self, record: BattleRecord):
        """Store the record, then notify ``on_record``; callback errors propagate."""
        self._records.insert(0, record)
        del self._records[self.limit:]
        logger.debug(
            "Archived battle %s (%s, winner=%s)",
            record.battle_id,
            record.end_reason.value,
            record.winner_id,
        )
        if self.on_record:
            self.on_record(record)

    def get(self, battle_id: str) -> Optional[BattleRecord]:
        for record in self._records:
            if record.battle_id == battle_id:
                return record
        return None

    def list(self) -> List[BattleRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
