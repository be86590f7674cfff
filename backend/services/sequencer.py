# backend/services/sequencer.py
"""
CodeSequencer -- time-partitioned goods codes of the form PREFIX/YY/MM/NNNNN.

The last counter of a partition is read back from the goods table on every
call; nothing is cached in the process, so several service instances can
allocate codes against the same database. The sequencer does not lock.
Two concurrent callers may compute the same code; the unique constraint on
``goods.code`` rejects the loser and InventoryService regenerates.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from config import settings
from models.goods import Goods
from services.clock import Clock, SystemClock
from services.errors import SequenceExhausted

logger = logging.getLogger(__name__)

COUNTER_WIDTH = 5
MAX_COUNTER = 10 ** COUNTER_WIDTH - 1


class CodeSequencer:
    def __init__(self, db: Session, clock: Optional[Clock] = None, prefix: Optional[str] = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.prefix = prefix or settings.CODE_PREFIX

    def partition(self, at: Optional[datetime] = None) -> str:
        """Return the ``PREFIX/YY/MM/`` key for ``at`` (defaults to the clock)."""
        at = at or self.clock.now()
        return f"{self.prefix}/{at.strftime('%y')}/{at.month:02d}/"

    def last_code(self, partition: str) -> Optional[str]:
        # Counters are fixed-width and zero padded, so the string max is the numeric max
        return (
            self.db.query(func.max(Goods.code))
            .filter(Goods.code.like(f"{partition}%"))
            .scalar()
        )

    def next_code(self) -> str:
        partition = self.partition()
        last = self.last_code(partition)

        counter = 1
        if last:
            counter = int(last.rsplit("/", 1)[-1]) + 1
        if counter > MAX_COUNTER:
            raise SequenceExhausted(
                f"Code partition {partition} has no counters left",
                partition=partition,
            )

        code = f"{partition}{counter:0{COUNTER_WIDTH}d}"
        logger.debug("Allocated goods code %s", code)
        return code
