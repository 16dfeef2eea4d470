"""Alert sink that writes ledger inconsistencies to a journal file.

Each alert is one JSON line so an operator (or a log shipper) can pick it
up independently of the application log.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path

from ims.domain.results import LedgerFailure
from ims.domain.service.movement_ledger import AlertSink

logger = logging.getLogger("ims.alerts")


class JournalAlertSink(AlertSink):

    def __init__(self, journal_path: Path) -> None:
        self._journal_path = journal_path
        self._lock = threading.Lock()

    def ledger_inconsistent(self, failure: LedgerFailure) -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "alert": "ledger_inconsistent",
            "item_id": failure.item_id,
            "phase": failure.phase.value,
            "compensation": failure.compensation.value,
            "previous_quantity": (
                None if failure.previous_quantity is None else str(failure.previous_quantity)
            ),
            "attempted_quantity": (
                None if failure.attempted_quantity is None else str(failure.attempted_quantity)
            ),
            "message": failure.message,
        }
        logger.critical("ALERT ledger_inconsistent", extra={"alert": entry})
        try:
            with self._lock:
                self._journal_path.parent.mkdir(parents=True, exist_ok=True)
                with self._journal_path.open("a", encoding="utf-8") as fh:
                    fh.write(json.dumps(entry) + "\n")
        except OSError:
            logger.exception("could not write alert journal %s", self._journal_path)
