"""Ledger Store - Imperative Shell.

This module handles persistence of quake ledgers as JSON files: the
last-poll snapshot and the already-notified snapshot.

All I/O is contained here; keys, retention and ordering are in the core
module. Failures are logged and never raised, so a broken file means
starting fresh rather than stopping the monitor.
"""

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from src.core.earthquake import QuakeRecord, record_from_dict
from src.core.ledger import KeyFunction, RecordSet, index_records


logger = logging.getLogger(__name__)


class JsonLedgerStore:
    """Reads and writes one ledger file.

    This is part of the imperative shell - it handles file I/O.

    File structure (a JSON array):
    [
        {"datetime": "...", "latitude": "...", "longitude": "...",
         "depth": "...", "magnitude": "...", "location": "...",
         "origin": "...", "bulletin": "..."},
        ...
    ]
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize ledger store.

        Args:
            path: Ledger file path
        """
        self.path = Path(path)

    def load(self, key_fn: KeyFunction) -> RecordSet:
        """Load the ledger keyed by key_fn.

        This method performs file I/O.

        Args:
            key_fn: Ledger key function (coarse or fine key)

        Returns:
            RecordSet, empty if the file is missing or corrupt
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Ledger file not found, starting fresh: %s", self.path)
            return {}
        except OSError as e:
            logger.warning("Failed to read ledger file %s, starting fresh: %s", self.path, e)
            return {}

        try:
            entries = json.loads(raw)
        except ValueError as e:
            logger.warning("Failed to parse ledger file %s, resetting: %s", self.path, e)
            return {}

        if entries is None:
            return {}

        if not isinstance(entries, list):
            logger.warning("Ledger file %s is not a list, resetting", self.path)
            return {}

        records = [r for r in (record_from_dict(e) for e in entries) if r is not None]
        ledger = index_records(records, key_fn)

        logger.info("Loaded %d ledger entries from %s", len(ledger), self.path)
        return ledger

    def save(self, records: Iterable[QuakeRecord]) -> bool:
        """Replace the ledger file with the given records.

        This method performs file I/O. The file is written to a temporary
        sibling and moved into place.

        Args:
            records: Records to persist, in order

        Returns:
            True if save was successful
        """
        entries = [r.to_dict() for r in records]
        logger.info("Saving %d ledger entries to %s", len(entries), self.path)

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                json.dump(entries, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
            return True

        except OSError as e:
            logger.error("Failed to write ledger file %s: %s", self.path, e)
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug("Could not remove temporary file %s", tmp_name)
            return False
