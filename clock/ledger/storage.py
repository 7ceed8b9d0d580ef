"""Ledger persistence - one JSON document, rewritten wholesale."""

import json
import os
import tempfile
from datetime import tzinfo
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from clock.errors import LedgerStorageError
from clock.ledger.migrate import upgrade
from clock.ledger.types import Ledger


class LedgerStorage:
    """Load and save the ledger file.

    No lock is taken: two concurrent invocations race and the last save wins.
    """

    def __init__(self, path: Path, tz: tzinfo | None = None):
        self.path = path
        self.tz = tz

    def load(self) -> Ledger:
        """Read the ledger; a missing file is an empty ledger."""
        if not self.path.exists():
            logger.debug(f"No ledger at {self.path}, starting empty")
            return Ledger()

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read ledger {self.path}: {e}")
            raise LedgerStorageError(f"cannot read ledger {self.path}: {e}") from e

        if not isinstance(payload, dict):
            raise LedgerStorageError(f"cannot read ledger {self.path}: expected a JSON object")

        try:
            ledger = upgrade(payload, self.tz)
        except ValidationError as e:
            logger.error(f"Corrupt ledger {self.path}: {e}")
            raise LedgerStorageError(f"corrupt ledger {self.path}: {e}") from e

        logger.debug(f"Loaded {len(ledger.days)} day(s) from {self.path}")
        return ledger

    def dumps(self, ledger: Ledger) -> str:
        return ledger.model_dump_json(indent=2) + "\n"

    def save(self, ledger: Ledger) -> None:
        """Write to a temp file beside the ledger, then atomically replace it."""
        data = self.dumps(ledger)
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent),
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            logger.error(f"Failed to write ledger {self.path}: {e}")
            raise LedgerStorageError(f"cannot write ledger {self.path}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.debug(f"Saved {len(ledger.days)} day(s) to {self.path}")
