"""
Persistence for the ledger.
The engine only needs an opaque key/value blob store; two are provided:
an in-memory one (tests, ephemeral sessions) and a directory of files.
"""

from pathlib import Path
from typing import Dict, Optional, Protocol

import orjson

from wager_sim.core.ledger import Ledger
from wager_sim.core.logger import get_logger

logger = get_logger("persistence")

BALANCE_KEY = "balance"
HISTORY_KEY = "history"
STATS_KEY = "stats"


class BlobStore(Protocol):
    def load(self, key: str) -> Optional[str]: ...

    def save(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Dict-backed store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, value: str) -> None:
        self.data[key] = value


class FileStore:
    """One UTF-8 file per key under `directory`."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def save(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)


class LedgerRepository:
    """Serializes a Ledger into (and out of) a BlobStore."""

    def __init__(self, store: BlobStore):
        self.store = store

    def _load_json(self, key: str):
        raw = self.store.load(key)
        if raw is None:
            return None
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            logger.warning(f"Corrupt '{key}' payload, using defaults: {e}")
            return None

    def _load_balance(self) -> Optional[int]:
        raw = self.store.load(BALANCE_KEY)
        if raw is None:
            return None
        try:
            balance = int(raw.strip())
        except ValueError:
            logger.warning(f"Corrupt balance payload {raw!r}, using default")
            return None
        if balance < 0:
            logger.warning(f"Negative stored balance {balance}, using default")
            return None
        return balance

    def load_into(self, ledger: Ledger) -> Ledger:
        history = self._load_json(HISTORY_KEY)
        stats = self._load_json(STATS_KEY)

        if history is not None and not isinstance(history, list):
            logger.warning("Stored history is not a list, ignoring it")
            history = None
        if stats is not None and not isinstance(stats, dict):
            logger.warning("Stored stats is not an object, ignoring it")
            stats = None

        try:
            ledger.load_state(self._load_balance(), history, stats)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Stored ledger state unreadable, starting fresh: {e}")
            ledger.reset()
        return ledger

    def load(self, **ledger_kwargs) -> Ledger:
        return self.load_into(Ledger(**ledger_kwargs))

    def save(self, ledger: Ledger) -> None:
        state = ledger.to_state()
        self.store.save(BALANCE_KEY, str(state["balance"]))
        self.store.save(HISTORY_KEY, orjson.dumps(state["history"]).decode())
        self.store.save(STATS_KEY, orjson.dumps(state["stats"]).decode())
        logger.debug("Ledger saved", extra={"balance": ledger.balance})
