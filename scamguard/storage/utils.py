"""
JSON-file persistent store.

Each collection (reports, comments, evidence_files, profiles, ...) lives in
its own ``<DATA_DIR>/<collection>.json`` file. The store owns primary
identifiers and creation timestamps; callers never supply either.
"""

import os, json, uuid, tempfile, shutil, threading, logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Optional
from scamguard.core.config import settings
from scamguard.core.errors import ProviderUnavailable, ValidationFailed

logger = logging.getLogger(__name__)

DATA_DIR = settings.DATA_DIR

# Serialises every load-modify-save cycle. Reentrant so writes can run inside transaction().
_write_lock = threading.RLock()

Row = Dict
Predicate = Callable[[Row], bool]


def _collection_path(name: str) -> str:
    return os.path.join(DATA_DIR, f"{name}.json")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def load_collection(name: str) -> List[Row]:
    path = _collection_path(name)
    if not os.path.exists(path):
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read().strip()
            if not content:
                return []
            return json.loads(content)
    except (OSError, json.JSONDecodeError) as e:
        raise ProviderUnavailable(f"could not read collection {name}: {e}")


def save_collection(name: str, rows: List[Row]) -> None:
    """Safely write a collection to disk (atomic write)."""
    path = _collection_path(name)
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        tmp_fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path))
        os.close(tmp_fd)
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(rows, f, indent=2)
            shutil.move(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
    except OSError as e:
        raise ProviderUnavailable(f"could not write collection {name}: {e}")


def select(name: str, predicate: Optional[Predicate] = None) -> List[Row]:
    rows = load_collection(name)
    if predicate is None:
        return rows
    return [r for r in rows if predicate(r)]


def get(name: str, row_id) -> Optional[Row]:
    for row in load_collection(name):
        if row["id"] == row_id:
            return row
    return None


def insert(name: str, row: Row, row_id=None) -> Row:
    """Insert a row, assigning its id and ``created_at``.

    ``row_id`` is only passed for rows keyed by another system's identifier
    (profiles share the account id, the advertisement singleton uses 1).
    """
    new_id = row_id if row_id is not None else str(uuid.uuid4())
    with _write_lock:
        rows = load_collection(name)
        if any(r["id"] == new_id for r in rows):
            raise ValidationFailed(f"Duplicate identifier in {name}.")
        new_row = {**row, "id": new_id, "created_at": now_iso()}
        rows.append(new_row)
        save_collection(name, rows)
    return new_row


def update(name: str, row_id, changes: Row) -> Optional[Row]:
    """Apply ``changes`` to one row in a single write. Returns None if absent."""
    with _write_lock:
        rows = load_collection(name)
        for row in rows:
            if row["id"] == row_id:
                row.update({k: v for k, v in changes.items() if k not in ("id", "created_at")})
                save_collection(name, rows)
                return row
    return None


def delete_where(name: str, predicate: Predicate) -> int:
    with _write_lock:
        rows = load_collection(name)
        kept = [r for r in rows if not predicate(r)]
        removed = len(rows) - len(kept)
        if removed:
            save_collection(name, kept)
    return removed


@contextmanager
def transaction(*names: str) -> Iterator[None]:
    """Restore every named collection if the block raises.

    Other writers wait until the block ends, so a rollback never discards
    their rows.
    """
    with _write_lock:
        snapshots = {name: load_collection(name) for name in names}
        try:
            yield
        except Exception:
            for name, rows in snapshots.items():
                try:
                    save_collection(name, rows)
                except ProviderUnavailable:
                    logger.exception("Rollback of collection %s failed", name)
            raise
