"""Persistence bridge between board snapshots and a byte store.

The whole collection is serialized as one JSON array under a single
storage key. Records use the camelCase wire names below and omit optional
fields that have no value:

    {"id", "title", "section", "category"?, "done", "comment"?,
     "createdAt", "order"?}

Loading and saving through PersistenceBridge is best-effort: problems are
logged and absorbed, and the in-memory state stays authoritative.
"""

import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from dayboard.config import DEFAULT_STORAGE_KEY
from dayboard.errors import PersistenceError, ValidationError
from dayboard.models import (
    Section,
    Snapshot,
    Task,
    normalize_comment,
    normalize_optional,
    normalize_title,
)
from dayboard.storage import Storage

logger = logging.getLogger(__name__)


def task_to_record(task: Task) -> Dict[str, Any]:
    """Convert a Task to its serializable record."""
    record: Dict[str, Any] = {
        "id": task.id,
        "title": task.title,
        "section": task.section.value,
    }
    if task.category is not None:
        record["category"] = task.category
    record["done"] = task.done
    if task.comment is not None:
        record["comment"] = task.comment
    record["createdAt"] = task.created_at
    if task.order is not None:
        record["order"] = task.order
    return record


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _optional_text(raw: Mapping[str, Any], name: str) -> Optional[str]:
    value = raw.get(name)
    if value is not None and not isinstance(value, str):
        raise PersistenceError(f"{name} must be a string")
    return value


def record_to_task(raw: Any) -> Task:
    """Convert a stored record back into a Task.

    Text fields are normalized again so hand-edited data obeys the same
    rules as data entered through the store.

    Raises:
        PersistenceError: If the record is malformed
    """
    if not isinstance(raw, dict):
        raise PersistenceError("record is not an object")

    task_id = raw.get("id")
    if not isinstance(task_id, str) or not task_id:
        raise PersistenceError("id must be a non-empty string")

    title = raw.get("title")
    if not isinstance(title, str) or not normalize_title(title):
        raise PersistenceError("title must be a non-empty string")

    try:
        section = Section.parse(raw.get("section"))
    except ValidationError as e:
        raise PersistenceError(str(e)) from e

    done = raw.get("done", False)
    if not isinstance(done, bool):
        raise PersistenceError("done must be a boolean")

    created_at = raw.get("createdAt", 0)
    if not _is_number(created_at):
        raise PersistenceError("createdAt must be a number")

    order = raw.get("order")
    if order is not None:
        if not _is_number(order) or int(order) != order:
            raise PersistenceError("order must be an integer")
        order = int(order)

    return Task(
        id=task_id,
        title=normalize_title(title),
        section=section,
        category=normalize_optional(_optional_text(raw, "category")),
        done=done,
        comment=normalize_comment(_optional_text(raw, "comment")),
        created_at=int(created_at),
        order=order,
    )


def dumps(snapshot: Snapshot) -> bytes:
    """Serialize a snapshot to UTF-8 JSON bytes."""
    records = [task_to_record(task) for task in snapshot]
    return json.dumps(records, ensure_ascii=False).encode("utf-8")


def loads(data: bytes) -> Snapshot:
    """Deserialize bytes produced by dumps().

    Malformed records and repeated ids are skipped with a warning.

    Raises:
        PersistenceError: If data is not valid UTF-8 JSON or not an array
    """
    try:
        parsed = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise PersistenceError(f"Unreadable task payload: {e}") from e

    if not isinstance(parsed, list):
        raise PersistenceError(f"Task payload is a {type(parsed).__name__}, expected an array")

    tasks: List[Task] = []
    seen = set()
    for index, raw in enumerate(parsed):
        try:
            task = record_to_task(raw)
        except PersistenceError as e:
            logger.warning("Skipping stored task #%d: %s", index, e)
            continue
        if task.id in seen:
            logger.warning("Skipping stored task #%d: duplicate id %s", index, task.id)
            continue
        seen.add(task.id)
        tasks.append(task)
    return Snapshot(tuple(tasks))


class PersistenceBridge:
    """Best-effort loader and saver for a Storage transport.

    Attributes:
        storage: Transport the payload is read from and written to
        key: Storage key holding the task collection
    """

    def __init__(self, storage: Storage, key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> Snapshot:
        """Read the stored board, or an empty one if it cannot be used."""
        try:
            data = self.storage.get(self.key)
            if data is None:
                return Snapshot()
            return loads(data)
        except PersistenceError as e:
            logger.warning("Could not load tasks from %r; starting empty: %s", self.key, e)
        except Exception:
            logger.exception("Unexpected error loading tasks from %r; starting empty", self.key)
        return Snapshot()

    def save(self, snapshot: Snapshot) -> bool:
        """Write the whole board. Returns False if the write failed."""
        try:
            self.storage.set(self.key, dumps(snapshot))
        except PersistenceError as e:
            logger.warning("Could not save tasks to %r: %s", self.key, e)
            return False
        except Exception:
            logger.exception("Unexpected error saving tasks to %r", self.key)
            return False
        return True
