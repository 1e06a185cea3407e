"""Task store: pure mutations over board snapshots.

Every function takes a Snapshot and returns a new one; the input is never
modified. Failures raise before any new state is built, so a caller that
catches ValidationError or NotFoundError still holds the unchanged
snapshot.
"""

import logging
import time
from dataclasses import replace
from typing import Callable, Optional, Tuple, Union

from dayboard.errors import NotFoundError, ValidationError
from dayboard.ids import next_id
from dayboard.models import (
    Section,
    Snapshot,
    Task,
    normalize_comment,
    normalize_optional,
    normalize_title,
)

logger = logging.getLogger(__name__)

# Marks a keyword argument of update() that was not supplied.
_UNSET = object()


def now_ms() -> int:
    return int(time.time() * 1000)


def get(snapshot: Snapshot, task_id: str) -> Task:
    """Return a task by id.

    Raises:
        NotFoundError: If no task has this id
    """
    task = snapshot.get(task_id)
    if task is None:
        raise NotFoundError(task_id)
    return task


def next_order(snapshot: Snapshot, section: Section) -> int:
    """Return the ordinal a new task in section should receive."""
    orders = [t.order for t in snapshot.in_section(section) if t.order is not None]
    return max(orders, default=-1) + 1


def _valid_title(title: Optional[str]) -> str:
    normalized = normalize_title(title)
    if not normalized:
        raise ValidationError("Task title cannot be empty")
    return normalized


def create(
    snapshot: Snapshot,
    title: str,
    section: Union[Section, str],
    category: Optional[str] = None,
    comment: Optional[str] = None,
    *,
    now: Optional[Callable[[], int]] = None,
    new_id: Optional[Callable[[], str]] = None,
) -> Tuple[Snapshot, str]:
    """Create a new task at the front of the collection.

    Args:
        snapshot: Current board state
        title: Task title, normalized before storage
        section: Target section (member or stored string value)
        category: Optional category label
        comment: Optional comment
        now: Clock returning milliseconds; defaults to wall-clock time
        new_id: Id factory; defaults to ids.next_id

    Returns:
        Tuple of (new snapshot, id of the created task)

    Raises:
        ValidationError: If the title is empty after normalization or the
            section is unknown
    """
    normalized_title = _valid_title(title)
    target = Section.parse(section)

    task = Task(
        id=(new_id or next_id)(),
        title=normalized_title,
        section=target,
        category=normalize_optional(category),
        done=False,
        comment=normalize_comment(comment),
        created_at=(now or now_ms)(),
        order=next_order(snapshot, target),
    )
    logger.debug("Task created id=%s section=%s order=%s", task.id, target.value, task.order)
    return Snapshot((task,) + snapshot.tasks), task.id


def _replace_task(snapshot: Snapshot, updated: Task) -> Snapshot:
    return Snapshot(tuple(updated if t.id == updated.id else t for t in snapshot.tasks))


def update(
    snapshot: Snapshot,
    task_id: str,
    *,
    title=_UNSET,
    section=_UNSET,
    category=_UNSET,
    comment=_UNSET,
) -> Snapshot:
    """Update the supplied fields of an existing task.

    Passing None or an empty string for category or comment clears it.
    Changing the section keeps the task's current order value; it is
    renumbered the next time that section is reordered.

    Raises:
        NotFoundError: If task_id is unknown
        ValidationError: If a supplied title is empty after normalization or
            a supplied section is unknown; no field changes in that case
    """
    task = get(snapshot, task_id)

    changes = {}
    if title is not _UNSET:
        changes["title"] = _valid_title(title)
    if section is not _UNSET:
        changes["section"] = Section.parse(section)
    if category is not _UNSET:
        changes["category"] = normalize_optional(category)
    if comment is not _UNSET:
        changes["comment"] = normalize_comment(comment)

    if not changes:
        return snapshot

    logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))
    return _replace_task(snapshot, replace(task, **changes))


def toggle_done(snapshot: Snapshot, task_id: str) -> Snapshot:
    """Flip the done flag of a task.

    Raises:
        NotFoundError: If task_id is unknown
    """
    task = get(snapshot, task_id)
    logger.debug("Task toggled id=%s done=%s", task_id, not task.done)
    return _replace_task(snapshot, replace(task, done=not task.done))


def delete(snapshot: Snapshot, task_id: str) -> Snapshot:
    """Remove a task. Deleting an unknown id returns the snapshot unchanged."""
    if task_id not in snapshot:
        return snapshot
    logger.debug("Task deleted id=%s", task_id)
    return Snapshot(tuple(t for t in snapshot.tasks if t.id != task_id))


def clear_all(snapshot: Snapshot) -> Snapshot:
    """Return an empty board. Confirmation is the caller's responsibility."""
    logger.debug("Board cleared (%d tasks removed)", len(snapshot))
    return Snapshot()


def reset_all_done(snapshot: Snapshot) -> Snapshot:
    """Mark every task as not done, leaving all other fields alone."""
    return Snapshot(tuple(replace(t, done=False) if t.done else t for t in snapshot.tasks))
