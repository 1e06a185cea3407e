"""Reorder engine for drag-and-drop within a section."""

import logging
from dataclasses import replace

from dayboard.models import Snapshot
from dayboard.views import sort_key

logger = logging.getLogger(__name__)


def reorder(snapshot: Snapshot, moved_id: str, target_id: str) -> Snapshot:
    """Move one task onto another task's position and renumber the section.

    The moved task is taken out of the section's display sequence and
    reinserted at the index the target occupied. Every task of that section
    then receives order == its new zero-based index; other sections are
    untouched.

    The same snapshot object is returned, unchanged, when either id is
    unknown, when both ids are equal, or when the tasks belong to different
    sections.
    """
    if moved_id == target_id:
        return snapshot

    moved = snapshot.get(moved_id)
    target = snapshot.get(target_id)
    if moved is None or target is None:
        logger.debug("Reorder ignored: unknown id moved=%s target=%s", moved_id, target_id)
        return snapshot
    if moved.section is not target.section:
        logger.debug("Reorder ignored: %s and %s are in different sections", moved_id, target_id)
        return snapshot

    sequence = sorted(snapshot.in_section(moved.section), key=sort_key)
    ids = [task.id for task in sequence]
    old_index = ids.index(moved_id)
    new_index = ids.index(target_id)
    ids.insert(new_index, ids.pop(old_index))

    positions = {task_id: index for index, task_id in enumerate(ids)}
    logger.debug(
        "Reordered section=%s moved=%s from=%d to=%d",
        moved.section.value,
        moved_id,
        old_index,
        new_index,
    )
    return Snapshot(
        tuple(
            replace(task, order=positions[task.id]) if task.id in positions else task
            for task in snapshot.tasks
        )
    )
