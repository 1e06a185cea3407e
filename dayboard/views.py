"""View engine: derived lists and statistics.

All functions are pure functions of a snapshot (or of a list already
filtered from one). Statistics are computed over the filtered list, so an
active category filter changes the reported percentages.
"""

import unicodedata
from typing import Dict, Iterable, List, Sequence, Tuple

from dayboard.models import Section, SectionStats, Snapshot, Task

ALL = "All"


def sort_key(task: Task) -> Tuple[bool, int, int]:
    """Effective display order of a task inside its section.

    Ordered tasks come first by ascending order, then unordered ones.
    Ties fall back to created_at, most recent first.
    """
    return (task.order is None, task.order or 0, -task.created_at)


def _collation_key(text: str) -> Tuple[str, str, str]:
    """Accent- and case-insensitive key; ties fall back to casefold, then raw text."""
    folded = text.casefold()
    base = "".join(ch for ch in unicodedata.normalize("NFKD", folded) if not unicodedata.combining(ch))
    return (base, folded, text)


def categories(snapshot: Snapshot) -> List[str]:
    """Return "All" followed by the distinct categories, collated."""
    found = {task.category for task in snapshot if task.category}
    return [ALL] + sorted(found, key=_collation_key)


def filtered(
    snapshot: Snapshot,
    category_filter: str = ALL,
    only_incomplete: bool = False,
) -> List[Task]:
    """Return the tasks matching the filters, in display order.

    Args:
        snapshot: Current board state
        category_filter: "All" or an exact category label
        only_incomplete: If True, done tasks are left out

    Returns:
        List of Task objects. The sort is stable, so tasks with identical
        keys keep their snapshot sequence.
    """
    matches = [
        task
        for task in snapshot
        if (category_filter == ALL or task.category == category_filter)
        and not (only_incomplete and task.done)
    ]
    return sorted(matches, key=sort_key)


def section_tasks(tasks: Iterable[Task], section: Section) -> List[Task]:
    """Return the tasks of one section, keeping their given order."""
    return [task for task in tasks if task.section is section]


def pct(done: int, total: int) -> int:
    """Return done/total as a whole percentage, rounding halves up."""
    if total <= 0:
        return 0
    return (200 * done + total) // (2 * total)


def _stats(tasks: Sequence[Task]) -> SectionStats:
    total = len(tasks)
    done = sum(1 for task in tasks if task.done)
    return SectionStats(done=done, total=total, pct=pct(done, total))


def section_stats(tasks: Sequence[Task]) -> Dict[Section, SectionStats]:
    """Return per-section figures for every section, in section order."""
    return {section: _stats(section_tasks(tasks, section)) for section in Section}


def global_progress(tasks: Sequence[Task]) -> int:
    """Return the completion percentage across all sections."""
    return _stats(tasks).pct
