"""Task repository: the board's explicit store handle.

This module provides a high-level TaskRepository class that owns the
current snapshot, applies the pure store/reorder functions to it and saves
every new snapshot through the persistence bridge. Presentation code holds
a TaskRepository instead of sharing module-level state.
"""

import logging
from typing import Callable, Dict, List, Optional, Union

from dayboard import reorder as reorder_engine
from dayboard import store, views
from dayboard.config import BoardConfig
from dayboard.models import Section, SectionStats, Snapshot, Task
from dayboard.persistence import PersistenceBridge
from dayboard.storage import FileStorage, Storage

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for managing board tasks with a storage backend.

    Each mutator computes a new snapshot, replaces `snapshot` in a single
    assignment and then saves it. ValidationError and NotFoundError
    propagate to the caller with `snapshot` unchanged; storage failures are
    logged and never raised.

    Attributes:
        snapshot: Current board state
        bridge: Persistence bridge used for loading and saving
    """

    def __init__(
        self,
        storage: Optional[Storage] = None,
        config: Optional[BoardConfig] = None,
        clock: Optional[Callable[[], int]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        """Initialize TaskRepository and load the stored board.

        Args:
            storage: Storage implementation to use. If None, uses FileStorage
                    in the configured data directory.
            config: Board settings. If None, BoardConfig.from_env() is used.
            clock: Millisecond clock for created_at; wall-clock if None.
            id_factory: Task id factory; ids.next_id if None.
        """
        self.config = config or BoardConfig.from_env()
        if storage is None:
            storage = FileStorage(self.config.data_dir)
        self.bridge = PersistenceBridge(storage, self.config.storage_key)
        self._clock = clock
        self._id_factory = id_factory
        self.snapshot: Snapshot = self.bridge.load()
        logger.info("TaskRepository ready key=%s total=%d", self.config.storage_key, len(self.snapshot))

    def _commit(self, new_snapshot: Snapshot) -> None:
        if new_snapshot is self.snapshot:
            return
        self.snapshot = new_snapshot
        self.bridge.save(new_snapshot)

    # ---- mutations ----

    def create_task(
        self,
        title: str,
        section: Union[Section, str] = Section.MORNING,
        category: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> Task:
        """Create a new task.

        Returns:
            The created Task

        Raises:
            ValidationError: If the title is empty after normalization
        """
        new_snapshot, task_id = store.create(
            self.snapshot,
            title,
            section,
            category,
            comment,
            now=self._clock,
            new_id=self._id_factory,
        )
        self._commit(new_snapshot)
        return store.get(self.snapshot, task_id)

    def update_task(self, task_id: str, **fields) -> Task:
        """Update title, section, category and/or comment of a task.

        Returns:
            The updated Task

        Raises:
            NotFoundError: If task_id is unknown
            ValidationError: If a supplied field is invalid
            TypeError: If an unknown field name is passed
        """
        self._commit(store.update(self.snapshot, task_id, **fields))
        return store.get(self.snapshot, task_id)

    def toggle_done(self, task_id: str) -> Task:
        """Flip a task's done flag and return the updated Task."""
        self._commit(store.toggle_done(self.snapshot, task_id))
        return store.get(self.snapshot, task_id)

    def delete_task(self, task_id: str) -> bool:
        """Delete a task by ID.

        Returns:
            True if task was deleted, False if task didn't exist
        """
        if task_id not in self.snapshot:
            return False
        self._commit(store.delete(self.snapshot, task_id))
        return True

    def clear_all(self) -> None:
        """Delete every task. Callers confirm with the user beforehand."""
        self._commit(store.clear_all(self.snapshot))

    def reset_all_done(self) -> None:
        """Mark every task as incomplete."""
        self._commit(store.reset_all_done(self.snapshot))

    def reorder(self, moved_id: str, target_id: str) -> bool:
        """Apply a drop of moved_id onto target_id.

        Returns:
            True if the board changed, False if the drop was ignored
        """
        new_snapshot = reorder_engine.reorder(self.snapshot, moved_id, target_id)
        changed = new_snapshot is not self.snapshot
        self._commit(new_snapshot)
        return changed

    # ---- queries ----

    def get_task(self, task_id: str) -> Optional[Task]:
        """Get a specific task by ID, or None if it doesn't exist."""
        return self.snapshot.get(task_id)

    def categories(self) -> List[str]:
        return views.categories(self.snapshot)

    def filtered(self, category_filter: str = views.ALL, only_incomplete: bool = False) -> List[Task]:
        return views.filtered(self.snapshot, category_filter, only_incomplete)

    def section_stats(
        self, category_filter: str = views.ALL, only_incomplete: bool = False
    ) -> Dict[Section, SectionStats]:
        return views.section_stats(self.filtered(category_filter, only_incomplete))

    def global_progress(self, category_filter: str = views.ALL, only_incomplete: bool = False) -> int:
        return views.global_progress(self.filtered(category_filter, only_incomplete))
