"""Comprehensive tests for TaskRepository."""

import itertools
import tempfile

import pytest

from dayboard.config import BoardConfig, DEFAULT_STORAGE_KEY
from dayboard.errors import NotFoundError, PersistenceError, ValidationError
from dayboard.models import Section, SectionStats, Snapshot
from dayboard.persistence import dumps, loads
from dayboard.repository import TaskRepository
from dayboard.storage import FileStorage, MemoryStorage, Storage


class CountingStorage(MemoryStorage):
    """MemoryStorage that counts writes."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes = 0

    def set(self, key, data):
        self.writes += 1
        super().set(key, data)


class ReadOnlyStorage(Storage):
    def get(self, key):
        return None

    def set(self, key, data):
        raise PersistenceError("read-only")

    def delete(self, key):
        pass


class TestTaskRepository:
    """Test suite for TaskRepository."""

    @pytest.fixture
    def storage(self):
        return CountingStorage()

    @pytest.fixture
    def repo(self, storage):
        """Create a TaskRepository with deterministic clock and ids."""
        clock = itertools.count(1000)
        ids = itertools.count(1)
        return TaskRepository(
            storage,
            BoardConfig(storage_key="board"),
            clock=lambda: next(clock),
            id_factory=lambda: f"t{next(ids)}",
        )

    def saved(self, storage):
        return loads(storage.get("board"))

    def test_starts_empty(self, repo, storage):
        """Test that a fresh store gives an empty board without writing."""
        assert len(repo.snapshot) == 0
        assert storage.writes == 0

    def test_create_task(self, repo, storage):
        """Test creating a task returns it and persists the board."""
        task = repo.create_task("  Morning   run ", Section.MORNING, "Health", "5k")

        assert task.id == "t1"
        assert task.title == "Morning run"
        assert task.order == 0
        assert task.created_at == 1000
        assert repo.get_task("t1") == task
        assert self.saved(storage) == repo.snapshot

    def test_create_task_default_section(self, repo):
        """Test that the form default section is Morning."""
        assert repo.create_task("Stretch").section is Section.MORNING

    def test_create_empty_title_leaves_board(self, repo, storage):
        """Test that a rejected create changes nothing and writes nothing."""
        repo.create_task("A")
        before = repo.snapshot
        with pytest.raises(ValidationError):
            repo.create_task("   ")
        assert repo.snapshot is before
        assert storage.writes == 1

    def test_update_task(self, repo, storage):
        """Test updating fields of a task."""
        task = repo.create_task("Read", Section.MORNING, "Home")
        updated = repo.update_task(task.id, title="Read book", section="Midday", category="")

        assert updated.title == "Read book"
        assert updated.section is Section.MIDDAY
        assert updated.category is None
        assert updated.order == task.order
        assert self.saved(storage).get(task.id) == updated

    def test_update_blank_title_is_atomic(self, repo):
        """Test that update(id, title="   ") leaves the snapshot identical."""
        task = repo.create_task("Read")
        before = repo.snapshot
        with pytest.raises(ValidationError):
            repo.update_task(task.id, title="   ", comment="x")
        assert repo.snapshot is before

    def test_update_unknown_field(self, repo):
        """Test that misspelled field names are rejected."""
        task = repo.create_task("Read")
        with pytest.raises(TypeError):
            repo.update_task(task.id, titel="Oops")

    def test_update_nonexistent_task(self, repo):
        """Test updating a task that doesn't exist raises NotFoundError."""
        with pytest.raises(NotFoundError):
            repo.update_task("missing", title="X")

    def test_toggle_done(self, repo):
        """Test toggling done twice restores the task."""
        task = repo.create_task("A")
        assert repo.toggle_done(task.id).done is True
        assert repo.toggle_done(task.id) == task

    def test_toggle_nonexistent(self, repo):
        with pytest.raises(NotFoundError):
            repo.toggle_done("missing")

    def test_delete_task(self, repo, storage):
        """Test deleting an existing task."""
        task = repo.create_task("A")
        repo.create_task("B")

        assert repo.delete_task(task.id) is True
        assert repo.get_task(task.id) is None
        assert task.id not in [t.id for t in repo.filtered()]
        assert task.id not in self.saved(storage)

    def test_delete_nonexistent_task(self, repo, storage):
        """Test deleting a task that doesn't exist returns False."""
        assert repo.delete_task("missing") is False
        assert storage.writes == 0

    def test_clear_all(self, repo, storage):
        """Test that clear_all empties and persists an empty board."""
        repo.create_task("A")
        repo.create_task("B", Section.MIDDAY)
        repo.clear_all()

        assert len(repo.snapshot) == 0
        assert storage.get("board") == b"[]"

    def test_reset_all_done(self, repo):
        """Test that every task becomes incomplete."""
        a = repo.create_task("A")
        b = repo.create_task("B", Section.AFTER_WORK)
        repo.toggle_done(a.id)
        repo.toggle_done(b.id)

        repo.reset_all_done()
        assert all(not t.done for t in repo.snapshot)
        assert repo.global_progress() == 0

    def test_reorder(self, repo, storage):
        """Test that a drop renumbers the section and is saved."""
        a = repo.create_task("A")
        b = repo.create_task("B")
        c = repo.create_task("C")

        assert repo.reorder(c.id, a.id) is True
        assert [t.id for t in repo.filtered()] == [c.id, a.id, b.id]
        assert self.saved(storage) == repo.snapshot

    def test_reorder_ignored_drop(self, repo, storage):
        """Test that ignored drops do not write."""
        a = repo.create_task("A")
        x = repo.create_task("X", Section.MIDDAY)
        writes = storage.writes

        assert repo.reorder(a.id, x.id) is False
        assert repo.reorder(a.id, a.id) is False
        assert repo.reorder("missing", a.id) is False
        assert storage.writes == writes

    def test_views(self, repo):
        """Test categories, filtered list and statistics through the repository."""
        a = repo.create_task("A", Section.MORNING, "Work")
        repo.create_task("B", Section.MORNING, "Home")
        repo.create_task("C", Section.MIDDAY, "Work")
        repo.toggle_done(a.id)

        assert repo.categories() == ["All", "Home", "Work"]
        assert [t.title for t in repo.filtered("Work")] == ["C", "A"]
        assert [t.title for t in repo.filtered(only_incomplete=True)] == ["C", "B"]

        stats = repo.section_stats("Work")
        assert stats[Section.MORNING] == SectionStats(1, 1, 100)
        assert stats[Section.MIDDAY] == SectionStats(0, 1, 0)
        assert repo.global_progress() == 33
        assert repo.global_progress("Work") == 50

    def test_loads_existing_board(self):
        """Test that a repository starts from stored data."""
        first = TaskRepository(MemoryStorage(), BoardConfig(storage_key="board"))
        first.create_task("Kept", Section.AFTER_WORK)
        payload = dumps(first.snapshot)

        second = TaskRepository(MemoryStorage({"board": payload}), BoardConfig(storage_key="board"))
        assert second.snapshot == first.snapshot

    def test_corrupt_store_starts_empty(self):
        """Test that unreadable data yields an empty, usable board."""
        repo = TaskRepository(MemoryStorage({"board": b"garbage"}), BoardConfig(storage_key="board"))
        assert repo.snapshot == Snapshot()
        assert repo.create_task("Fresh start").title == "Fresh start"

    def test_save_failures_do_not_break_board(self):
        """Test that the in-memory board stays authoritative when writes fail."""
        repo = TaskRepository(ReadOnlyStorage(), BoardConfig(storage_key="board"))
        task = repo.create_task("Still here")
        repo.toggle_done(task.id)
        assert repo.get_task(task.id).done is True

    def test_default_storage_uses_config_dir(self):
        """Test that FileStorage is used in the configured directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            repo = TaskRepository(config=BoardConfig(data_dir=tmpdir))
            repo.create_task("On disk")

            assert isinstance(repo.bridge.storage, FileStorage)
            assert repo.bridge.key == DEFAULT_STORAGE_KEY
            assert repo.bridge.storage.path_for(DEFAULT_STORAGE_KEY).exists()
