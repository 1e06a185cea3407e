"""Core models for dayboard.

This module defines the core data structures of the board:
- Section: Enum for the three fixed time-of-day sections
- Task: A frozen dataclass representing a single task
- Snapshot: The immutable state of the whole task collection
- SectionStats: Derived done/total/percentage figures for one section

It also holds the text normalization helpers applied to free-text fields
before they are stored.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple, Union

from dayboard.errors import ValidationError

_WHITESPACE_RE = re.compile(r"\s+")


class Section(Enum):
    """Time-of-day sections, in display order."""

    MORNING = "Morning"
    MIDDAY = "Midday"
    AFTER_WORK = "AfterWork"

    @property
    def label(self) -> str:
        """Human-readable column title."""
        if self is Section.AFTER_WORK:
            return "After Work"
        return self.value

    @classmethod
    def parse(cls, value: Union["Section", str]) -> "Section":
        """Coerce a member or its stored string value into a Section.

        Raises:
            ValidationError: If value is not one of the three sections
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unknown section: {value!r}") from None


def normalize_title(text: Optional[str]) -> str:
    """Trim and collapse internal whitespace runs to single spaces."""
    if text is None:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_optional(text: Optional[str]) -> Optional[str]:
    """Normalize like a title, mapping an empty result to None."""
    normalized = normalize_title(text)
    return normalized or None


def normalize_comment(text: Optional[str]) -> Optional[str]:
    """Trim a comment, mapping an empty result to None.

    Internal whitespace (including newlines) is kept as written.
    """
    if text is None:
        return None
    return text.strip() or None


@dataclass(frozen=True)
class Task:
    """Task model representing a single board item.

    Attributes:
        id: Opaque unique identifier, assigned at creation
        title: Normalized, non-empty title
        section: Section the task is displayed in
        category: Optional normalized category label
        done: Completion flag
        comment: Optional trimmed free-text comment
        created_at: Creation time in milliseconds since the epoch
        order: Ordinal within the section; None sorts after ordered tasks
    """

    id: str
    title: str
    section: Section
    category: Optional[str] = None
    done: bool = False
    comment: Optional[str] = None
    created_at: int = 0
    order: Optional[int] = None


@dataclass(frozen=True)
class Snapshot:
    """Complete, immutable state of the task collection.

    Tasks are kept in storage sequence (newest created first). Display
    order is derived by the view engine, never by this sequence alone.
    """

    tasks: Tuple[Task, ...] = ()

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks)

    def __contains__(self, task_id: object) -> bool:
        return any(task.id == task_id for task in self.tasks)

    def get(self, task_id: str) -> Optional[Task]:
        """Return the task with the given id, or None."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def in_section(self, section: Section) -> Tuple[Task, ...]:
        """Return the tasks of one section in storage sequence."""
        return tuple(task for task in self.tasks if task.section is section)


@dataclass(frozen=True)
class SectionStats:
    """Completion figures for one section of a filtered view."""

    done: int = 0
    total: int = 0
    pct: int = 0
