"""
Change Chunk Data Models

One contiguous hunk of a unified diff.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class ChangeType(str, Enum):
    """How the file containing a chunk changed. Renames collapse to MODIFIED."""
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


@dataclass(frozen=True)
class ChangeChunk:
    """A single hunk of one file in a unified diff"""
    file_path: str
    file_type: str
    start_line: int
    added_lines: Tuple[str, ...]
    removed_lines: Tuple[str, ...]
    context_lines: Tuple[str, ...] = ()
    change_type: ChangeType = ChangeType.MODIFIED

    def __post_init__(self):
        """Data validation"""
        # lists are accepted for convenience but stored as tuples
        object.__setattr__(self, 'added_lines', tuple(self.added_lines))
        object.__setattr__(self, 'removed_lines', tuple(self.removed_lines))
        object.__setattr__(self, 'context_lines', tuple(self.context_lines))
        object.__setattr__(self, 'change_type', ChangeType(self.change_type))

        if self.start_line < 1:
            raise ValueError("start_line must be >= 1")
        if not self.added_lines and not self.removed_lines:
            raise ValueError("A chunk needs at least one added or removed line")
        if any('\n' in line for line in self.added_lines + self.removed_lines):
            raise ValueError("Chunk lines must not contain newline characters")

    @property
    def context(self) -> str:
        """Prefixed hunk lines, newline terminated, as shown to the LLM"""
        return ''.join(f"{line}\n" for line in self.context_lines)
