"""
Unified Diff Parser

Parses the raw unified diff of a pull request into reviewable
change chunks. Never fails on malformed input: unrecognised lines
are skipped.
"""

import re
import logging
from typing import List, Optional

from ..models.chunk import ChangeChunk, ChangeType


logger = logging.getLogger(__name__)

DEV_NULL = "/dev/null"


class _HunkState:
    """Accumulators of the hunk being read"""

    def __init__(self, start_line: int, old_count: int = 1, new_count: int = 1):
        self.start_line = start_line
        # lines still announced by the hunk header
        self.old_remaining = old_count
        self.new_remaining = new_count
        self.added_lines: List[str] = []
        self.removed_lines: List[str] = []
        self.context_lines: List[str] = []

    def has_changes(self) -> bool:
        return bool(self.added_lines or self.removed_lines)

    def is_open(self) -> bool:
        """Whether the header still announces lines."""
        return self.old_remaining > 0 or self.new_remaining > 0

    def consume(self, line: str) -> bool:
        """
        Read one line of an open hunk.

        Returns:
            False when the line cannot belong to the hunk; the hunk is
            closed and the line is left to the header checks
        """
        if line.startswith('+'):
            self.add(line[1:])
            self.new_remaining -= 1
        elif line.startswith('-'):
            self.remove(line[1:])
            self.old_remaining -= 1
        elif line.startswith(' ') or line == '':
            # some tools strip the space of blank context lines
            if line:
                self.context_lines.append(line)
            self.old_remaining -= 1
            self.new_remaining -= 1
        elif line.startswith('\\'):
            pass
        else:
            self.old_remaining = self.new_remaining = 0
            return False
        return True

    def add(self, content: str) -> None:
        self.added_lines.append(content)
        self.context_lines.append('+' + content)

    def remove(self, content: str) -> None:
        self.removed_lines.append(content)
        self.context_lines.append('-' + content)


class UnifiedDiffParser:
    """
    Parser for unified diff text.

    Scans the diff line by line keeping the current file path, the
    current change type and the hunk in progress. Every hunk with at
    least one added or removed line becomes one ChangeChunk.
    """

    def __init__(self):
        """Initialize unified diff parser."""
        self.git_header_pattern = re.compile(r'^diff --git a/(.+) b/(.+)$')
        self.hunk_header_pattern = re.compile(r'^@@\s*-(\d+)(?:,(\d+))?\s*\+(\d+)(?:,(\d+))?\s*@@(.*)$')
        self.binary_file_pattern = re.compile(r'^Binary files? .* differ')

    def parse(self, diff_text: Optional[str]) -> List[ChangeChunk]:
        """
        Parse unified diff text into change chunks.

        Args:
            diff_text: Raw unified diff (``git diff`` or ``diff -u`` output)

        Returns:
            Chunks in diff order; empty when the diff holds no hunks
        """
        if not diff_text:
            return []

        chunks: List[ChangeChunk] = []
        current_path: Optional[str] = None
        in_git_diff = False
        change_type = ChangeType.MODIFIED
        hunk: Optional[_HunkState] = None

        for raw_line in diff_text.split('\n'):
            line = raw_line[:-1] if raw_line.endswith('\r') else raw_line

            git_header = self.git_header_pattern.match(line)
            if git_header:
                self._finalize(hunk, current_path, change_type, chunks)
                hunk = None
                current_path = git_header.group(2)
                change_type = ChangeType.MODIFIED
                in_git_diff = True
                continue

            # announced hunk lines are content even when they look like file headers
            if hunk is not None and hunk.is_open() and hunk.consume(line):
                continue

            if line.startswith('--- '):
                path = self._header_path(line)
                if not in_git_diff:
                    # plain ``diff -u`` output: each file starts at its ``---`` header
                    self._finalize(hunk, current_path, change_type, chunks)
                    hunk = None
                    change_type = ChangeType.MODIFIED
                    if path != DEV_NULL:
                        current_path = path
                if path == DEV_NULL:
                    change_type = ChangeType.ADDED
                continue

            if line.startswith('+++ '):
                path = self._header_path(line)
                if path == DEV_NULL:
                    change_type = ChangeType.DELETED
                elif not in_git_diff:
                    current_path = path
                continue

            header_match = self.hunk_header_pattern.match(line)
            if header_match:
                self._finalize(hunk, current_path, change_type, chunks)
                hunk = _HunkState(
                    start_line=int(header_match.group(3)),
                    old_count=int(header_match.group(2) or 1),
                    new_count=int(header_match.group(4) or 1),
                )
                continue

            if hunk is None:
                # extended headers, binary markers, preamble
                if self.binary_file_pattern.match(line):
                    logger.debug(f"Skipping binary file diff for {current_path}")
                continue

            if line.startswith(('+++', '---')):
                continue

            if line.startswith('+'):
                hunk.add(line[1:])
            elif line.startswith('-'):
                hunk.remove(line[1:])
            elif line.startswith(' '):
                hunk.context_lines.append(line)

        self._finalize(hunk, current_path, change_type, chunks)

        logger.debug(f"Parsed {len(chunks)} change chunks")
        return chunks

    def _finalize(
        self,
        hunk: Optional[_HunkState],
        file_path: Optional[str],
        change_type: ChangeType,
        chunks: List[ChangeChunk]
    ) -> None:
        """Emit the hunk in progress when it has a path and actual changes."""
        if hunk is None or file_path is None or not hunk.has_changes():
            return

        chunks.append(ChangeChunk(
            file_path=file_path,
            file_type=self.get_file_type(file_path),
            # deleted files announce ``+0,0``
            start_line=max(hunk.start_line, 1),
            added_lines=tuple(hunk.added_lines),
            removed_lines=tuple(hunk.removed_lines),
            context_lines=tuple(hunk.context_lines),
            change_type=change_type,
        ))

    def _header_path(self, line: str) -> str:
        """Path of a ``---``/``+++`` header without prefix and timestamp."""
        path = line[4:].split('\t', 1)[0].strip()
        if path.startswith(('a/', 'b/')):
            path = path[2:]
        return path

    def get_file_type(self, file_path: str) -> str:
        """
        Get file type from file path.

        Args:
            file_path: Path to file

        Returns:
            Lowercase extension, or ``"unknown"``
        """
        file_name = file_path.rsplit('/', 1)[-1]
        last_dot = file_name.rfind('.')
        if last_dot <= 0 or last_dot == len(file_name) - 1:
            return "unknown"

        return file_name[last_dot + 1:].lower()
