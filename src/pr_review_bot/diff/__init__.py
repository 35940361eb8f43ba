"""
Diff Parsing Layer

Turns the unified diff of a pull request into change chunks.
"""

from .parser import UnifiedDiffParser

__all__ = ['UnifiedDiffParser']
