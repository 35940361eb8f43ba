"""
Data Models

Core data models of the review pipeline.
"""

from .chunk import ChangeChunk, ChangeType
from .finding import Finding, Severity, FindingSource
from .pull_request import PullRequestContext

__all__ = [
    "ChangeChunk",
    "ChangeType",
    "Finding",
    "Severity",
    "FindingSource",
    "PullRequestContext",
]
