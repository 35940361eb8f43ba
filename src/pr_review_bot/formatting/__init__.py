"""
Review Formatting

Markdown rendering of the consolidated review comment.
"""

from .github import ReviewCommentFormatter, REVIEW_HEADING, REVIEW_MARKER

__all__ = ['ReviewCommentFormatter', 'REVIEW_HEADING', 'REVIEW_MARKER']
