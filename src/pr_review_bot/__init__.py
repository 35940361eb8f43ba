"""
PR Review Bot

Automated GitHub pull request review combining heuristic rules and an
LLM reviewer.
"""

__version__ = "1.0.0"

from .orchestrator import ReviewOrchestrator, ReviewResult

__all__ = ["ReviewOrchestrator", "ReviewResult"]
