"""
Prompt Builder

Builds the per-chunk review prompt. The labelled sections are fixed
so that replies can be classified consistently.
"""

import logging

from ..models.chunk import ChangeChunk
from ..models.pull_request import PullRequestContext


logger = logging.getLogger(__name__)


REVIEW_PROMPT_TEMPLATE = """You are an expert code reviewer. Analyze the following code change and provide specific, actionable feedback.

File: {file_path}
Change Type: {change_type}

Changed Code:
{changed_code}

Context:
{context}

PR Title: {title}
PR Description: {description}

Provide your review in a structured format:
1. Issues Found (if any): List each issue with severity (CRITICAL, HIGH, MEDIUM, LOW)
2. Suggestions for Improvement
3. Positive Observations (if any)

Be concise and focus on substantive issues.
"""


class PromptBuilder:
    """Builds review prompts from a chunk and its pull request."""

    def __init__(self, template: str = REVIEW_PROMPT_TEMPLATE):
        self.template = template

    def build_review_prompt(self, chunk: ChangeChunk, pr_context: PullRequestContext) -> str:
        """
        Build the review prompt for a single chunk.

        Args:
            chunk: Change chunk to review
            pr_context: Pull request the chunk belongs to

        Returns:
            Complete prompt string
        """
        logger.debug(f"Building review prompt for {chunk.file_path}:{chunk.start_line}")

        return self.template.format(
            file_path=chunk.file_path,
            change_type=chunk.change_type.value,
            changed_code='\n'.join(chunk.added_lines),
            context=chunk.context,
            title=pr_context.title,
            description=pr_context.description or "No description",
        )
