"""
LLM Review Engine

Contextual review of change chunks by a large language model. Each
chunk gets its own prompt; the free-form replies are classified line
by line into findings.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from ..models.chunk import ChangeChunk
from ..models.finding import Finding, Severity, FindingSource
from ..models.pull_request import PullRequestContext
from .client import OllamaClient
from .prompts import PromptBuilder


logger = logging.getLogger(__name__)


# (trigger substrings, severity, confidence, precedence score); first match wins
SEVERITY_TRIGGERS: Tuple[Tuple[Tuple[str, ...], Severity, float, int], ...] = (
    (('critical', 'danger'), Severity.CRITICAL, 0.85, 700),
    (('high', 'issue', 'bug'), Severity.HIGH, 0.80, 650),
    (('medium', 'warning', 'improve'), Severity.MEDIUM, 0.75, 600),
)

LLM_CATEGORY = "CODE_REVIEW"


def classify_response(response: Optional[str], chunk: ChangeChunk) -> List[Finding]:
    """
    Turn an LLM reply into findings.

    Every reply line is checked against SEVERITY_TRIGGERS (case
    insensitive); a line yields at most one finding, anchored at the
    chunk's start line.

    Args:
        response: Raw reply text, possibly empty or None
        chunk: Chunk the reply is about

    Returns:
        Findings in reply order
    """
    findings: List[Finding] = []

    if not response:
        return findings

    for line in response.split('\n'):
        lower_line = line.lower()

        for triggers, severity, confidence, precedence in SEVERITY_TRIGGERS:
            if any(trigger in lower_line for trigger in triggers):
                findings.append(Finding.create(
                    file_path=chunk.file_path,
                    line_number=chunk.start_line,
                    severity=severity,
                    category=LLM_CATEGORY,
                    message=line.strip(),
                    source=FindingSource.LLM,
                    confidence=confidence,
                    precedence_score=precedence,
                ))
                break

    return findings


class LLMReviewEngine:
    """
    Reviews chunks with an LLM.

    Chunks are reviewed concurrently. A chunk whose call fails (timeout,
    transport error, bad reply) contributes no findings; the other
    chunks are unaffected.
    """

    def __init__(self, client: OllamaClient, prompt_builder: Optional[PromptBuilder] = None):
        """
        Initialize LLM review engine.

        Args:
            client: LLM client exposing ``generate_code_review(prompt)``
            prompt_builder: Prompt builder (default template if omitted)
        """
        self.client = client
        self.prompt_builder = prompt_builder or PromptBuilder()

    async def analyze_with_llm(
        self,
        pr_context: PullRequestContext,
        chunks: List[ChangeChunk]
    ) -> List[Finding]:
        """
        Review all chunks and aggregate the findings.

        Args:
            pr_context: Pull request being reviewed
            chunks: Chunks to review

        Returns:
            Findings of all chunks, in chunk order; empty on total failure
        """
        logger.debug(f"Starting LLM analysis on {len(chunks)} chunks")

        if not chunks:
            return []

        try:
            per_chunk = await asyncio.gather(
                *(self._review_chunk(chunk, pr_context) for chunk in chunks)
            )
        except Exception:
            logger.warning("Error in LLM analysis", exc_info=True)
            return []

        findings = [finding for chunk_findings in per_chunk for finding in chunk_findings]
        logger.debug(f"LLM analysis completed with {len(findings)} findings")
        return findings

    async def _review_chunk(self, chunk: ChangeChunk, pr_context: PullRequestContext) -> List[Finding]:
        """Review one chunk; failures become an empty list."""
        try:
            prompt = self.prompt_builder.build_review_prompt(chunk, pr_context)
            response = await asyncio.to_thread(self.client.generate_code_review, prompt)
            return classify_response(response, chunk)
        except Exception as e:
            logger.warning(f"Error generating review for chunk {chunk.file_path}:{chunk.start_line}: {e}")
            return []
