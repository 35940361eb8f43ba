"""
GitHub Comment Formatter

Formats ranked findings into the single markdown review comment
posted on a pull request.
"""

import logging
from collections import Counter
from typing import List, Optional

from ..models.finding import Finding, Severity
from ..models.pull_request import PullRequestContext


logger = logging.getLogger(__name__)

REVIEW_HEADING = "## Code Review Analysis"
# Hidden marker identifying comments written by this bot
REVIEW_MARKER = "<!-- pr-review-bot:summary -->"

SEVERITY_ICONS = {
    Severity.CRITICAL.value: "🔴",
    Severity.HIGH.value: "🟠",
    Severity.MEDIUM.value: "🟡",
    Severity.LOW.value: "🔵",
    Severity.INFO.value: "⚪",
}


class ReviewCommentFormatter:
    """
    Builds the consolidated review comment.

    Findings are rendered in the order given (already ranked by the
    merger). Bodies longer than GitHub's comment limit are truncated.
    """

    def __init__(self, max_comment_length: int = 65536):
        """
        Initialize review comment formatter.

        Args:
            max_comment_length: GitHub's comment size limit
        """
        self.max_comment_length = max_comment_length

    def format_review(
        self,
        findings: List[Finding],
        pr_context: Optional[PullRequestContext] = None
    ) -> str:
        """
        Format findings as a markdown comment.

        Args:
            findings: Ranked findings
            pr_context: Pull request, used for the commit reference

        Returns:
            Markdown body
        """
        if not findings:
            body = self._format_clean_review(pr_context)
        else:
            body = self._format_findings(findings, pr_context)

        if len(body) > self.max_comment_length:
            body = self._truncate_comment(body)

        return body

    def _format_clean_review(self, pr_context: Optional[PullRequestContext]) -> str:
        lines = [
            REVIEW_HEADING,
            "",
            "✅ No issues found. The automated checks did not flag anything in this change.",
        ]
        lines.extend(self._footer(pr_context))
        return "\n".join(lines)

    def _format_findings(self, findings: List[Finding], pr_context: Optional[PullRequestContext]) -> str:
        lines = [
            REVIEW_HEADING,
            "",
            f"Found **{len(findings)}** potential issue(s) in this pull request.",
            "",
            "| Severity | Count |",
            "|---|---|",
        ]

        counts = Counter(finding.severity for finding in findings)
        for severity in sorted(counts, key=lambda s: -Severity.rank(s)):
            lines.append(f"| {SEVERITY_ICONS.get(severity, '❔')} {severity} | {counts[severity]} |")

        for index, finding in enumerate(findings, start=1):
            lines.append("")
            lines.extend(self._format_finding(index, finding))

        lines.extend(self._footer(pr_context))
        return "\n".join(lines)

    def _format_finding(self, index: int, finding: Finding) -> List[str]:
        icon = SEVERITY_ICONS.get(finding.severity, '❔')
        lines = [
            f"### {index}. {icon} {finding.severity}: {finding.category}",
            "",
            f"- **File:** `{finding.file_path}`",
            f"- **Line:** {finding.line_number}",
            f"- **Category:** {finding.category}",
            f"- **Source:** {finding.source} (confidence {finding.confidence:.0%})",
            "",
            finding.message,
        ]

        if finding.suggestion:
            lines.extend(["", f"> 💡 **Suggestion:** {finding.suggestion}"])

        return lines

    def _footer(self, pr_context: Optional[PullRequestContext]) -> List[str]:
        lines = ["", "---"]
        if pr_context and pr_context.commit_sha:
            lines.append(f"_Reviewed commit `{pr_context.commit_sha[:7]}`._")
        lines.append(REVIEW_MARKER)
        return lines

    def _truncate_comment(self, body: str) -> str:
        """Cut the body to the comment limit, keeping the marker."""
        notice = "\n\n_Review truncated: too many findings to display._\n" + REVIEW_MARKER
        logger.warning(f"Review comment truncated from {len(body)} characters")
        return body[:self.max_comment_length - len(notice)] + notice
