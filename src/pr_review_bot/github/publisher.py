"""
Review Publisher

Posts the consolidated review comment on a pull request.
"""

import logging
from typing import List, Optional

from ..formatting.github import ReviewCommentFormatter, REVIEW_MARKER
from ..models.finding import Finding
from ..models.pull_request import PullRequestContext
from .client import GitHubClient, GitHubAPIError


logger = logging.getLogger(__name__)


class ReviewPublisher:
    """
    Publishes ranked findings as one issue comment.

    With comment deletion enabled, earlier review comments of the bot
    (recognised by their hidden marker) are removed once the new review
    is posted, so a failed post leaves the previous review in place.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        formatter: Optional[ReviewCommentFormatter] = None,
        delete_previous: bool = False
    ):
        self.github_client = github_client
        self.formatter = formatter or ReviewCommentFormatter()
        self.delete_previous = delete_previous

    def publish_review(self, pr_context: PullRequestContext, findings: List[Finding]) -> dict:
        """
        Format and post the review.

        Args:
            pr_context: Pull request to comment on
            findings: Ranked findings

        Returns:
            Created comment data

        Raises:
            GitHubAPIError: If posting the comment fails
        """
        body = self.formatter.format_review(findings, pr_context)

        comment = self.github_client.post_comment(
            pr_context.owner,
            pr_context.repo,
            pr_context.pr_number,
            body,
            installation_id=pr_context.installation_id
        )
        logger.info(f"Published review with {len(findings)} findings on {pr_context.full_name}#{pr_context.pr_number}")

        if self.delete_previous:
            self._delete_previous_reviews(pr_context, keep_id=(comment or {}).get('id'))

        return comment

    def _delete_previous_reviews(self, pr_context: PullRequestContext, keep_id=None) -> None:
        """Remove bot review comments other than ``keep_id``; failures are logged only."""
        try:
            comments = self.github_client.list_issue_comments(
                pr_context.owner,
                pr_context.repo,
                pr_context.pr_number,
                installation_id=pr_context.installation_id
            )
        except GitHubAPIError as e:
            logger.warning(f"Could not list previous review comments: {e}")
            return

        for comment in comments:
            if comment.get('id') == keep_id or REVIEW_MARKER not in (comment.get('body') or ''):
                continue
            try:
                self.github_client.delete_comment(
                    pr_context.owner,
                    pr_context.repo,
                    comment['id'],
                    installation_id=pr_context.installation_id
                )
            except GitHubAPIError as e:
                logger.warning(f"Could not delete previous review comment {comment.get('id')}: {e}")
