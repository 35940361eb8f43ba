"""
Webhook Payload Models

Pydantic models of the parts of a GitHub ``pull_request`` event the
bot reads. Unknown fields are ignored.
"""

from typing import Optional
from pydantic import BaseModel, field_validator

from ..models.pull_request import PullRequestContext


SUPPORTED_ACTIONS = frozenset({'opened', 'synchronize', 'reopened'})


class Account(BaseModel):
    """User or organisation"""
    login: str


class Repository(BaseModel):
    """Repository of the pull request"""
    name: str
    owner: Account


class GitRef(BaseModel):
    """Base or head of the pull request"""
    ref: str
    sha: Optional[str] = None


class PullRequest(BaseModel):
    """Pull request section of the event"""
    number: int
    title: str = ""
    body: Optional[str] = None
    user: Optional[Account] = None
    base: Optional[GitRef] = None
    head: Optional[GitRef] = None

    @field_validator('number')
    @classmethod
    def validate_number(cls, v):
        if v <= 0:
            raise ValueError('PR number must be positive')
        return v


class Installation(BaseModel):
    """GitHub App installation that delivered the event"""
    id: int


class PullRequestEvent(BaseModel):
    """``pull_request`` webhook event"""
    action: str
    pull_request: PullRequest
    repository: Repository
    installation: Optional[Installation] = None

    @property
    def is_reviewable(self) -> bool:
        """Whether the action asks for a (re)review"""
        return self.action in SUPPORTED_ACTIONS

    def to_context(self) -> PullRequestContext:
        """Pull request context for the review pipeline"""
        pr = self.pull_request
        return PullRequestContext(
            owner=self.repository.owner.login,
            repo=self.repository.name,
            pr_number=pr.number,
            title=pr.title,
            description=pr.body,
            author_login=pr.user.login if pr.user else None,
            base_ref=pr.base.ref if pr.base else None,
            head_ref=pr.head.ref if pr.head else None,
            commit_sha=pr.head.sha if pr.head else None,
            installation_id=self.installation.id if self.installation else None,
        )
