"""
Pull Request Data Models
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PullRequestContext:
    """Identification and metadata of the pull request under review"""
    owner: str
    repo: str
    pr_number: int
    title: str = ""
    description: Optional[str] = None
    author_login: Optional[str] = None
    base_ref: Optional[str] = None
    head_ref: Optional[str] = None
    commit_sha: Optional[str] = None
    installation_id: Optional[int] = None

    def __post_init__(self):
        """Data validation"""
        if self.pr_number <= 0:
            raise ValueError("PR number must be positive")
        if not self.owner or not self.repo:
            raise ValueError("Owner and repo are required")

    @property
    def full_name(self) -> str:
        """Repository in ``owner/repo`` form"""
        return f"{self.owner}/{self.repo}"
