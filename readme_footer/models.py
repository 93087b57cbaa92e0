"""
Data models for the README footer updater.

This module contains the shared data structures used across all modules:
the repositories being processed, their final statuses, and the small
records returned by the GitHub client.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class Status(str, enum.Enum):
    """Terminal outcome of a single repository."""
    SUCCESSFUL = "successful"
    SKIPPED = "skipped"
    FAILED = "failed"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class Repository:
    """A GitHub repository identified by its owner and name."""
    owner: str
    repository: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repository}"

    def to_dict(self) -> Dict[str, str]:
        return {"owner": self.owner, "repository": self.repository}


@dataclass(frozen=True)
class RepositoryStatus:
    """Outcome recorded once per processed repository."""
    owner: str
    repository: str
    status: Status
    message: str

    @classmethod
    def of(cls, repository: Repository, status: Status, message: str) -> "RepositoryStatus":
        return cls(owner=repository.owner, repository=repository.repository, status=status, message=message)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repository}"

    def to_repository(self) -> Repository:
        return Repository(owner=self.owner, repository=self.repository)


# Remote result records. Only the fields the workflow consumes are exposed;
# ``raw`` keeps the PyGithub object for calls that need it back.

@dataclass
class GitObject:
    """A git object (ref target, commit, tree or blob) known by its SHA."""
    sha: str
    raw: Optional[Any] = field(default=None, repr=False, compare=False)


@dataclass
class FileContent:
    """Base64 encoded file content fetched from a branch. ``size`` is the decoded size in bytes."""
    path: str
    sha: str
    content: str
    size: int = 0


@dataclass
class PullRequestInfo:
    number: int
    url: Optional[str] = None


@dataclass
class RemoteRepository:
    """One entry of an organization repository listing."""
    owner: str
    name: str
    fork: bool = False
    archived: bool = False
