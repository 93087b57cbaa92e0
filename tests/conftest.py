import base64
import io
from collections import deque

import pytest
from github import GithubException, UnknownObjectException
from rich.console import Console

from readme_footer.footer import FOOTER_MARKER_ID
from readme_footer.models import FileContent, GitObject, PullRequestInfo, RemoteRepository, Repository
from readme_footer.prompts import Prompter

FOOTER = '<p align="center">Made with <a href="https://example.com">care</a></p>'
UPDATE_BRANCH = "readme-footer-update"


def not_found():
    return UnknownObjectException(404, {"message": "Not Found"}, None)


def server_error(message="Server Error"):
    return GithubException(500, {"message": message}, None)


def footer_block(footer=FOOTER, marker_id=FOOTER_MARKER_ID):
    return f'<div id="{marker_id}">{footer}</div>'


class FakeRepo:
    """In-memory repository state."""

    def __init__(self, branches=None, readme=None, readme_branch="develop", readme_path="README.md"):
        self.branches = dict(branches or {})
        self.files = {}
        if readme is not None:
            self.files[(readme_branch, readme_path)] = readme
        self.blobs = {}
        self.trees = {}
        self.commits = {}
        self.pulls = []
        self.merged = []
        self.mergeable = True
        self.archived = False


class FakeGitHubClient:
    """
    Stand-in for GitHubClient keeping repositories in memory.

    ``errors`` maps a method name to an exception raised on its next call.
    """

    def __init__(self, repos=None, org_pages=None):
        self.repos = repos or {}
        self.org_pages = org_pages or []
        self.errors = {}
        self.calls = []
        self._counter = 0

    def _sha(self, prefix):
        self._counter += 1
        return f"{prefix}{self._counter:04d}"

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.errors:
            raise self.errors.pop(name)

    def _get(self, repository):
        repo = self.repos.get(repository.full_name)
        if repo is None:
            raise not_found()
        return repo

    def called(self, name):
        return [call for call in self.calls if call[0] == name]

    def committed_readme(self, full_name):
        """Text of the README in the tree of the newest commit."""
        repo = self.repos[full_name]
        sha = max(repo.commits)
        _, tree_sha, _ = repo.commits[sha]
        _, _, blob_sha = repo.trees[tree_sha]
        return repo.blobs[blob_sha]

    def get_branch(self, repository, branch_name):
        self._record("get_branch", repository, branch_name)
        repo = self._get(repository)
        if branch_name not in repo.branches:
            raise not_found()
        return GitObject(sha=repo.branches[branch_name])

    def delete_branch(self, repository, branch_name):
        self._record("delete_branch", repository, branch_name)
        repo = self._get(repository)
        if branch_name not in repo.branches:
            raise not_found()
        del repo.branches[branch_name]

    def get_latest_commit(self, repository, branch_name):
        self._record("get_latest_commit", repository, branch_name)
        repo = self._get(repository)
        if branch_name not in repo.branches:
            raise not_found()
        return GitObject(sha=repo.branches[branch_name])

    def create_branch(self, repository, branch_name, sha):
        self._record("create_branch", repository, branch_name, sha)
        repo = self._get(repository)
        if branch_name in repo.branches:
            raise GithubException(422, {"message": "Reference already exists"}, None)
        repo.branches[branch_name] = sha
        return GitObject(sha=sha)

    def get_commit_ref(self, repository, branch_name):
        self._record("get_commit_ref", repository, branch_name)
        return GitObject(sha=self._get(repository).branches[branch_name])

    def update_ref(self, repository, branch_name, sha):
        self._record("update_ref", repository, branch_name, sha)
        self._get(repository).branches[branch_name] = sha
        return GitObject(sha=sha)

    def fetch_file(self, repository, path, ref):
        self._record("fetch_file", repository, path, ref)
        repo = self._get(repository)
        if (ref, path) not in repo.files:
            raise not_found()
        data = repo.files[(ref, path)]
        if isinstance(data, str):
            data = data.encode("utf-8")
        # the contents API wraps base64 payloads over several lines
        encoded = base64.encodebytes(data).decode("ascii")
        return FileContent(path=path, sha=self._sha("file"), content=encoded, size=len(data))

    def create_blob(self, repository, base64_content):
        self._record("create_blob", repository, base64_content)
        sha = self._sha("blob")
        self._get(repository).blobs[sha] = base64.b64decode(base64_content).decode("utf-8")
        return GitObject(sha=sha)

    def get_tree(self, repository, sha):
        self._record("get_tree", repository, sha)
        return GitObject(sha=f"tree-of-{sha}")

    def create_tree(self, repository, base_tree, path, blob_sha):
        self._record("create_tree", repository, base_tree.sha, path, blob_sha)
        sha = self._sha("tree")
        self._get(repository).trees[sha] = (base_tree.sha, path, blob_sha)
        return GitObject(sha=sha)

    def create_commit(self, repository, message, tree, parents):
        self._record("create_commit", repository, message, tree.sha, [p.sha for p in parents])
        sha = self._sha("commit")
        self._get(repository).commits[sha] = (message, tree.sha, [p.sha for p in parents])
        return GitObject(sha=sha)

    def create_pull_request(self, repository, title, head, base, body):
        self._record("create_pull_request", repository, title, head, base, body)
        repo = self._get(repository)
        repo.pulls.append({"title": title, "head": head, "base": base, "body": body})
        return PullRequestInfo(number=len(repo.pulls), url=None)

    def merge_pull_request(self, repository, number):
        self._record("merge_pull_request", repository, number)
        repo = self._get(repository)
        if not repo.mergeable:
            return False
        repo.merged.append(number)
        return True

    def archive_repository(self, repository):
        self._record("archive_repository", repository)
        self._get(repository).archived = True

    def list_organization_repositories_page(self, organization, page):
        self._record("list_organization_repositories_page", organization, page)
        if page < len(self.org_pages):
            return self.org_pages[page]
        return []


class ScriptedPrompter(Prompter):
    """Answers questions from prepared queues and remembers what was asked."""

    def __init__(self, confirms=(), choices=()):
        self.confirms = deque(confirms)
        self.choices = deque(choices)
        self.questions = []

    def confirm(self, message, default=False):
        self.questions.append(message)
        if not self.confirms:
            raise AssertionError(f"Unexpected confirmation: {message}")
        return self.confirms.popleft()

    def choose(self, message, choices, default):
        self.questions.append(message)
        if not self.choices:
            raise AssertionError(f"Unexpected choice: {message}")
        answer = self.choices.popleft()
        assert answer in choices
        return answer


def remote_repos(owner, count, start=0, **flags):
    return [RemoteRepository(owner=owner, name=f"repo-{i}", **flags) for i in range(start, start + count)]


@pytest.fixture
def acme_widgets():
    return Repository(owner="acme", repository="widgets")


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200, color_system=None)
