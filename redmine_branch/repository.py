"""Local git repository access (GitPython).

Usage:
    repo   = open_repository()               # discovered from the cwd upwards
    remote = select_remote(repo)             # the single configured remote
    names  = remote_branch_names(repo, remote)
    commit = find_remote_commit(repo, remote, "origin/master")
    create_branch(repo, "rd-42-abc-8.1-do-stuff-asap", commit)
"""

from dataclasses import dataclass
from pathlib import Path

import git
from git.exc import GitCommandError, GitError, InvalidGitRepositoryError, NoSuchPathError

DETACHED_HEAD = "HEAD"

# Corrupt refs surface as ValueError from GitPython's ref parser
_GIT_FAILURES = (GitError, ValueError)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class RepositoryError(Exception):
    """Base exception for all local repository errors."""


class RepositoryNotFoundError(RepositoryError):
    """Raised when no git repository contains the working directory."""


class NoRemoteError(RepositoryError):
    """Raised when the repository has no usable remote."""


class MultipleRemotesError(RepositoryError):
    """Raised when several remotes exist and none was named explicitly."""


class BranchExistsError(RepositoryError):
    """Raised when the local branch to create already exists."""


class BaseBranchNotFoundError(RepositoryError):
    """Raised when the chosen base is not among the remote branches."""


# ---------------------------------------------------------------------------
# Inspection
# ---------------------------------------------------------------------------

@dataclass
class WorkdirStatus:
    git_dir: str
    clean: bool
    files_changed: int


def open_repository(path: str | Path | None = None) -> git.Repo:
    """Open the repository containing *path* (default: current directory)."""
    search_from = Path(path) if path is not None else Path.cwd()
    try:
        return git.Repo(search_from, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as exc:
        raise RepositoryNotFoundError(f"No git repository found at or above '{search_from}'") from exc


def describe_workdir(repo: git.Repo) -> WorkdirStatus:
    """Report where the repo lives and how many files differ from the index."""
    try:
        return WorkdirStatus(
            git_dir=str(repo.git_dir),
            clean=not repo.is_dirty(untracked_files=False),
            files_changed=len(repo.index.diff(None)),
        )
    except _GIT_FAILURES as exc:
        raise RepositoryError(f"Unable to read the working tree status: {exc}") from exc


def select_remote(repo: git.Repo, name: str | None = None) -> str:
    """Return the remote to work against.

    With *name*, that remote must exist. Without it, exactly one remote must
    be configured.
    """
    try:
        remotes = [remote.name for remote in repo.remotes]
    except _GIT_FAILURES as exc:
        raise RepositoryError(f"Unable to list remotes: {exc}") from exc
    if name is not None:
        if name not in remotes:
            available = ", ".join(remotes) or "(none)"
            raise NoRemoteError(f"Remote '{name}' does not exist. Available remotes: {available}")
        return name
    if not remotes:
        raise NoRemoteError("The repository has no remote configured")
    if len(remotes) > 1:
        raise MultipleRemotesError(
            f"I don't know which remote to use among {', '.join(remotes)} "
            "(pass --remote to choose one)"
        )
    return remotes[0]


def remote_branch_names(repo: git.Repo, remote: str) -> tuple[str, ...]:
    """Return ``<remote>/<branch>`` for every remote-tracking branch.

    The symbolic ``<remote>/HEAD`` is left out.
    """
    try:
        return tuple(
            ref.name for ref in repo.remote(remote).refs if ref.remote_head != DETACHED_HEAD
        )
    except _GIT_FAILURES as exc:
        raise RepositoryError(f"Unable to list branches of remote '{remote}': {exc}") from exc


def head_ref_name(repo: git.Repo) -> str:
    """Return the full ref HEAD points at (``refs/heads/...``), or ``HEAD`` if detached."""
    try:
        if repo.head.is_detached:
            return DETACHED_HEAD
        return repo.head.ref.path
    except _GIT_FAILURES as exc:
        raise RepositoryError(f"Unable to read HEAD: {exc}") from exc


def find_remote_commit(repo: git.Repo, remote: str, branch_name: str) -> git.Commit:
    """Return the commit of the remote branch named exactly *branch_name*."""
    try:
        for ref in repo.remote(remote).refs:
            if ref.name == branch_name:
                return ref.commit
    except _GIT_FAILURES as exc:
        raise RepositoryError(f"Unable to resolve '{branch_name}': {exc}") from exc
    raise BaseBranchNotFoundError(f"Remote branch '{branch_name}' not found")


# ---------------------------------------------------------------------------
# Branch creation
# ---------------------------------------------------------------------------

def create_branch(repo: git.Repo, name: str, commit: git.Commit) -> git.Head:
    """Create local branch *name* at *commit*, check it out and move HEAD to it.

    Stops at the first failing step. A branch created before a failed
    checkout is left in place.
    """
    if any(head.name == name for head in repo.heads):
        raise BranchExistsError(f"Local branch '{name}' already exists")

    try:
        head = repo.create_head(name, commit)
    except (GitCommandError, ValueError, OSError) as exc:
        raise RepositoryError(f"Unable to create branch '{name}': {exc}") from exc

    try:
        head.checkout()
    except GitCommandError as exc:
        raise RepositoryError(
            f"Branch '{name}' was created but checkout failed: {exc.stderr.strip()}"
        ) from exc

    return head
