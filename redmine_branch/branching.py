"""Base-branch resolution and the branch creation workflow.

Functions:
    resolve_base_branch(issue, remote, remote_branches, head_ref, choose_base) -> Resolution
    create_new_branch(repo, issue, choose_base, remote, dry_run)               -> Resolution

``resolve_base_branch`` is pure: the only interaction goes through the
``choose_base(options) -> index`` callback, so the same logic runs with an
interactive prompt, a fixed default, or a test stub.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

import git

from redmine_branch import repository
from redmine_branch.models import Issue

DEFAULT_BASE = "master"
MAINTENANCE_PREFIX = "wab-"

ChooseBase = Callable[[Sequence[str]], int]


class Action(Enum):
    ALREADY_ON_BRANCH = "already_on_branch"
    TICKET_BRANCH_EXISTS = "ticket_branch_exists"
    CREATE = "create"


@dataclass
class Resolution:
    action: Action
    branch_name: str
    base: str | None = None
    existing_branch: str | None = None
    notes: list[str] = field(default_factory=list)
    created: bool = False


def choose_default(options: Sequence[str]) -> int:
    """Non-interactive chooser: always keep the first option."""
    return 0


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def resolve_base_branch(
    issue: Issue,
    remote: str,
    remote_branches: Sequence[str],
    head_ref: str,
    choose_base: ChooseBase = choose_default,
) -> Resolution:
    """Decide whether a branch must be created for *issue*, and from where.

    Raises:
        NamingError: the issue cannot produce a branch name.
    """
    branch_name = issue.branch_name()

    if head_ref.endswith(branch_name):
        return Resolution(Action.ALREADY_ON_BRANCH, branch_name)

    # TODO: match the id as a whole dash-separated segment; "1" currently matches "rd-12-..."
    ticket_id = str(issue.id)
    for name in remote_branches:
        if ticket_id in name:
            return Resolution(Action.TICKET_BRANCH_EXISTS, branch_name, existing_branch=name)

    resolution = Resolution(Action.CREATE, branch_name, base=f"{remote}/{DEFAULT_BASE}")
    target_version = issue.target_version()
    resolution.notes.append(f"Target version : {target_version}")

    maintenance_branch = f"{remote}/{MAINTENANCE_PREFIX}{target_version}"
    if maintenance_branch in remote_branches:
        resolution.base = maintenance_branch
        resolution.notes.append(f"Maintenance branch {maintenance_branch} found")
        return resolution

    if issue.parent is None:
        resolution.notes.append("This ticket has no parent")
        return resolution

    parent_id = str(issue.parent.id)
    parent_branches = [name for name in remote_branches if parent_id in name]
    if not parent_branches:
        resolution.notes.append(
            f"This ticket has #{parent_id} as parent but the branch doesn't exist"
        )
        return resolution

    options = [resolution.base, parent_branches[0]]
    index = choose_base(options)
    if not 0 <= index < len(options):
        raise ValueError(f"Base branch choice {index} out of range for {options}")
    resolution.base = options[index]
    return resolution


def create_new_branch(
    repo: git.Repo,
    issue: Issue,
    choose_base: ChooseBase = choose_default,
    remote: str | None = None,
    dry_run: bool = False,
) -> Resolution:
    """Resolve the base branch for *issue* in *repo* and create the branch.

    With *dry_run*, everything is resolved but nothing is written.

    Raises:
        RepositoryError: remote selection, base lookup or creation failed.
        NamingError:     the issue cannot produce a branch name.
    """
    remote_name = repository.select_remote(repo, remote)
    resolution = resolve_base_branch(
        issue,
        remote_name,
        repository.remote_branch_names(repo, remote_name),
        repository.head_ref_name(repo),
        choose_base,
    )

    if resolution.action is not Action.CREATE or dry_run:
        return resolution

    commit = repository.find_remote_commit(repo, remote_name, resolution.base)
    repository.create_branch(repo, resolution.branch_name, commit)
    resolution.created = True
    return resolution
