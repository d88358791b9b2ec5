"""Shared fixtures: throwaway git repositories and sample tickets."""

from pathlib import Path

import git
import pytest

from redmine_branch.models import CustomField, IdProperty, Issue, NamedProperty

ACTOR = git.Actor("Test User", "test@example.com")


def commit_file(repo: git.Repo, filename: str, content: str, message: str) -> git.Commit:
    path = Path(repo.working_tree_dir) / filename
    path.write_text(content, encoding="utf-8")
    repo.index.add([filename])
    return repo.index.commit(message, author=ACTOR, committer=ACTOR)


def make_issue(
    id=42,
    subject='[Do] stuff "asap" ',
    assignee="Arnold Bcon Tran",
    version="8.1.0",
    parent=None,
) -> Issue:
    return Issue(
        id=id,
        subject=subject,
        fixed_version=NamedProperty(id=318, name=version),
        assigned_to=NamedProperty(id=220, name=assignee),
        custom_fields=(
            CustomField(id=50, name="Developer", value="220"),
            CustomField(id=51, name="SF Case", value=None),
        ),
        parent=IdProperty(id=parent) if parent is not None else None,
    )


@pytest.fixture
def origin_repo(tmp_path) -> git.Repo:
    """An upstream repository with a single commit on ``master``."""
    repo = git.Repo.init(tmp_path / "origin")
    commit_file(repo, "README", "hello\n", "initial commit")
    repo.git.branch("-M", "master")
    return repo


@pytest.fixture
def make_clone(tmp_path, origin_repo):
    """Return a factory cloning *origin_repo* after adding extra branches to it.

    Each extra branch gets its own commit so base selection is observable.
    """

    def factory(*branches: str) -> git.Repo:
        for name in branches:
            head = origin_repo.create_head(name, origin_repo.heads.master.commit)
            head.checkout()
            commit_file(origin_repo, "README", f"{name}\n", f"work on {name}")
            origin_repo.heads.master.checkout()
        return git.Repo.clone_from(origin_repo.working_tree_dir, tmp_path / "work")

    return factory
