"""Test configuration and fixtures."""

from pathlib import Path
from typing import Generator

import pytest
from git import Actor, Repo


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    The local repository has these branches, with ``main`` checked out:

    - ``main``: tracks ``origin/main``
    - ``feature/a``: pushed, tracks ``origin/feature/a``, merged into main
    - ``feature/b``: local only, not merged
    - ``bugfix/c``: pushed, tracks ``origin/bugfix/c``, not merged

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True)
    local_repo = Repo.init(local_path)

    author = Actor("Test User", "test@example.com")
    local_repo.config_writer().set_value("user", "name", author.name).release()
    local_repo.config_writer().set_value("user", "email", author.email).release()

    readme = local_path / "README.md"
    readme.write_text("# Test Repository")
    local_repo.index.add(["README.md"])
    local_repo.index.commit("Initial commit", author=author)

    # Whatever the default branch is called, make it main
    local_repo.git.branch("-M", "main")
    main_branch = local_repo.heads.main

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    main_branch.set_tracking_branch(origin.refs.main)

    def create_branch(name: str, push: bool = False, merge: bool = False) -> None:
        """Create a branch off main with one commit."""
        main_branch.checkout()
        branch = local_repo.create_head(name)
        branch.checkout()

        file_name = name.replace("/", "_") + ".txt"
        (local_path / file_name).write_text(f"{name} content")
        local_repo.index.add([file_name])
        local_repo.index.commit(f"Add {name}", author=author)

        if push:
            origin.push(name)
            branch.set_tracking_branch(origin.refs[name])

        main_branch.checkout()
        if merge:
            local_repo.git.merge(name, "--no-ff", "--no-edit")

    create_branch("feature/a", push=True, merge=True)
    create_branch("feature/b")
    create_branch("bugfix/c", push=True)

    main_branch.checkout()

    yield local_path, remote_path


@pytest.fixture
def test_repo(test_env: tuple[Path, Path]) -> Path:
    """Path of the local test repository."""
    local_path, _ = test_env
    return local_path
