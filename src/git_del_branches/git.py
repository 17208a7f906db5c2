"""Git repository operations."""

import logging
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, Optional

from git import GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError, Repo

logger = logging.getLogger(__name__)

DEFAULT_PROTECT = ["master", "main", "develop", "development"]

REMOTES_PREFIX = "refs/remotes/"


class GitError(Exception):
    """Git operation error."""


class NotAGitRepository(GitError):
    """The given path is not inside a Git working tree."""


class GitToolUnavailable(GitError):
    """The git executable could not be run."""


class BranchDeletionFailed(GitError):
    """A single branch could not be deleted."""

    def __init__(self, branch: str, message: str) -> None:
        """Initialize error.

        Args:
            branch: Name of the branch that was not deleted
            message: Reason reported by git
        """
        super().__init__(f"Failed to delete {branch}: {message}")
        self.branch = branch
        self.message = message


class UserCancelled(Exception):
    """The user aborted an interactive prompt."""


@dataclass(frozen=True)
class Branch:
    """A local branch as reported by git."""

    name: str
    is_current: bool = False
    upstream: Optional[str] = None


@dataclass
class DeletionResult:
    """Outcome of deleting one branch."""

    branch: str
    succeeded: bool
    message: str = ""
    upstream: Optional[str] = None
    upstream_deleted: bool = False


def is_protected(branch_name: str, protect: Iterable[str]) -> bool:
    """Check whether a branch name matches any protect pattern."""
    return any(fnmatch(branch_name, pattern) for pattern in protect if pattern)


def _git_message(err: GitCommandError) -> str:
    stderr = err.stderr.strip() if isinstance(err.stderr, str) else ""
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:") :].strip()
    return stderr.strip("'").strip() or str(err)


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Path) -> None:
        """Initialize repository.

        Raises:
            NotAGitRepository: If path is not inside a non-bare work tree
        """
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as err:
            raise NotAGitRepository(f"Not a git repository: {path}") from err
        if self.repo.bare:
            raise NotAGitRepository(f"Cannot operate on bare repository: {path}")
        logger.debug("Opened repository at %s", self.repo.working_tree_dir)

    def _run(self, command: str, *args: str) -> str:
        """Run a git subcommand in the repository and return its output."""
        logger.debug("git %s %s", command, " ".join(args))
        try:
            return getattr(self.repo.git, command.replace("-", "_"))(*args)
        except GitCommandNotFound as err:
            raise GitToolUnavailable(f"Unable to run git: {err}") from err

    def get_current_branch_name(self) -> str:
        """Get current branch name, or an empty string on a detached HEAD."""
        try:
            return self._run("symbolic-ref", "--quiet", "--short", "HEAD").strip()
        except GitCommandError:
            return ""

    def list_branches(self) -> list[Branch]:
        """List all local branches in git's order."""
        try:
            output = self._run(
                "for-each-ref",
                "--format=%(HEAD)%09%(refname:lstrip=2)%09%(upstream)",
                "refs/heads",
            )
        except GitCommandError as err:
            raise GitError(f"Failed to list branches: {_git_message(err)}") from err

        branches: list[Branch] = []
        seen: set[str] = set()
        for line in output.splitlines():
            if not line.strip():
                continue
            head, name, upstream_ref = (line.split("\t") + ["", ""])[:3]
            if name in seen:
                continue
            seen.add(name)
            # Only remote-tracking upstreams count; a local upstream is just another branch
            upstream = upstream_ref[len(REMOTES_PREFIX) :] if upstream_ref.startswith(REMOTES_PREFIX) else None
            branches.append(Branch(name=name, is_current=head.strip() == "*", upstream=upstream))
        logger.debug("Found %d local branches", len(branches))
        return branches

    def get_deletable_branches(self, protect: Optional[list[str]] = None) -> list[Branch]:
        """Get local branches that may be offered for deletion."""
        if protect is None:
            protect = DEFAULT_PROTECT

        deletable = []
        for branch in self.list_branches():
            if branch.is_current:
                continue
            if is_protected(branch.name, protect):
                logger.debug("Skipping protected branch %s", branch.name)
                continue
            deletable.append(branch)
        return deletable

    def delete_branch(self, branch_name: str, force: bool = True) -> None:
        """Delete a single local branch.

        Raises:
            BranchDeletionFailed: If git refuses to delete the branch
        """
        # Never delete the checked out branch
        if branch_name == self.get_current_branch_name():
            raise BranchDeletionFailed(branch_name, "branch is currently checked out")
        try:
            self._run("branch", "-D" if force else "-d", branch_name)
        except GitCommandError as err:
            raise BranchDeletionFailed(branch_name, _git_message(err)) from err

    def delete_remote_tracking_branch(self, upstream: str) -> None:
        """Delete a remote-tracking branch such as ``origin/feature``.

        Only the local ref is removed; nothing is pushed.
        """
        try:
            self._run("branch", "-D", "-r", upstream)
        except GitCommandError as err:
            raise BranchDeletionFailed(upstream, _git_message(err)) from err

    def delete_branches(
        self,
        branches: list[Branch],
        force: bool = True,
        delete_upstream: bool = False,
    ) -> list[DeletionResult]:
        """Delete branches one by one, carrying on past failures.

        Returns:
            One result per branch, in the order given.
        """
        results = []
        for branch in branches:
            result = DeletionResult(branch=branch.name, succeeded=False, upstream=branch.upstream)
            try:
                self.delete_branch(branch.name, force=force)
            except BranchDeletionFailed as err:
                logger.debug("%s", err)
                result.message = err.message
                results.append(result)
                continue
            result.succeeded = True

            if delete_upstream and branch.upstream:
                try:
                    self.delete_remote_tracking_branch(branch.upstream)
                    result.upstream_deleted = True
                except BranchDeletionFailed as err:
                    logger.debug("%s", err)
                    result.message = err.message
            results.append(result)
        return results
