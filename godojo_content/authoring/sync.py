"""Git helper for content changes."""

import logging
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from godojo_content.errors import ValidationError

logger = logging.getLogger(__name__)

GitRunner = Callable[[list[str]], subprocess.CompletedProcess]

SCOPES = ("content", "config", "all")
DEFAULT_CONFIG_FILES = ("content.config.json", "godojo.yaml")


@dataclass
class ChangeSummary:
    """Working tree changes reported by ``git status --porcelain``."""

    added: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        return self.added + self.modified + self.deleted

    @property
    def empty(self) -> bool:
        return not self.paths


def parse_porcelain(output: str) -> ChangeSummary:
    summary = ChangeSummary()
    for line in output.splitlines():
        if len(line) < 4:
            continue
        status, path = line[:2], line[3:].strip()
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        path = path.strip('"')
        if "?" in status or "A" in status:
            summary.added.append(path)
        elif "D" in status:
            summary.deleted.append(path)
        else:
            summary.modified.append(path)
    return summary


def suggest_commit_message(paths: list[str], content_dir: str = "content") -> str:
    """Commit message naming the content category touched, if only one."""
    prefix = content_dir.rstrip("/") + "/"
    categories = set()
    for path in paths:
        if not path.startswith(prefix):
            return "content: update content"
        parts = path[len(prefix):].split("/")
        categories.add(parts[0])

    if len(categories) == 1:
        return f"content: update category {categories.pop()}"
    if categories:
        return "content: update multiple categories"
    return "content: update content"


def _require_scope(scope: str) -> None:
    if scope not in SCOPES:
        raise ValueError(f"Unknown scope '{scope}' (expected one of {', '.join(SCOPES)})")


def _touches(pathspec: str, changed: list[str]) -> bool:
    """True if ``pathspec`` names a changed file, or a directory containing one."""
    if pathspec.endswith("/"):
        return any(path.startswith(pathspec) for path in changed)
    return pathspec in changed


def _default_runner(cwd: Path) -> GitRunner:
    def run(args: list[str]) -> subprocess.CompletedProcess:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )

    return run


class GitSync:
    """Status, commit, push and pull for the content repository.

    Args:
        root: Repository working directory.
        content_dir: Content directory relative to ``root``.
        config_files: Configuration files relative to ``root``, staged by the
            ``config`` scope when present.
        runner: Callable executing ``git`` with the given arguments.
    """

    def __init__(
        self,
        root: str | Path = ".",
        content_dir: str = "content",
        config_files: tuple[str, ...] | list[str] = DEFAULT_CONFIG_FILES,
        runner: GitRunner | None = None,
    ) -> None:
        self._root = Path(root)
        self._content_dir = content_dir
        self._config_files = list(config_files)
        self._run = runner or _default_runner(self._root)

    def _git(self, *args: str) -> str:
        try:
            completed = self._run(list(args))
        except FileNotFoundError as exc:
            raise ValidationError("git is not installed") from exc
        if completed.returncode != 0:
            message = (completed.stderr or completed.stdout or "").strip()
            raise ValidationError(f"git {' '.join(args)} failed: {message}")
        return completed.stdout or ""

    def ensure_repository(self) -> None:
        """Raises ValidationError outside a git working tree."""
        try:
            self._git("rev-parse", "--is-inside-work-tree")
        except ValidationError as exc:
            raise ValidationError(f"Not a git repository: {self._root}") from exc

    def current_branch(self) -> str:
        return self._git("branch", "--show-current").strip()

    def status(self) -> ChangeSummary:
        self.ensure_repository()
        return parse_porcelain(self._git("status", "--porcelain"))

    def scope_paths(self, scope: str, changes: ChangeSummary) -> list[str]:
        """Pathspecs to stage for ``scope``: paths on disk or changed in git."""
        _require_scope(scope)
        if scope == "all":
            return ["."]
        if scope == "content":
            candidates = [self._content_dir.rstrip("/") + "/"]
        else:
            candidates = self._config_files
        return [
            path
            for path in candidates
            if (self._root / path).exists() or _touches(path, changes.paths)
        ]

    def commit(self, message: str | None = None, scope: str = "content") -> str | None:
        """Stage ``scope`` and commit.

        Returns:
            The commit message used, or None when there was nothing to commit.
        """
        _require_scope(scope)
        changes = self.status()
        if changes.empty:
            logger.info("Nothing to commit")
            return None

        paths = self.scope_paths(scope, changes)
        if not paths:
            logger.info("Nothing to stage for scope %s", scope)
            return None
        self._git("add", *paths)
        diff = self._git("diff", "--cached", "--name-only")
        staged = [line for line in diff.splitlines() if line]
        if not staged:
            logger.info("No changes staged for scope %s", scope)
            return None

        message = message or suggest_commit_message(staged, self._content_dir)
        self._git("commit", "-m", message)
        logger.info("Committed %d files: %s", len(staged), message)
        return message

    def push(self) -> str:
        self.ensure_repository()
        branch = self.current_branch()
        self._git("push", "origin", branch)
        return branch

    def pull(self) -> str:
        self.ensure_repository()
        branch = self.current_branch()
        self._git("pull", "origin", branch)
        return branch
