"""
Configuration management for kepctl.

Loads:
- kepctl.yml: Optional configuration (repo location, token path, output)
- Environment: ENHANCEMENTS_PATH, GITHUB_TOKEN

Also provides the two setup steps every command shares: locating the
enhancements repository and loading GitHub credentials.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "kepctl.yml"
ENHANCEMENTS_PATH_ENV = "ENHANCEMENTS_PATH"
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"
DEFAULT_REPO_PATH = "~/go/src/k8s.io/enhancements"
OUTPUT_FORMATS = ("table", "json", "yaml")


class RepoNotFoundError(Exception):
    """The enhancements repository could not be located."""


@dataclass
class GitHubConfig:
    """Where in-flight KEPs are searched for."""
    owner: str = "kubernetes"
    repo: str = "enhancements"
    label: str = "kind/kep"  # PRs carrying KEP changes

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass
class CommonArgs:
    """Arguments shared by every kepctl command."""
    repo_path: str | None = None  # Path to a local enhancements clone
    token_path: str | None = None  # File holding a GitHub token


@dataclass
class KepctlConfig:
    """Complete kepctl configuration."""
    repo_path: str | None = None
    token_path: str | None = None
    output: str = "table"
    github: GitHubConfig = field(default_factory=GitHubConfig)

    @classmethod
    def load(cls, repo_root: Path) -> "KepctlConfig":
        """Load configuration from repo root directory."""
        config_path = repo_root / CONFIG_FILENAME
        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        return cls._parse(data)

    @classmethod
    def _parse(cls, data: dict[str, Any]) -> "KepctlConfig":
        """Parse configuration dictionary."""
        output = data.get("output", "table")
        if output not in OUTPUT_FORMATS:
            logger.warning("Unknown output format %r in %s, using table", output, CONFIG_FILENAME)
            output = "table"

        github_data = data.get("github", {}) or {}
        defaults = GitHubConfig()
        return cls(
            repo_path=data.get("repo_path"),
            token_path=data.get("token_path"),
            output=output,
            github=GitHubConfig(
                owner=github_data.get("owner", defaults.owner),
                repo=github_data.get("repo", defaults.repo),
                label=github_data.get("label", defaults.label),
            ),
        )

    def merge_args(self, args: CommonArgs) -> CommonArgs:
        """Fill unset command line arguments from the config file."""
        return CommonArgs(
            repo_path=args.repo_path or self.repo_path,
            token_path=args.token_path or self.token_path,
        )


def get_repo_root() -> Path:
    """Find the repository root (directory containing .git)."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".git").exists():
            return current
        current = current.parent
    # No .git found, use current directory
    return Path.cwd()


def find_enhancements_repo(args: CommonArgs) -> Path:
    """
    Locate the enhancements repository.

    Checked in order:
    - args.repo_path (flag or kepctl.yml)
    - ENHANCEMENTS_PATH environment variable
    - ~/go/src/k8s.io/enhancements

    Raises:
        RepoNotFoundError: if the chosen path is missing or not a directory
    """
    raw = args.repo_path or os.environ.get(ENHANCEMENTS_PATH_ENV) or DEFAULT_REPO_PATH
    path = Path(raw).expanduser()

    if not path.exists():
        raise RepoNotFoundError(f"unable to find enhancements repo at {path}")
    if not path.is_dir():
        raise RepoNotFoundError(f"invalid enhancements repo path {path}: not a directory")

    logger.debug("Using enhancements repo: %s", path)
    return path.resolve()


def load_github_token(args: CommonArgs) -> str | None:
    """
    Load a GitHub token, best effort.

    Reads args.token_path if set, otherwise GITHUB_TOKEN. A missing or
    unreadable token file is logged and treated as no token.
    """
    if args.token_path:
        token_file = Path(args.token_path).expanduser()
        try:
            token = token_file.read_text().strip()
        except OSError as e:
            logger.warning("Unable to read GitHub token from %s: %s", token_file, e)
        else:
            if token:
                return token
            logger.warning("GitHub token file %s is empty", token_file)

    return os.environ.get(GITHUB_TOKEN_ENV) or None
