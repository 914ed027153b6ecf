"""
KEP query engine.

Reads the KEPs of the requested SIGs from the local enhancements repo,
optionally adds KEPs from open PRs, filters by status and stage and
prints the result.

KEPs that exist locally and also have an open PR are listed twice:
once from the repo, once from the PR.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Iterable

import click

from .config import (
    CommonArgs,
    KepctlConfig,
    RepoNotFoundError,
    find_enhancements_repo,
    load_github_token,
)
from .github import GitHubAPIError, GitHubClient
from .keps import KEPParseError, Proposal, find_local_keps, read_kep
from .output import default_print_configs, print_json, print_table, print_yaml

logger = logging.getLogger(__name__)

SIG_PREFIX = "sig-"
QUERY_COLUMNS = ("LastUpdated", "Stage", "Status", "SIG", "Authors", "Title", "Link")


class ErrorKind(Enum):
    SETUP_FAILED = "setup_failed"
    LOCAL_ENUMERATION_FAILED = "local_enumeration_failed"
    REMOTE_LOOKUP_FAILED = "remote_lookup_failed"


class QueryError(Exception):
    """A query phase failed; the cause is chained as __cause__."""
    def __init__(self, kind: ErrorKind, context: str, cause: BaseException):
        super().__init__(f"{context}: {cause}")
        self.kind = kind
        self.context = context
        self.cause = cause


def normalize_sigs(sigs: Iterable[str]) -> list[str]:
    """Prefix each SIG with 'sig-' unless it already has it."""
    return [s if s.startswith(SIG_PREFIX) else SIG_PREFIX + s for s in sigs]


@dataclass(frozen=True)
class SearchCriteria:
    """
    What to search for.

    Build with SearchCriteria.create() so SIGs are normalized. Status
    and stage values are taken as given; unknown values simply match
    nothing.
    """
    sigs: tuple[str, ...] = ()
    statuses: frozenset[str] = field(default_factory=frozenset)
    stages: frozenset[str] = field(default_factory=frozenset)
    include_prs: bool = False

    @classmethod
    def create(
        cls,
        sigs: Iterable[str] = (),
        statuses: Iterable[str] = (),
        stages: Iterable[str] = (),
        include_prs: bool = False,
    ) -> "SearchCriteria":
        return cls(
            sigs=tuple(normalize_sigs(sigs)),
            statuses=frozenset(statuses),
            stages=frozenset(stages),
            include_prs=include_prs,
        )


def filter_proposals(
    proposals: list[Proposal],
    statuses: set[str] | frozenset[str] = frozenset(),
    stages: set[str] | frozenset[str] = frozenset(),
) -> list[Proposal]:
    """
    Keep KEPs whose status and stage are accepted, in their original order.

    An empty set accepts every value for that field.
    """
    keep = []
    for kep in proposals:
        if statuses and kep.status not in statuses:
            continue
        if stages and kep.stage not in stages:
            continue
        keep.append(kep)
    return keep


class Client:
    """Runs KEP queries, writing results to `out` and per-KEP errors to `err`."""

    def __init__(
        self,
        config: KepctlConfig | None = None,
        out: IO[str] | None = None,
        err: IO[str] | None = None,
    ):
        self.config = config or KepctlConfig()
        self.out = out
        self.err = err

    def query(self, criteria: SearchCriteria, args: CommonArgs, output: str = "table") -> list[Proposal]:
        """
        Search the local repo and possibly GitHub for KEPs matching criteria.

        Prints the matching KEPs in the given output format and returns them.

        Raises:
            QueryError: if the repo cannot be found, a SIG's KEPs cannot be
                listed, or the PR search fails. Nothing is printed then.
        """
        # Keep stdout parseable for json/yaml
        if output == "table":
            click.echo("Searching for KEPs...", file=self.out)
        else:
            click.echo("Searching for KEPs...", file=self.err, err=True)
        args = self.config.merge_args(args)

        try:
            repo_path = find_enhancements_repo(args)
        except RepoNotFoundError as e:
            raise QueryError(ErrorKind.SETUP_FAILED, "unable to search KEPs", e) from e

        # Credentials live only as long as this query
        github = GitHubClient(token=load_github_token(args), config=self.config.github)

        all_keps: list[Proposal] = []
        for sig in criteria.sigs:
            try:
                names = find_local_keps(repo_path, sig)
            except OSError as e:
                raise QueryError(
                    ErrorKind.LOCAL_ENUMERATION_FAILED, "unable to search for local KEPs", e
                ) from e

            for name in names:
                try:
                    kep = read_kep(repo_path, sig, name)
                except (KEPParseError, OSError) as e:
                    click.echo(f"ERROR READING KEP {name}: {e}", file=self.err, err=True)
                    continue
                all_keps.append(kep)

            if criteria.include_prs:
                try:
                    pr_keps = github.find_kep_pull_requests(sig)
                except GitHubAPIError as e:
                    raise QueryError(
                        ErrorKind.REMOTE_LOOKUP_FAILED, "unable to search for KEP PRs", e
                    ) from e
                if pr_keps:
                    all_keps.extend(pr_keps)

        keep = filter_proposals(all_keps, criteria.statuses, criteria.stages)
        logger.debug("%d of %d KEPs match", len(keep), len(all_keps))

        self.render(keep, output)
        return keep

    def render(self, proposals: list[Proposal], output: str = "table") -> None:
        if output == "json":
            print_json(proposals, file=self.out)
        elif output == "yaml":
            print_yaml(proposals, file=self.out)
        else:
            print_table(default_print_configs(*QUERY_COLUMNS), proposals, file=self.out)
