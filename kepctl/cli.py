"""
kepctl CLI - Query Kubernetes Enhancement Proposals.

Commands:
    query     - List KEPs matching SIG, status and stage criteria
"""

from __future__ import annotations

import logging

import click
from dotenv import load_dotenv

from . import __version__
from .config import OUTPUT_FORMATS, CommonArgs, KepctlConfig, get_repo_root
from .query import Client, QueryError, SearchCriteria

# Load .env file from current directory, then repo root
load_dotenv()
load_dotenv(get_repo_root() / ".env")


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """kepctl - Query Kubernetes Enhancement Proposals."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--sig", "sigs", multiple=True, help="SIG to search; 'node' and 'sig-node' are equivalent (repeatable)")
@click.option("--status", "statuses", multiple=True, help="Only KEPs with this status (repeatable)")
@click.option("--stage", "stages", multiple=True, help="Only KEPs at this stage (repeatable)")
@click.option("--include-prs", is_flag=True, help="Also include KEPs from open pull requests")
@click.option("--repo-path", default=None, help="Path to a local enhancements repository")
@click.option("--gh-token-path", default=None, help="File containing a GitHub token")
@click.option("-o", "--output", type=click.Choice(OUTPUT_FORMATS), default=None, help="Output format")
def query(
    sigs: tuple[str, ...],
    statuses: tuple[str, ...],
    stages: tuple[str, ...],
    include_prs: bool,
    repo_path: str | None,
    gh_token_path: str | None,
    output: str | None,
):
    """Search for KEPs matching the given criteria.

    Local KEPs are read from the enhancements repository. With
    --include-prs, KEPs in open pull requests are added too; a KEP with
    an open PR is listed twice.

    Examples:

        kepctl query --sig node --status implementable
        kepctl query --sig api-machinery --stage alpha --stage beta
        kepctl query --sig node --include-prs -o yaml
    """
    config = KepctlConfig.load(get_repo_root())
    criteria = SearchCriteria.create(sigs, statuses, stages, include_prs)
    args = CommonArgs(repo_path=repo_path, token_path=gh_token_path)

    client = Client(config)
    try:
        client.query(criteria, args, output=output or config.output)
    except QueryError as e:
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    main()
