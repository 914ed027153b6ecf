"""
Rendering of KEP lists as a text table, JSON or YAML.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, IO

import click
import yaml

from .keps import Proposal


@dataclass(frozen=True)
class PrintConfig:
    """A table column: header and how to pull its value from a KEP."""
    title: str
    value: Callable[[Proposal], str]


_COLUMNS: dict[str, PrintConfig] = {
    "Authors": PrintConfig("Authors", lambda k: ", ".join(k.authors)),
    "LastUpdated": PrintConfig("Updated", lambda k: k.last_updated),
    "Link": PrintConfig("Link", lambda k: k.link),
    "Milestone": PrintConfig("Milestone", lambda k: k.latest_milestone),
    "Number": PrintConfig("#", lambda k: k.number),
    "PRNumber": PrintConfig("PR#", lambda k: k.pr_number),
    "SIG": PrintConfig("SIG", lambda k: k.owning_sig),
    "Stage": PrintConfig("Stage", lambda k: k.stage),
    "Status": PrintConfig("Status", lambda k: k.status),
    "Title": PrintConfig("Title", lambda k: k.title),
}


def default_print_configs(*names: str) -> list[PrintConfig]:
    """Look up column configs by name, skipping unknown names."""
    return [_COLUMNS[name] for name in names if name in _COLUMNS]


def format_table(configs: list[PrintConfig], proposals: list[Proposal]) -> str:
    """Lay out KEPs as a left-aligned, space-separated table."""
    headers = [c.title.upper() for c in configs]
    rows = [[c.value(k) for c in configs] for k in proposals]

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    lines = []
    for row in [headers] + rows:
        lines.append("   ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip())
    return "\n".join(lines)


def print_table(configs: list[PrintConfig], proposals: list[Proposal], file: IO[str] | None = None) -> None:
    if not configs:
        return
    click.echo(format_table(configs, proposals), file=file)


def print_json(proposals: list[Proposal], file: IO[str] | None = None) -> None:
    click.echo(json.dumps([k.to_dict() for k in proposals], indent=2), file=file)


def print_yaml(proposals: list[Proposal], file: IO[str] | None = None) -> None:
    click.echo(yaml.safe_dump([k.to_dict() for k in proposals], sort_keys=False), file=file, nl=False)
