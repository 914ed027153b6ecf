from __future__ import annotations

import io
import json

import yaml

from kepctl.keps import Proposal
from kepctl.output import default_print_configs, format_table, print_json, print_yaml


def sample() -> list[Proposal]:
    return [
        Proposal(title="Pod Overhead", status="implemented", stage="stable",
                 owning_sig="sig-node", authors=["@a", "@b"], last_updated="2021-01-10"),
        Proposal(title="Swap", status="provisional", stage="alpha", owning_sig="sig-node"),
    ]


def test_default_print_configs_skips_unknown():
    configs = default_print_configs("Title", "Bogus", "Status")
    assert [c.title for c in configs] == ["Title", "Status"]


def test_format_table_aligns_columns():
    table = format_table(default_print_configs("Title", "Authors"), sample())
    lines = table.splitlines()

    assert lines[0].split() == ["TITLE", "AUTHORS"]
    assert lines[1].startswith("Pod Overhead   @a, @b")
    assert lines[2] == "Swap"
    assert lines[1].index("@a") == lines[0].index("AUTHORS")


def test_format_table_empty_prints_header():
    assert format_table(default_print_configs("Stage"), []) == "STAGE"


def test_print_json():
    out = io.StringIO()
    print_json(sample(), file=out)

    data = json.loads(out.getvalue())
    assert [d["title"] for d in data] == ["Pod Overhead", "Swap"]
    assert data[0]["milestone"] == {"alpha": "", "beta": "", "stable": ""}


def test_print_yaml():
    out = io.StringIO()
    print_yaml(sample(), file=out)

    data = yaml.safe_load(out.getvalue())
    assert data[1]["stage"] == "alpha"
