from __future__ import annotations

from pathlib import Path

import pytest


def write_kep(repo: Path, sig: str, name: str, **fields: str) -> Path:
    """Write keps/<sig>/<name>/kep.yaml with the given top-level fields."""
    kep_dir = repo / "keps" / sig / name
    kep_dir.mkdir(parents=True, exist_ok=True)
    lines = [f"{key.replace('_', '-')}: {value}" for key, value in fields.items()]
    path = kep_dir / "kep.yaml"
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def enhancements_repo(tmp_path):
    repo = tmp_path / "enhancements"
    write_kep(
        repo, "sig-node", "100-pod-overhead",
        title="Pod Overhead", status="implementable", stage="beta",
        owning_sig="sig-node", last_updated="2021-01-10",
    )
    write_kep(
        repo, "sig-node", "200-swap",
        title="Swap Support", status="provisional", stage="alpha",
        owning_sig="sig-node", last_updated="2021-03-01",
    )
    write_kep(
        repo, "sig-api-machinery", "300-server-side-apply",
        title="Server Side Apply", status="implemented", stage="stable",
        owning_sig="sig-api-machinery", last_updated="2020-11-20",
    )
    return repo
