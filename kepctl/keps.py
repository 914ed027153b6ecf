"""
KEP model and local repository access.

KEPs live under keps/<sig>/<name>/ in the enhancements repository.
Current KEPs keep their metadata in kep.yaml; older ones carry it as
YAML front matter at the top of README.md.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

KEPS_DIR = "keps"
KEP_METADATA_FILE = "kep.yaml"
LEGACY_KEP_FILE = "README.md"
KEP_LINK_BASE = "https://git.k8s.io/enhancements/keps"


class KEPParseError(Exception):
    """A KEP could not be read or parsed."""


@dataclass
class Milestone:
    """Release in which a KEP reaches each stage."""
    alpha: str = ""
    beta: str = ""
    stable: str = ""


@dataclass
class FeatureGate:
    name: str
    components: list[str] = field(default_factory=list)


@dataclass
class Proposal:
    """Parsed KEP metadata."""
    title: str
    name: str = ""
    number: str = ""
    authors: list[str] = field(default_factory=list)
    owning_sig: str = ""
    participating_sigs: list[str] = field(default_factory=list)
    reviewers: list[str] = field(default_factory=list)
    approvers: list[str] = field(default_factory=list)
    editor: str = ""
    creation_date: str = ""
    last_updated: str = ""
    status: str = ""
    stage: str = ""
    latest_milestone: str = ""
    milestone: Milestone = field(default_factory=Milestone)
    feature_gates: list[FeatureGate] = field(default_factory=list)
    disable_supported: bool = False
    see_also: list[str] = field(default_factory=list)
    replaces: list[str] = field(default_factory=list)
    superseded_by: list[str] = field(default_factory=list)
    pr_number: str = ""  # Set for KEPs found in open PRs
    filename: str = ""
    link: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON/YAML output."""
        return asdict(self)


def _text(value: Any) -> str:
    # yaml.safe_load turns unquoted dates and numbers into non-strings
    if value is None:
        return ""
    return str(value)


def _text_list(data: dict[str, Any], key: str) -> list[str]:
    """Read a list-of-strings field; a lone scalar becomes a one-item list."""
    value = data.get(key)
    if value is None or value == "":
        return []
    if isinstance(value, (str, int, float)):
        return [str(value)]
    if not isinstance(value, list):
        raise KEPParseError(f"{key}: expected a list, got {type(value).__name__}")
    return [_text(v) for v in value if v is not None]


def parse_kep(content: str, filename: str = "") -> Proposal:
    """
    Parse kep.yaml content into a Proposal.

    Raises:
        KEPParseError: if the content is not a YAML mapping, has no title,
            or a list field has the wrong type
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise KEPParseError(f"invalid YAML in {filename or 'KEP'}: {e}") from e

    if not isinstance(data, dict):
        raise KEPParseError(f"{filename or 'KEP'} does not contain a metadata mapping")

    title = _text(data.get("title")).strip()
    if not title:
        raise KEPParseError(f"{filename or 'KEP'} has no title")

    milestone_data = data.get("milestone") or {}
    if not isinstance(milestone_data, dict):
        milestone_data = {}

    gates_data = data.get("feature-gates") or []
    if not isinstance(gates_data, list):
        raise KEPParseError(
            f"{filename or 'KEP'}: feature-gates: expected a list, got {type(gates_data).__name__}"
        )

    gates = []
    for gate in gates_data:
        if isinstance(gate, dict) and gate.get("name"):
            gates.append(FeatureGate(
                name=_text(gate["name"]),
                components=_text_list(gate, "components"),
            ))

    return Proposal(
        title=title,
        number=_text(data.get("kep-number")),
        authors=_text_list(data, "authors"),
        owning_sig=_text(data.get("owning-sig")),
        participating_sigs=_text_list(data, "participating-sigs"),
        reviewers=_text_list(data, "reviewers"),
        approvers=_text_list(data, "approvers"),
        editor=_text(data.get("editor")),
        creation_date=_text(data.get("creation-date")),
        last_updated=_text(data.get("last-updated")),
        status=_text(data.get("status")),
        stage=_text(data.get("stage")),
        latest_milestone=_text(data.get("latest-milestone")),
        milestone=Milestone(
            alpha=_text(milestone_data.get("alpha")),
            beta=_text(milestone_data.get("beta")),
            stable=_text(milestone_data.get("stable")),
        ),
        feature_gates=gates,
        disable_supported=bool(data.get("disable-supported", False)),
        see_also=_text_list(data, "see-also"),
        replaces=_text_list(data, "replaces"),
        superseded_by=_text_list(data, "superseded-by"),
        filename=filename,
    )


def extract_front_matter(content: str) -> str:
    """Return the YAML block between the leading '---' markers of a document."""
    lines = content.splitlines()
    if not lines or lines[0].strip() != "---":
        raise KEPParseError("no metadata front matter found")

    for i, line in enumerate(lines[1:], 1):
        if line.strip() == "---":
            return "\n".join(lines[1:i])

    raise KEPParseError("unterminated metadata front matter")


def kep_link(sig: str, name: str) -> str:
    return f"{KEP_LINK_BASE}/{sig}/{name}"


def find_local_keps(repo_path: Path, sig: str) -> list[str]:
    """
    List KEP directory names for a SIG.

    Raises:
        OSError: if keps/<sig> cannot be listed
    """
    sig_dir = Path(repo_path) / KEPS_DIR / sig
    names = [
        entry.name
        for entry in sig_dir.iterdir()
        if entry.is_dir() and not entry.name.startswith(".")
    ]
    logger.debug("Found %d local KEPs for %s", len(names), sig)
    return sorted(names)


def read_kep(repo_path: Path, sig: str, name: str) -> Proposal:
    """
    Read keps/<sig>/<name>, preferring kep.yaml over legacy README.md front matter.

    Raises:
        KEPParseError: if neither file can be read and parsed
    """
    kep_dir = Path(repo_path) / KEPS_DIR / sig / name
    metadata_path = kep_dir / KEP_METADATA_FILE

    if metadata_path.is_file():
        path = metadata_path
        legacy = False
    else:
        path = kep_dir / LEGACY_KEP_FILE
        legacy = True

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise KEPParseError(f"unable to read {path}: {e}") from e

    if legacy:
        content = extract_front_matter(content)

    kep = parse_kep(content, filename=str(path))
    kep.name = name
    kep.link = kep_link(sig, name)
    if not kep.owning_sig:
        kep.owning_sig = sig
    return kep
