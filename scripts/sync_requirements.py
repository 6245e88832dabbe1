#!/usr/bin/env python3
"""Generate or verify requirements.txt from pyproject.toml.

Usage:
    python scripts/sync_requirements.py           # rewrite requirements.txt
    python scripts/sync_requirements.py --check   # fail when out of sync
"""

from __future__ import annotations

import argparse
import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
REQUIREMENTS = ROOT / "requirements.txt"
SYNC_EXTRAS = ("cli", "server")
HEADER = [
    "# Generated from pyproject.toml (base + extras: cli,server)",
    "# Do not edit manually; run: python scripts/sync_requirements.py",
    "",
]


def _declared() -> list[str]:
    pyproject = tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))
    project = pyproject["project"]
    deps = set(project.get("dependencies", []))
    optional = project.get("optional-dependencies", {})
    for extra in SYNC_EXTRAS:
        deps.update(optional.get(extra, []))
    return sorted(dep.strip() for dep in deps if dep.strip())


def _pinned() -> set[str]:
    entries: set[str] = set()
    for line in REQUIREMENTS.read_text(encoding="utf-8").splitlines():
        entry = line.split("#", 1)[0].strip()
        if entry:
            entries.add(entry)
    return entries


def _check(declared: list[str]) -> None:
    expected = set(declared)
    actual = _pinned()
    missing = sorted(expected - actual)
    unexpected = sorted(actual - expected)
    if not missing and not unexpected:
        print("Dependency sync check passed.")
        return
    lines = [
        "requirements.txt is out of sync with pyproject.toml.",
        "Run: python scripts/sync_requirements.py",
    ]
    lines += [f"- missing: {entry}" for entry in missing]
    lines += [f"- unexpected: {entry}" for entry in unexpected]
    raise SystemExit("\n".join(lines))


def main() -> None:
    """Rewrite requirements.txt, or compare it against pyproject.toml with --check."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--check", action="store_true", help="Only verify; do not write.")
    args = parser.parse_args()

    declared = _declared()
    if args.check:
        _check(declared)
        return
    REQUIREMENTS.write_text("\n".join(HEADER) + "\n".join(declared) + "\n", encoding="utf-8")
    print(f"Wrote {len(declared)} requirements to {REQUIREMENTS.name}")


if __name__ == "__main__":
    main()
