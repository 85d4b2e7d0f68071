"""Dependency version helpers.

Splits a dependency mapping into entries npm can resolve from the manifest
(exact versions and ranges) and entries that must be handed to the package
manager as explicit install targets (``latest``, dist-tags, git URLs, unresolved
``{{token}}`` placeholders).  Also hosts the small ``{{a.b.c}}`` substitution
used when commands add dependencies with templated versions.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

import semantic_version

_PLACEHOLDER_PATTERN = re.compile(r"\{\{([\w.]+)\}\}")
# node-semver tolerates blanks between an operator and its version (">= 1.2.3").
_OPERATOR_SPACING = re.compile(r"(<=|>=|<|>|=|~|\^)\s+")

TSED_VERSION_PLACEHOLDER = "{{tsedVersion}}"


# ---------------------------------------------------------------------------
# Validation / partitioning
# ---------------------------------------------------------------------------


def is_valid_version(version: str | None) -> bool:
    """Return ``True`` for a semantic version or an npm range.

    ``"1.2.3"``, ``"^1.2.0"``, ``"~1.2"``, ``">=1 <2"`` and ``"*"`` are valid;
    ``"latest"``, ``"next"``, ``""`` and ``"{{x}}"`` are not.
    """
    if not isinstance(version, str) or not version.strip():
        return False
    if semantic_version.validate(version):
        return True
    try:
        semantic_version.NpmSpec(_OPERATOR_SPACING.sub(r"\1", version.strip()))
    except ValueError:
        return False
    return True


def partition_valid(deps: Mapping[str, str] | None) -> dict[str, str]:
    """Return the entries of *deps* whose version is valid, in input order."""
    return {name: version for name, version in (deps or {}).items() if is_valid_version(version)}


def partition_invalid(deps: Mapping[str, str] | None) -> list[str]:
    """Return install targets for the entries of *deps* with a placeholder version.

    A ``latest`` entry becomes the bare package name; anything else becomes
    ``name@version``.
    """
    targets: list[str] = []
    for name, version in (deps or {}).items():
        if is_valid_version(version):
            continue
        targets.append(name if version == "latest" else f"{name}@{version}")
    return targets


def sort_keys(mapping: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a copy of *mapping* with its keys in lexicographic order."""
    return {key: mapping[key] for key in sorted(mapping or {})}


# ---------------------------------------------------------------------------
# Placeholder substitution
# ---------------------------------------------------------------------------


def get_value(path: str, scope: Any, default: Any = None) -> Any:
    """Resolve a dotted *path* (``"a.b.c"``) through mappings and attributes."""
    value = scope
    for segment in path.split("."):
        if isinstance(value, Mapping):
            if segment not in value:
                return default
            value = value[segment]
        elif hasattr(value, segment):
            value = getattr(value, segment)
        else:
            return default
    return value


def substitute_version(template: str | None, scope: Mapping[str, Any] | None = None) -> str:
    """Replace ``{{token}}`` placeholders in a version string.

    ``{{tsedVersion}}`` is resolved first from the ``tsedVersion`` key of
    *scope*; every other token is looked up by dotted path.  Tokens that
    cannot be resolved are replaced by an empty string.
    """
    scope = scope or {}
    result = template or ""

    if "tsedVersion" in scope and scope["tsedVersion"] is not None:
        result = result.replace(TSED_VERSION_PLACEHOLDER, str(scope["tsedVersion"]))

    def replacer(match: re.Match[str]) -> str:
        value = get_value(match.group(1), scope)
        return "" if value is None else str(value)

    return _PLACEHOLDER_PATTERN.sub(replacer, result)
