"""Poetry constraint syntax over PEP 440 versions.

Poetry projects use PEP 440 versions but write constraints the Poetry way:

    - *                : any version
    - ^1.2.3           : >=1.2.3,<2.0.0 (first non-zero component is pinned)
    - ~1.2.3           : >=1.2.3,<1.3.0
    - ~=1.2            : PEP 440 compatible release
    - 1.2.*            : ==1.2.*
    - 1.2.3 / =1.2.3   : exact
    - >=1.0 <2.0       : comparisons, joined by commas or whitespace
    - ^1.0 || ^2.0     : alternatives

Each constraint is translated into PEP 440 ``SpecifierSet`` objects, one per
``||`` alternative. PEP 440 arbitrary equality (``===``) has no Poetry
spelling; such expressions are left to the pep440 fallback.
"""

from __future__ import annotations

import re
from functools import lru_cache

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from releasegate.versioning.pep440 import Pep440Scheme

ID = "poetry"

_OPERATOR_SPACING = re.compile(r"(==|!=|~=|>=|<=|>|<|\^|~)\s+")
_CLAUSE_SEPARATOR = re.compile(r"[\s,]+")

# Constraint parsing patterns, tried in order
CONSTRAINT_PATTERNS = [
    (re.compile(r"^\*$"), "any"),
    (re.compile(r"^==="), "arbitrary"),
    (re.compile(r"^\^(?P<version>.+)$"), "caret"),
    (re.compile(r"^~=(?P<version>.+)$"), "compatible"),
    (re.compile(r"^~(?P<version>.+)$"), "tilde"),
    (re.compile(r"^(?P<op>==|!=|>=|<=|>|<)(?P<version>.+)$"), "comparison"),
    (re.compile(r"^=?(?P<version>\d+(?:\.\d+)*\.\*)$"), "wildcard"),
    (re.compile(r"^=?(?P<version>.+)$"), "exact"),
]


def _parse(version: str) -> Version | None:
    try:
        return Version(version)
    except InvalidVersion:
        return None


def _caret_upper(release: tuple[int, ...]) -> str:
    """Bump the first non-zero component (or the last given one)."""
    index = next(
        (i for i, part in enumerate(release) if part != 0),
        len(release) - 1,
    )
    bumped = list(release[:index]) + [release[index] + 1]
    return ".".join(str(part) for part in bumped)


def _tilde_upper(release: tuple[int, ...]) -> str:
    if len(release) >= 2:
        return f"{release[0]}.{release[1] + 1}.0"
    return str(release[0] + 1)


def _translate_clause(clause: str) -> list[str] | None:
    """Translate one Poetry clause into PEP 440 specifiers."""
    for pattern, kind in CONSTRAINT_PATTERNS:
        match = pattern.match(clause)
        if not match:
            continue

        if kind == "any":
            return []
        if kind == "arbitrary":
            return None

        version = match.group("version")
        if kind == "wildcard":
            return [f"=={version}"]
        if kind == "compatible":
            return [f"~={version}"]
        if kind == "comparison":
            op = match.group("op")
            base = version[:-2] if version.endswith(".*") and op in ("==", "!=") else version
            if _parse(base) is None:
                return None
            return [f"{op}{version}"]

        parsed = _parse(version)
        if parsed is None:
            return None
        if kind == "caret":
            return [f">={version}", f"<{_caret_upper(parsed.release)}"]
        if kind == "tilde":
            return [f">={version}", f"<{_tilde_upper(parsed.release)}"]
        return [f"=={version}"]

    return None


@lru_cache(maxsize=256)
def translate(constraint: str) -> tuple[SpecifierSet, ...] | None:
    """Translate a Poetry constraint into one SpecifierSet per alternative.

    Returns None if the constraint is not valid Poetry syntax.
    """
    normalized = _OPERATOR_SPACING.sub(r"\1", constraint.strip())
    if not normalized:
        return None

    alternatives: list[SpecifierSet] = []
    for alternative in normalized.split("||"):
        clauses = [c for c in _CLAUSE_SEPARATOR.split(alternative.strip()) if c]
        if not clauses:
            return None

        specifiers: list[str] = []
        for clause in clauses:
            translated = _translate_clause(clause)
            if translated is None:
                return None
            specifiers.extend(translated)

        try:
            alternatives.append(SpecifierSet(",".join(specifiers)))
        except InvalidSpecifier:
            return None

    return tuple(alternatives)


class PoetryScheme(Pep440Scheme):
    """PEP 440 versions with Poetry constraint syntax."""

    id = ID
    display_name = "Poetry"
    fallback_scheme = Pep440Scheme()

    def is_valid(self, spec: str) -> bool:
        return translate(spec) is not None

    def matches(self, version: str, spec: str) -> bool:
        parsed = self.parse(version)
        alternatives = translate(spec)
        if parsed is None or alternatives is None:
            return False
        return any(s.contains(parsed, prereleases=True) for s in alternatives)
