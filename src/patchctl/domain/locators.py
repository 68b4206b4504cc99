"""Remote-origin locator rules.

A locator is the ``source`` string Cargo records for a non-path package,
e.g. ``git+https://github.com/org/repo?branch=main#4f1c2a9``.  The
canonical form drops the query (branch/tag/rev selectors), the fragment
(the locked commit) and the ``git+`` transport marker, leaving only what
identifies the repository.  That canonical form is the key Cargo expects
in ``[patch."<url>"]``.

INVARIANT: ``normalize_locator`` is idempotent.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from patchctl.domain.errors import LocatorParseError

GIT_PREFIX = "git+"

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")


def _is_file_scheme(scheme: str) -> bool:
    return strip_git_prefix(scheme.lower()) == "file"


def is_git_locator(locator: str) -> bool:
    """Whether the raw locator uses git transport."""
    return locator.startswith(GIT_PREFIX)


def strip_git_prefix(text: str) -> str:
    """Remove every leading ``git+`` marker."""
    while text.startswith(GIT_PREFIX):
        text = text[len(GIT_PREFIX) :]
    return text


def normalize_locator(locator: str) -> str:
    """Return the canonical origin key for *locator*.

    Raises:
        LocatorParseError: If *locator* is not URL-shaped.

    Examples:
        >>> normalize_locator("git+https://example.org/repo?rev=abc#abc")
        'https://example.org/repo'
        >>> normalize_locator("https://example.org/repo")
        'https://example.org/repo'
    """
    if not locator:
        raise LocatorParseError(locator, "empty locator")
    if any(ch.isspace() for ch in locator):
        raise LocatorParseError(locator, "contains whitespace")

    try:
        parts = urlsplit(locator)
    except ValueError as exc:
        raise LocatorParseError(locator, str(exc)) from exc

    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        raise LocatorParseError(locator, "relative URL without a base")
    if not strip_git_prefix(parts.scheme.lower()):
        raise LocatorParseError(locator, "missing scheme after transport marker")

    has_authority = locator[len(parts.scheme) + 1 :].startswith("//")
    if has_authority:
        if not parts.hostname and not _is_file_scheme(parts.scheme):
            raise LocatorParseError(locator, "empty host")
        try:
            parts.port  # noqa: B018 - validates the port range
        except ValueError as exc:
            raise LocatorParseError(locator, "invalid port number") from exc
    elif not parts.path:
        raise LocatorParseError(locator, "missing path")

    canonical = parts.scheme.lower() + ":"
    if has_authority:
        canonical += "//" + parts.netloc
    canonical += parts.path
    return strip_git_prefix(canonical)


def same_origin(a: str, b: str) -> bool:
    """Whether two locators denote the same origin."""
    return normalize_locator(a) == normalize_locator(b)
