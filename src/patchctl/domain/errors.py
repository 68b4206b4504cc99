"""Domain exceptions.

Every failure in the resolution pipeline is fatal to the invocation.
Each exception carries a stable ``code`` that the service layer copies
into :class:`~patchctl.services.result.ServiceError`.
"""

from __future__ import annotations

from typing import Any


class PatchctlError(Exception):
    """Base class for all patchctl domain errors."""

    code = "PATCHCTL_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class LocatorParseError(PatchctlError):
    """A remote-origin locator is not a well-formed URL."""

    code = "INVALID_LOCATOR"

    def __init__(self, locator: str, reason: str) -> None:
        super().__init__(f"Invalid locator {locator!r}: {reason}", locator=locator, reason=reason)
        self.locator = locator
        self.reason = reason


class InvariantViolation(PatchctlError):
    """A resolved graph breaks one of its own structural guarantees."""

    code = "INVARIANT_VIOLATION"


class MissingRootError(InvariantViolation):
    """The graph has no root package, or the root id is not in its packages."""

    code = "MISSING_ROOT"


class MissingPackageError(InvariantViolation):
    """A package id (e.g. a workspace member) is absent from the graph."""

    code = "MISSING_PACKAGE"

    def __init__(self, package_id: str) -> None:
        super().__init__(f"Package '{package_id}' not found in graph", package_id=package_id)
        self.package_id = package_id


class SourceMemberNotFoundError(InvariantViolation):
    """An overridden name has no package in the source graph."""

    code = "SOURCE_MEMBER_NOT_FOUND"

    def __init__(self, name: str) -> None:
        super().__init__(f"Could not find member '{name}' in source packages", name=name)
        self.name = name


class ConflictingOverrideError(PatchctlError):
    """The same package name would be overridden under more than one origin."""

    code = "CONFLICTING_OVERRIDE"

    def __init__(self, conflicts: dict[str, list[str]]) -> None:
        names = ", ".join(sorted(conflicts))
        super().__init__(
            f"Package(s) overridden under multiple origins: {names}",
            conflicts=conflicts,
        )
        self.conflicts = conflicts
