"""OverrideService: load both workspaces and resolve their patch overrides.

The only service in patchctl.  ``generate()`` runs ``cargo metadata`` for
the source and destination roots, then hands the two immutable graphs to
the pure domain resolver.  ``resolve()`` is the same pipeline minus the
subprocess work, for callers that already hold graphs.

Every failure becomes a ``ServiceResult(ok=False)``; nothing is partially
emitted.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from patchctl.domain.errors import PatchctlError
from patchctl.domain.graph import DependencyGraph, active_dependencies
from patchctl.domain.overrides import (
    OverrideGroup,
    ResolveOptions,
    find_conflicts,
    resolve_overrides,
)
from patchctl.infrastructure.metadata import MetadataCommand, MetadataError, manifest_for
from patchctl.services.result import ServiceError, ServiceResult
from patchctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from patchctl.config.settings import PatchSettings

logger = logging.getLogger(__name__)

OP = "generate_overrides"


class OverrideService:
    """Resolves ``[patch]`` overrides between two Cargo workspaces."""

    def __init__(self, settings: PatchSettings) -> None:
        self._settings = settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def generate(self, source_root: Path, destination_root: Path) -> ServiceResult:
        """Load both workspaces with cargo and resolve their overrides."""
        try:
            with trace_span("load_source") as span:
                source = self.load(source_root, role="source")
                if span:
                    span.annotate("packages", len(source.packages))
            with trace_span("load_destination") as span:
                destination = self.load(destination_root, role="destination")
                if span:
                    span.annotate("packages", len(destination.packages))
        except MetadataError as exc:
            return ServiceResult(
                ok=False,
                op=OP,
                error=ServiceError(
                    code=exc.code,
                    message=exc.message,
                    detail={
                        "manifest_path": str(exc.manifest_path),
                        "stderr": exc.stderr,
                    },
                ),
            )

        return self._resolve(
            source,
            destination,
            source_root=source_root,
            destination_root=destination_root,
        )

    @traced
    def resolve(self, source: DependencyGraph, destination: DependencyGraph) -> ServiceResult:
        """Resolve overrides for two already-loaded graphs."""
        return self._resolve(
            source,
            destination,
            source_root=source.workspace_root,
            destination_root=destination.workspace_root,
        )

    def load(self, root: Path, *, role: str) -> DependencyGraph:
        """Run ``cargo metadata`` for the workspace at *root*.

        Raises:
            MetadataError: If cargo fails or its output is not a valid graph.
        """
        cfg = self._settings.metadata
        manifest = manifest_for(root, cfg.manifest_name)
        logger.debug("Loading %s workspace from %s", role, manifest)
        data = MetadataCommand(
            manifest,
            cargo=cfg.cargo,
            offline=cfg.offline,
            locked=cfg.locked,
            frozen=cfg.frozen,
        ).exec()
        try:
            return DependencyGraph.from_metadata(data)
        except ValueError as exc:
            msg = f"Unexpected cargo metadata layout for {manifest}: {exc}"
            raise MetadataError(msg, manifest_path=manifest) from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _options(self) -> ResolveOptions:
        cfg = self._settings.resolve
        # _resolve filters empty groups itself so each drop becomes a warning.
        return ResolveOptions(
            group_by=cfg.group_by,
            drop_empty_groups=False,
            allow_conflicts=cfg.allow_conflicts,
        )

    def _resolve(
        self,
        source: DependencyGraph,
        destination: DependencyGraph,
        *,
        source_root: Path | None,
        destination_root: Path | None,
    ) -> ServiceResult:
        warnings: list[str] = []
        try:
            with trace_span("active_dependencies") as span:
                active = active_dependencies(destination)
                if span:
                    span.annotate("names", len(active))
            with trace_span("resolve_overrides") as span:
                groups = resolve_overrides(source, destination, active, options=self._options())
                if span:
                    span.annotate("groups", len(groups))
        except PatchctlError as exc:
            return self._failure(exc)

        for name, origins in find_conflicts(groups).items():
            warnings.append(f"'{name}' is overridden under {len(origins)} origins")

        if self._settings.resolve.drop_empty_groups:
            kept: list[OverrideGroup] = []
            for group in groups:
                if group.entries:
                    kept.append(group)
                else:
                    warnings.append(f"Dropped empty override section for {group.origin}")
            groups = kept

        count = sum(len(g.entries) for g in groups)
        logger.debug("Resolved %d override(s) in %d section(s)", count, len(groups))
        return ServiceResult(
            ok=True,
            op=OP,
            data={
                "source": str(source_root) if source_root else None,
                "destination": str(destination_root) if destination_root else None,
                "count": count,
                "groups": [g.model_dump(mode="json") for g in groups],
            },
            warnings=warnings,
        )

    @staticmethod
    def _failure(exc: PatchctlError) -> ServiceResult:
        logger.debug("Override resolution failed: %s", exc.message)
        return ServiceResult(
            ok=False,
            op=OP,
            error=ServiceError(code=exc.code, message=exc.message, detail=exc.detail),
        )
