"""Package ('~') import resolution.

An import prefixed with the module marker is resolved against installed
package directories instead of the file system:

    @import "~bootstrap/scss/grid";      -> <bootstrap dir>/scss/grid
    @use "~@scope/theme/tokens";         -> <@scope/theme dir>/tokens

This module provides:
- split_module_specifier: Split a specifier into package id and file path
- ModuleResolver: Protocol for the host's package resolver
- ModuleImporter: Importer hook installed into the compiler options
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import structlog
from pydantic import BaseModel, ConfigDict, Field

from floe_sass.config import ImporterResult

if TYPE_CHECKING:
    from floe_sass.context import PluginContext

logger = structlog.get_logger(__name__)

MODULE_MARKER = "~"


class ModuleReference(BaseModel):
    """A package import split into its package id and in-package path.

    Attributes:
        module_id: Package identifier ("lodash", "@scope/pkg").
        file_path: Path inside the package, "" when the import names only
            the package.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    module_id: str | None = Field(default=None, description="Package identifier")
    file_path: str | None = Field(default=None, description="Path inside the package")


class ResolvedModule(BaseModel):
    """Result of a host package lookup.

    Attributes:
        pkg_dir_path: Directory of the resolved package, or None when the
            package could not be found.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    pkg_dir_path: str | None = Field(default=None, description="Package directory")


@runtime_checkable
class ModuleResolver(Protocol):
    """Host capability resolving a package id to its directory.

    Example:
        >>> resolved = await resolver.resolve_module_id(
        ...     module_id="@scope/theme",
        ...     containing_file="tokens.scss",
        ... )
        >>> resolved.pkg_dir_path
        '/project/node_modules/@scope/theme'
    """

    async def resolve_module_id(self, *, module_id: str, containing_file: str) -> ResolvedModule:
        """Resolve a package id.

        Raises:
            Exception: Any failure is propagated to the compiler.
        """
        ...


def split_module_specifier(spec: str) -> ModuleReference:
    """Split an import specifier into a package id and a file path.

    Scoped packages (leading '@') keep their first two segments as the
    package id. Package names are not validated; malformed input yields a
    best-effort split.

    Args:
        spec: Import specifier, with or without the module marker.

    Returns:
        ModuleReference for the specifier.

    Example:
        >>> split_module_specifier("~lodash/merge")
        ModuleReference(module_id='lodash', file_path='merge')
        >>> split_module_specifier("~@scope/pkg/file.scss")
        ModuleReference(module_id='@scope/pkg', file_path='file.scss')
    """
    if spec.startswith(MODULE_MARKER):
        spec = spec[len(MODULE_MARKER) :]

    segments = spec.split("/")

    if spec.startswith("@") and len(segments) > 1:
        return ModuleReference(
            module_id="/".join(segments[:2]),
            file_path="/".join(segments[2:]),
        )

    return ModuleReference(
        module_id=segments[0],
        file_path="/".join(segments[1:]),
    )


class ModuleImporter:
    """Importer hook resolving '~' imports through the host package resolver.

    Each call is independent; the compiler may await several concurrently.
    Urls without the module marker are declined by returning None so the
    next importer, or the compiler's default resolution, handles them.
    Resolver failures propagate to the compiler unchanged.

    Example:
        >>> importer = ModuleImporter(context)
        >>> await importer("~bootstrap/scss/grid", "stdin")
        ImporterResult(file='/project/node_modules/bootstrap/scss/grid')
    """

    def __init__(self, context: PluginContext) -> None:
        """Initialize ModuleImporter.

        Args:
            context: Plugin context whose host system resolves packages.
        """
        self._context = context

    async def __call__(self, url: Any, prev: str | None = None) -> ImporterResult | None:
        """Resolve a single import url.

        Args:
            url: Import url as written in the stylesheet.
            prev: Stylesheet containing the import (unused).

        Returns:
            ImporterResult for a resolved package import, None to decline.
        """
        if not isinstance(url, str) or not url.startswith(MODULE_MARKER):
            return None

        reference = split_module_specifier(url)
        if not reference.module_id:
            return None

        resolve = self._context.host_resolve_module_id()
        if resolve is None:
            return None

        resolved = await resolve(
            module_id=reference.module_id,
            containing_file=reference.file_path,
        )

        pkg_dir_path = getattr(resolved, "pkg_dir_path", None)
        if not pkg_dir_path:
            logger.debug("module_not_resolved", url=url, module_id=reference.module_id)
            return None

        resolved_path = os.path.join(pkg_dir_path, reference.file_path or "")
        return ImporterResult(file=self._context.normalize_path(os.path.normpath(resolved_path)))
