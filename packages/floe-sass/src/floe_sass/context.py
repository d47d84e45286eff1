"""Runtime context supplied by the host build system.

The plugin never touches the disk or global state directly. Everything it
needs from the host is passed in through a PluginContext scoped to one
transform call:

- config.root_dir: project root used to resolve relative paths
- fs: read/write primitives of the host's (possibly in-memory) file system
- sys: optional path normalization and package resolution capabilities
- diagnostics: append-only collection the host reports from
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from floe_sass.paths import normalize_path

if TYPE_CHECKING:
    from floe_sass.diagnostics import Diagnostic

# Diagnostics are only ever appended; order across files is not significant.
DiagnosticsSink = list["Diagnostic"]


@dataclass(frozen=True)
class BuildConfig:
    """Subset of the host build configuration consumed by the plugin.

    Attributes:
        root_dir: Absolute path of the project root.
    """

    root_dir: str


@runtime_checkable
class FileSystem(Protocol):
    """Host file system primitives.

    Example:
        >>> text = context.fs.read_file_sync("/project/src/button.scss")
        >>> await context.fs.write_file("button.css", css, in_memory_only=True)
    """

    def read_file_sync(self, path: str) -> str:
        """Read a file's full text.

        Raises:
            OSError: If the file cannot be read.
        """
        ...

    async def write_file(self, path: str, content: str, *, in_memory_only: bool = False) -> None:
        """Write content to path, optionally keeping it in memory only."""
        ...


class PluginSystem(Protocol):
    """Optional host system capabilities.

    Both methods are optional: the plugin checks for each with
    getattr() before using it. Hosts without package resolution simply do
    not get the '~' importer installed.
    """

    def normalize_path(self, path: str) -> str:
        """Normalize a path the way the host does."""
        ...

    async def resolve_module_id(self, *, module_id: str, containing_file: str) -> Any:
        """Resolve a package id to an object exposing ``pkg_dir_path``."""
        ...


@dataclass
class PluginContext:
    """Runtime context for a single transform call.

    Attributes:
        config: Host build configuration.
        fs: Host file system.
        sys: Optional host system capabilities.
        diagnostics: Host-owned diagnostics collection.

    Example:
        >>> context = PluginContext(
        ...     config=BuildConfig(root_dir="/project"),
        ...     fs=host_fs,
        ...     sys=host_sys,
        ... )
    """

    config: BuildConfig
    fs: FileSystem
    sys: PluginSystem | None = None
    diagnostics: DiagnosticsSink = field(default_factory=list)

    def normalize_path(self, path: str) -> str:
        """Normalize path with the host's normalizer, falling back to floe-sass's own."""
        func: Callable[[str], str] | None = getattr(self.sys, "normalize_path", None)
        if callable(func):
            return func(path)
        return normalize_path(path)

    def host_resolve_module_id(self) -> Callable[..., Awaitable[Any]] | None:
        """Return the host's resolve_module_id callable, or None if absent."""
        func = getattr(self.sys, "resolve_module_id", None)
        return func if callable(func) else None
