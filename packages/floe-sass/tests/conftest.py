"""Shared pytest fixtures for floe-sass tests.

This module provides in-memory stand-ins for the host build system
(file system, system capabilities) and the Sass compiler.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any

import pytest
import structlog

from floe_sass.compiler import CompileResult
from floe_sass.config import RenderOptions
from floe_sass.context import BuildConfig, PluginContext
from floe_sass.modules import ResolvedModule

ROOT_DIR = "/project"


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class InMemoryFileSystem:
    """Host file system backed by a dict."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files: dict[str, str] = dict(files or {})
        self.writes: list[tuple[str, str, bool]] = []

    def read_file_sync(self, path: str) -> str:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    async def write_file(self, path: str, content: str, *, in_memory_only: bool = False) -> None:
        self.files[path] = content
        self.writes.append((path, content, in_memory_only))


class FakeSystem:
    """Host system with path normalization and package resolution."""

    def __init__(self, packages: dict[str, str] | None = None) -> None:
        self.packages = dict(packages or {})
        self.resolve_calls: list[tuple[str, str]] = []
        self.normalize_calls: list[str] = []

    def normalize_path(self, path: str) -> str:
        self.normalize_calls.append(path)
        return path.replace("\\", "/")

    async def resolve_module_id(self, *, module_id: str, containing_file: str) -> ResolvedModule:
        self.resolve_calls.append((module_id, containing_file))
        return ResolvedModule(pkg_dir_path=self.packages.get(module_id))


class NormalizeOnlySystem:
    """Host system without package resolution."""

    def normalize_path(self, path: str) -> str:
        return path


class FakeCompiler:
    """Compiler returning a canned result, or running a custom handler."""

    def __init__(
        self,
        result: CompileResult | None = None,
        handler: Callable[[RenderOptions], Any] | None = None,
    ) -> None:
        self.result = result or CompileResult(css=".a { color: red; }")
        self.handler = handler
        self.calls: list[RenderOptions] = []

    async def render(self, options: RenderOptions) -> CompileResult:
        self.calls.append(options)
        if self.handler is not None:
            outcome = self.handler(options)
            if hasattr(outcome, "__await__"):
                outcome = await outcome
            return outcome
        return self.result


@pytest.fixture
def fs() -> InMemoryFileSystem:
    """Return an empty in-memory file system."""
    return InMemoryFileSystem()


@pytest.fixture
def system() -> FakeSystem:
    """Return a host system knowing a few packages."""
    return FakeSystem(
        packages={
            "bootstrap": "/project/node_modules/bootstrap",
            "@scope/theme": "/project/node_modules/@scope/theme",
        }
    )


@pytest.fixture
def context(fs: InMemoryFileSystem, system: FakeSystem) -> PluginContext:
    """Return a plugin context with full host capabilities."""
    return PluginContext(config=BuildConfig(root_dir=ROOT_DIR), fs=fs, sys=system)


@pytest.fixture
def bare_context(fs: InMemoryFileSystem) -> PluginContext:
    """Return a plugin context without optional system capabilities."""
    return PluginContext(config=BuildConfig(root_dir=ROOT_DIR), fs=fs)


@pytest.fixture
def normalize_only_context(fs: InMemoryFileSystem) -> PluginContext:
    """Return a plugin context whose host cannot resolve packages."""
    return PluginContext(config=BuildConfig(root_dir=ROOT_DIR), fs=fs, sys=NormalizeOnlySystem())


@pytest.fixture
def make_compiler() -> Callable[..., FakeCompiler]:
    """Return a factory for fake compilers."""
    return FakeCompiler
