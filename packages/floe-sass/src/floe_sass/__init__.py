"""floe-sass: Sass stylesheet plugin for floe build pipelines.

This package provides:
- sass(): Factory creating the transform plugin
- PluginOptions / RenderOptions: Plugin and compiler option models
- Diagnostic: Structured compiler error with source-line context
- normalize_path / split_module_specifier: Path and package-import helpers

Example:
    >>> from floe_sass import sass
    >>> plugin = sass({"injectGlobalPaths": ["src/globals.scss"]}, compiler=compiler)
    >>> result = await plugin.transform(source_text, "src/button.scss", context)
"""

from __future__ import annotations

__version__ = "0.1.0"

from floe_sass.compiler import CompileResult, StyleCompiler
from floe_sass.config import ImporterResult, PluginOptions, RenderOptions
from floe_sass.context import BuildConfig, FileSystem, PluginContext, PluginSystem
from floe_sass.diagnostics import Diagnostic, SourceLineContext, load_diagnostic
from floe_sass.errors import FloeSassError, InvalidPathError, SassCompileError
from floe_sass.modules import (
    ModuleImporter,
    ModuleReference,
    ModuleResolver,
    ResolvedModule,
    split_module_specifier,
)
from floe_sass.options import build_render_options
from floe_sass.paths import normalize_path
from floe_sass.plugin import SassPlugin, TransformResult, create_results_id, sass, use_plugin

__all__ = [
    "__version__",
    # Plugin
    "sass",
    "SassPlugin",
    "TransformResult",
    "use_plugin",
    "create_results_id",
    # Options
    "PluginOptions",
    "RenderOptions",
    "ImporterResult",
    "build_render_options",
    # Host context
    "PluginContext",
    "BuildConfig",
    "FileSystem",
    "PluginSystem",
    # Compiler interface
    "StyleCompiler",
    "CompileResult",
    # Diagnostics
    "Diagnostic",
    "SourceLineContext",
    "load_diagnostic",
    # Package imports
    "ModuleImporter",
    "ModuleReference",
    "ModuleResolver",
    "ResolvedModule",
    "split_module_specifier",
    # Paths
    "normalize_path",
    # Errors
    "FloeSassError",
    "InvalidPathError",
    "SassCompileError",
]
