"""Build compiler-ready RenderOptions from plugin options.

The steps run in a fixed order:
1. Copy the user options and set ``data`` to the source text.
2. Enable indented syntax for .sass files. Must precede import injection,
   the import terminator depends on it.
3. Add the file's directory to ``include_paths`` and make every entry
   absolute against the project root.
4. Prepend an ``@import`` for each ``inject_global_paths`` entry.
5. Drop the plugin-only keys (``inject_global_paths``, ``file``).
6. Install the package ('~') importer after any user importers when the
   host can resolve packages.
7. Append 'legacy-js-api' to ``silence_deprecations``.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from floe_sass.config import EXTENSION_FIELDS, Importer, PluginOptions, RenderOptions
from floe_sass.modules import ModuleImporter

if TYPE_CHECKING:
    from floe_sass.context import PluginContext

logger = structlog.get_logger(__name__)

INDENTED_SYNTAX_REGEX = re.compile(r"\.sass$", re.IGNORECASE)

# Appended unconditionally, duplicates included. The compiler tolerates
# repeated ids.
LEGACY_JS_API_DEPRECATION = "legacy-js-api"


def build_render_options(
    opts: PluginOptions | Mapping[str, Any] | None,
    source_text: str,
    file_name: str,
    context: PluginContext,
) -> RenderOptions:
    """Build the options handed to the compiler for one file.

    The supplied options are never modified.

    Args:
        opts: Plugin options (model or mapping).
        source_text: Source of the file being compiled.
        file_name: Path of the file being compiled.
        context: Runtime context of the transform.

    Returns:
        RenderOptions for the compiler.

    Example:
        >>> render_opts = build_render_options(
        ...     {"injectGlobalPaths": ["globals.scss"]},
        ...     "a { color: $brand; }",
        ...     "/project/src/button.scss",
        ...     context,
        ... )
        >>> render_opts.data
        '@import "/project/globals.scss";a { color: $brand; }'
    """
    if not isinstance(opts, PluginOptions):
        opts = PluginOptions.model_validate(opts or {})

    root_dir = context.config.root_dir

    render_opts: dict[str, Any] = _passthrough_options(opts)
    render_opts["data"] = source_text

    indented_syntax = bool(INDENTED_SYNTAX_REGEX.search(file_name))
    render_opts["indented_syntax"] = indented_syntax

    include_paths = list(opts.include_paths)
    include_paths.append(os.path.dirname(file_name) or ".")
    render_opts["include_paths"] = [
        _resolve_against_root(include_path, root_dir) for include_path in include_paths
    ]

    inject_global_paths = list(opts.inject_global_paths)
    if inject_global_paths:
        terminator = "\n" if indented_syntax else ";"
        inject_text = "".join(
            f'@import "{_resolve_global_path(global_path, context)}"{terminator}'
            for global_path in inject_global_paths
        )
        render_opts["data"] = inject_text + render_opts["data"]

    importers = _importer_list(opts.importer)
    if context.host_resolve_module_id() is not None:
        importers.append(ModuleImporter(context))
    render_opts["importer"] = importers

    render_opts["silence_deprecations"] = [
        *(opts.silence_deprecations or []),
        LEGACY_JS_API_DEPRECATION,
    ]

    logger.debug(
        "render_options_built",
        file_name=file_name,
        indented_syntax=indented_syntax,
        include_paths=len(render_opts["include_paths"]),
        injected=len(inject_global_paths),
        importers=len(importers),
    )

    return RenderOptions.model_validate(render_opts)


def _passthrough_options(opts: PluginOptions) -> dict[str, Any]:
    """Copy native compiler options, minus keys the plugin sets or strips."""
    reserved = {*RenderOptions.model_fields, *EXTENSION_FIELDS}
    reserved |= {field.alias for field in RenderOptions.model_fields.values() if field.alias}
    reserved |= {field.alias for field in PluginOptions.model_fields.values() if field.alias}
    return {key: value for key, value in opts.passthrough.items() if key not in reserved}


def _resolve_against_root(path: str, root_dir: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.abspath(os.path.join(root_dir, path))


def _resolve_global_path(path: str, context: PluginContext) -> str:
    """Make an injected path absolute; absolute paths are kept as written."""
    if os.path.isabs(path):
        return path
    return context.normalize_path(os.path.normpath(os.path.join(context.config.root_dir, path)))


def _importer_list(importer: Importer | list[Importer] | None) -> list[Importer]:
    if importer is None:
        return []
    if callable(importer):
        return [importer]
    return list(importer)
