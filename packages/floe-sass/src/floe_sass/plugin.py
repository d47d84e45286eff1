"""Sass plugin entrypoint.

The host build system calls ``SassPlugin.transform`` for every file it
processes. The plugin:

    file name -> applicable? -- no --> None
                     |
                    yes -> empty source? -- yes --> empty result
                     |
                     v
             build RenderOptions -> compiler.render()
                     |
          success: record dependencies, write CSS in memory
          SassCompileError: full diagnostic + placeholder CSS comment
          anything else: message-only diagnostic + placeholder CSS comment

Failures never escape ``transform``; the build continues with a
placeholder so every broken stylesheet is reported in one pass.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from floe_sass.config import PluginOptions
from floe_sass.diagnostics import DIAGNOSTIC_HEADER, load_diagnostic, load_minimal_diagnostic
from floe_sass.errors import SassCompileError
from floe_sass.observability import span
from floe_sass.options import build_render_options

if TYPE_CHECKING:
    from floe_sass.compiler import StyleCompiler
    from floe_sass.context import PluginContext

logger = structlog.get_logger(__name__)

PLUGIN_NAME = "sass"
PLUGIN_TYPE = "css"

SASS_FILE_REGEX = re.compile(r"(\.scss|\.sass)$", re.IGNORECASE)


class TransformResult(BaseModel):
    """Output of a transform call.

    Attributes:
        id: Output file name, with the extension replaced by "css".
        dependencies: Normalized paths of every stylesheet the output
            depends on.
        code: Compiled CSS, or a placeholder comment when compilation failed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., description="Output file name")
    dependencies: list[str] = Field(default_factory=list, description="Dependency paths")
    code: str | None = Field(default=None, description="Compiled CSS")


def use_plugin(file_name: Any) -> bool:
    """Return True if file_name ends with .scss or .sass (case-insensitive).

    Example:
        >>> use_plugin("Foo.SASS")
        True
        >>> use_plugin("foo.less")
        False
    """
    if isinstance(file_name, str):
        return bool(SASS_FILE_REGEX.search(file_name))
    return False


def create_results_id(file_name: str) -> str:
    """Replace the last dot-separated segment of file_name with "css".

    A name without a dot is replaced entirely: "button" becomes "css".

    Example:
        >>> create_results_id("button.scss")
        'button.css'
        >>> create_results_id("button")
        'css'
    """
    path_parts = file_name.split(".")
    path_parts[-1] = "css"
    return ".".join(path_parts)


def placeholder_code(error: BaseException) -> str:
    """CSS comment emitted in place of output that failed to compile."""
    message = error.message if isinstance(error, SassCompileError) else str(error)
    suffix = f": {message}" if message else ""
    return f"/**  {DIAGNOSTIC_HEADER}{suffix}  **/"


class SassPlugin:
    """Sass transform plugin.

    Attributes:
        name: Plugin name reported to the host.
        plugin_type: Kind of output the plugin produces.
        options: Validated plugin options.

    Example:
        >>> plugin = sass({"includePaths": ["src/styles"]}, compiler=compiler)
        >>> result = await plugin.transform(source, "/project/src/button.scss", context)
        >>> result.id
        '/project/src/button.css'
    """

    name = PLUGIN_NAME
    plugin_type = PLUGIN_TYPE

    def __init__(self, options: PluginOptions, compiler: StyleCompiler) -> None:
        """Initialize SassPlugin.

        Args:
            options: Validated plugin options.
            compiler: Compiler invoked for every applicable file.
        """
        self.options = options
        self._compiler = compiler

    async def transform(
        self,
        source_text: Any,
        file_name: str,
        context: PluginContext,
    ) -> TransformResult | None:
        """Compile one stylesheet.

        Args:
            source_text: Contents of the file.
            file_name: Path of the file.
            context: Runtime context supplied by the host.

        Returns:
            TransformResult, or None when the file is not a Sass stylesheet
            or the source is not text.
        """
        if not use_plugin(file_name):
            return None
        if not isinstance(source_text, str):
            return None

        results_id = create_results_id(file_name)

        if source_text.strip() == "":
            return TransformResult(id=results_id, code="")

        log = logger.bind(file_name=file_name)

        try:
            render_options = build_render_options(self.options, source_text, file_name, context)
            with span("sass.compile", attributes={"sass.file": file_name}):
                compiled = await self._compiler.render(render_options)

            dependencies = [context.normalize_path(dep) for dep in compiled.included_files]
            code = compiled.css_text

            # Kept in memory so later css plugins can read it; never written to disk.
            await context.fs.write_file(results_id, code, in_memory_only=True)

        except SassCompileError as e:
            log.warning("sass_compile_failed", line=e.line, column=e.column, status=e.status)
            load_diagnostic(context, e, file_name)
            return TransformResult(id=results_id, code=placeholder_code(e))

        except Exception as e:
            log.error("sass_transform_unexpected_error", error=str(e), exc_info=True)
            load_minimal_diagnostic(context, e)
            return TransformResult(id=results_id, code=placeholder_code(e))

        log.debug("sass_compiled", dependencies=len(dependencies))
        return TransformResult(id=results_id, dependencies=dependencies, code=code)


def sass(
    opts: PluginOptions | Mapping[str, Any] | None = None,
    *,
    compiler: StyleCompiler,
) -> SassPlugin:
    """Create and configure the Sass plugin.

    Args:
        opts: Plugin options as a model or a mapping (camelCase or
            snake_case keys).
        compiler: Compiler used to render stylesheets.

    Returns:
        The configured plugin.

    Raises:
        pydantic.ValidationError: If opts is not a valid option set.
    """
    if not isinstance(opts, PluginOptions):
        opts = PluginOptions.model_validate(dict(opts or {}))
    return SassPlugin(opts, compiler)
