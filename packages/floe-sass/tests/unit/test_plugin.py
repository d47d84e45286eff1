"""Unit tests for the Sass plugin entrypoint.

Tests for:
- use_plugin() and create_results_id()
- sass() factory and option validation
- transform() success, empty source, structured and unexpected failures
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest
from pydantic import ValidationError

from floe_sass.compiler import CompileResult
from floe_sass.config import ImporterResult, PluginOptions, RenderOptions
from floe_sass.context import PluginContext
from floe_sass.errors import SassCompileError
from floe_sass.plugin import SassPlugin, TransformResult, create_results_id, sass, use_plugin

FILE_NAME = "/project/src/button.scss"
SOURCE = "a {\n  color: $brand;\n}"


class TestUsePlugin:
    """Tests for use_plugin()."""

    @pytest.mark.parametrize("file_name", ["a.scss", "a.sass", "Foo.SASS", "dir/B.Scss"])
    def test_sass_files_accepted(self, file_name: str) -> None:
        """Sass extensions match case-insensitively."""
        assert use_plugin(file_name) is True

    @pytest.mark.parametrize("file_name", ["foo.less", "a.css", "a.scss.map", "scss", None, 3])
    def test_other_inputs_rejected(self, file_name: Any) -> None:
        """Anything else is declined."""
        assert use_plugin(file_name) is False


class TestCreateResultsId:
    """Tests for create_results_id()."""

    def test_extension_replaced(self) -> None:
        """The extension becomes css."""
        assert create_results_id("button.scss") == "button.css"

    def test_only_last_extension_replaced(self) -> None:
        """Earlier dots are kept."""
        assert create_results_id("/project/src/button.theme.sass") == "/project/src/button.theme.css"

    def test_name_without_dot(self) -> None:
        """A name without a dot is replaced entirely."""
        assert create_results_id("button") == "css"


class TestSassFactory:
    """Tests for the sass() factory."""

    def test_defaults(self, make_compiler: Callable[..., Any]) -> None:
        """No options gives an empty PluginOptions."""
        plugin = sass(compiler=make_compiler())

        assert isinstance(plugin, SassPlugin)
        assert plugin.name == "sass"
        assert plugin.plugin_type == "css"
        assert plugin.options == PluginOptions()

    def test_mapping_validated(self, make_compiler: Callable[..., Any]) -> None:
        """Mappings are validated into PluginOptions."""
        plugin = sass({"includePaths": ["src/styles"]}, compiler=make_compiler())

        assert plugin.options.include_paths == ["src/styles"]

    def test_invalid_options_rejected(self, make_compiler: Callable[..., Any]) -> None:
        """Badly typed options fail validation."""
        with pytest.raises(ValidationError) as exc_info:
            sass({"includePaths": "src/styles"}, compiler=make_compiler())

        assert "include_paths" in str(exc_info.value) or "includePaths" in str(exc_info.value)


class TestTransform:
    """Tests for SassPlugin.transform()."""

    def test_non_sass_file_declined(
        self, context: PluginContext, make_compiler: Callable[..., Any]
    ) -> None:
        """Non-Sass files are not handled."""
        compiler = make_compiler()
        plugin = sass(compiler=compiler)

        assert asyncio.run(plugin.transform(SOURCE, "/project/src/a.less", context)) is None
        assert compiler.calls == []

    def test_non_string_source_declined(
        self, context: PluginContext, make_compiler: Callable[..., Any]
    ) -> None:
        """Non-text sources are not handled."""
        plugin = sass(compiler=make_compiler())

        assert asyncio.run(plugin.transform(None, FILE_NAME, context)) is None

    def test_empty_source(self, context: PluginContext, make_compiler: Callable[..., Any]) -> None:
        """Whitespace-only sources produce empty output without compiling."""
        compiler = make_compiler()
        plugin = sass(compiler=compiler)

        result = asyncio.run(plugin.transform("  \n\t", FILE_NAME, context))

        assert result == TransformResult(id="/project/src/button.css", dependencies=[], code="")
        assert compiler.calls == []

    def test_success(self, context: PluginContext, make_compiler: Callable[..., Any]) -> None:
        """Compiled CSS and normalized dependencies are returned."""
        compiler = make_compiler(
            result=CompileResult(
                css=b"a { color: blue; }",
                included_files=["C:\\project\\src\\button.scss", "/project/src/_vars.scss"],
            )
        )
        plugin = sass(compiler=compiler)

        result = asyncio.run(plugin.transform(SOURCE, FILE_NAME, context))

        assert result is not None
        assert result.id == "/project/src/button.css"
        assert result.code == "a { color: blue; }"
        assert result.dependencies == ["C:/project/src/button.scss", "/project/src/_vars.scss"]
        assert context.diagnostics == []

    def test_success_writes_css_in_memory(
        self, context: PluginContext, make_compiler: Callable[..., Any]
    ) -> None:
        """The compiled CSS is written to the host file system in memory only."""
        plugin = sass(compiler=make_compiler(result=CompileResult(css="a{}")))

        asyncio.run(plugin.transform(SOURCE, FILE_NAME, context))

        assert context.fs.writes == [("/project/src/button.css", "a{}", True)]  # type: ignore[attr-defined]

    def test_compiler_receives_render_options(
        self, context: PluginContext, make_compiler: Callable[..., Any]
    ) -> None:
        """The compiler gets options built from the plugin options."""
        compiler = make_compiler()
        plugin = sass({"injectGlobalPaths": ["globals.scss"]}, compiler=compiler)

        asyncio.run(plugin.transform(SOURCE, FILE_NAME, context))

        (options,) = compiler.calls
        assert isinstance(options, RenderOptions)
        assert options.data == '@import "/project/globals.scss";' + SOURCE

    def test_compiler_can_drive_importers(
        self, context: PluginContext, make_compiler: Callable[..., Any]
    ) -> None:
        """Importers installed in the options resolve package imports."""

        async def compile_with_imports(options: RenderOptions) -> CompileResult:
            included: list[str] = []
            for url in ("~bootstrap/scss/grid", "~@scope/theme/tokens"):
                for importer in options.importer:
                    resolved = await importer(url, "stdin")
                    if isinstance(resolved, ImporterResult):
                        included.append(resolved.file)
                        break
            return CompileResult(css="", included_files=included)

        plugin = sass(compiler=make_compiler(handler=compile_with_imports))

        result = asyncio.run(plugin.transform(SOURCE, FILE_NAME, context))

        assert result is not None
        assert result.dependencies == [
            "/project/node_modules/bootstrap/scss/grid",
            "/project/node_modules/@scope/theme/tokens",
        ]

    def test_structured_error(
        self, context: PluginContext, make_compiler: Callable[..., Any]
    ) -> None:
        """Compiler errors become diagnostics and a placeholder comment."""
        context.fs.files[FILE_NAME] = SOURCE  # type: ignore[attr-defined]

        def fail(options: RenderOptions) -> CompileResult:
            raise SassCompileError(
                "Undefined variable.",
                status=1,
                file=FILE_NAME,
                line=2,
                column=11,
            )

        plugin = sass(compiler=make_compiler(handler=fail))

        result = asyncio.run(plugin.transform(SOURCE, FILE_NAME, context))

        assert result is not None
        assert result.id == "/project/src/button.css"
        assert result.code == "/**  sass error: Undefined variable.  **/"
        assert result.dependencies == []
        (diagnostic,) = context.diagnostics
        assert diagnostic.message_text == "Undefined variable."
        assert diagnostic.rel_file_path == "src/button.scss"
        assert len(diagnostic.lines) == 3
        assert diagnostic.lines[1].text[diagnostic.lines[1].error_char_start :] == "brand;"

    def test_structured_error_without_message(
        self, context: PluginContext, make_compiler: Callable[..., Any]
    ) -> None:
        """The placeholder omits the message when there is none."""

        def fail(options: RenderOptions) -> CompileResult:
            raise SassCompileError("")

        plugin = sass(compiler=make_compiler(handler=fail))

        result = asyncio.run(plugin.transform(SOURCE, FILE_NAME, context))

        assert result is not None
        assert result.code == "/**  sass error  **/"

    def test_unexpected_exception(
        self, context: PluginContext, make_compiler: Callable[..., Any]
    ) -> None:
        """Other failures give a message-only diagnostic and a placeholder."""

        def crash(options: RenderOptions) -> CompileResult:
            raise RuntimeError("compiler process died")

        plugin = sass(compiler=make_compiler(handler=crash))

        result = asyncio.run(plugin.transform(SOURCE, FILE_NAME, context))

        assert result is not None
        assert result.code == "/**  sass error: compiler process died  **/"
        (diagnostic,) = context.diagnostics
        assert diagnostic.message_text == "compiler process died"
        assert diagnostic.abs_file_path is None
        assert diagnostic.lines == []

    def test_importer_failure_reported_by_compiler(
        self, context: PluginContext, make_compiler: Callable[..., Any]
    ) -> None:
        """A failing package lookup surfaces as a compiler error diagnostic."""

        async def resolve_fails(*, module_id: str, containing_file: str) -> None:
            raise LookupError(f"no package {module_id}")

        context.sys.resolve_module_id = resolve_fails  # type: ignore[union-attr,method-assign]

        async def compile_with_failing_import(options: RenderOptions) -> CompileResult:
            try:
                await options.importer[-1]("~missing/file", "stdin")
            except LookupError as e:
                raise SassCompileError(str(e), status=1) from e
            return CompileResult(css="")

        plugin = sass(compiler=make_compiler(handler=compile_with_failing_import))

        result = asyncio.run(plugin.transform(SOURCE, FILE_NAME, context))

        assert result is not None
        assert result.code == "/**  sass error: no package missing  **/"
        (diagnostic,) = context.diagnostics
        assert diagnostic.code == "1"

    def test_concurrent_transforms_share_sink(
        self, context: PluginContext, make_compiler: Callable[..., Any]
    ) -> None:
        """Concurrent failing transforms each append their diagnostic."""

        async def fail_later(options: RenderOptions) -> CompileResult:
            await asyncio.sleep(0)
            raise SassCompileError("boom")

        plugin = sass(compiler=make_compiler(handler=fail_later))

        async def run_all() -> list[TransformResult | None]:
            return await asyncio.gather(
                *(plugin.transform(SOURCE, f"/project/src/f{i}.scss", context) for i in range(5))
            )

        results = asyncio.run(run_all())

        assert [r.id for r in results if r is not None] == [
            f"/project/src/f{i}.css" for i in range(5)
        ]
        assert len(context.diagnostics) == 5
        assert {d.abs_file_path for d in context.diagnostics} == {
            f"/project/src/f{i}.scss" for i in range(5)
        }
