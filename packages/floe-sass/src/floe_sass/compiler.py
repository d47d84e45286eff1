"""Interface of the external Sass compiler.

floe-sass does not compile stylesheets itself. The host supplies an object
implementing StyleCompiler; the plugin awaits ``render`` with the
RenderOptions it built and reads back a CompileResult.

Compilers drive the importers in ``RenderOptions.importer`` and may await
several of them concurrently within one render.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from floe_sass.config import RenderOptions


class CompileResult(BaseModel):
    """Output of a successful compilation.

    Attributes:
        css: Compiled CSS, as text or UTF-8 bytes.
        included_files: Every stylesheet loaded while compiling.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    css: str | bytes = Field(..., description="Compiled CSS")
    included_files: list[str] = Field(
        default_factory=list,
        description="Stylesheets loaded during compilation",
    )

    @property
    def css_text(self) -> str:
        """Compiled CSS decoded as text."""
        if isinstance(self.css, bytes):
            return self.css.decode("utf-8")
        return self.css


@runtime_checkable
class StyleCompiler(Protocol):
    """Asynchronous Sass compiler.

    Example:
        >>> result = await compiler.render(render_options)
        >>> result.css_text
        '.button { color: red; }'
    """

    async def render(self, options: RenderOptions) -> CompileResult:
        """Compile the stylesheet described by options.

        Raises:
            SassCompileError: If the stylesheet fails to compile.
        """
        ...
