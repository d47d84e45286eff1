"""Pydantic configuration models for floe-sass.

This module provides:
- PluginOptions: Options supplied by the user when registering the plugin
- RenderOptions: Normalized, compiler-ready options derived per file
- ImporterResult: Value returned by an importer that resolved an import

Both option models keep unrecognized native compiler options in a
passthrough map (pydantic's model_extra) so nothing is lost while the
plugin copies and strips its own extension fields.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ImporterResult(BaseModel):
    """Resolved location of an imported stylesheet.

    Attributes:
        file: Absolute, normalized path the compiler should load.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    file: str = Field(..., min_length=1, description="Resolved stylesheet path")


# An importer receives the import url and the stylesheet containing the
# import. It returns None to let the next importer (or the compiler's default
# resolution) handle the url.
Importer = Callable[[str, str], Awaitable[ImporterResult | None]]

# Keys consumed by floe-sass itself; never forwarded to the compiler.
EXTENSION_FIELDS = ("inject_global_paths", "file")


class PluginOptions(BaseModel):
    """Options supplied to the Sass plugin.

    A superset of the compiler's native options. Named fields are the ones
    the plugin interprets; any other key is passed through to the compiler
    untouched. Keys may be given in camelCase (``includePaths``) or
    snake_case (``include_paths``).

    Attributes:
        include_paths: Extra directories searched for imports. Relative
            entries are resolved against the project root.
        inject_global_paths: Stylesheets imported at the top of every file.
        importer: User importer, or list of importers, run before the
            package ('~') importer.
        silence_deprecations: Compiler deprecation ids to silence.
        file: Native compiler option that is not valid for this plugin;
            accepted and dropped.

    Example:
        >>> opts = PluginOptions.model_validate({
        ...     "includePaths": ["src/styles"],
        ...     "injectGlobalPaths": ["src/globals/variables.scss"],
        ...     "outputStyle": "compressed",
        ... })
        >>> opts.passthrough
        {'outputStyle': 'compressed'}
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    include_paths: list[str] = Field(
        default_factory=list,
        description="Directories searched for imports",
    )
    inject_global_paths: list[str] = Field(
        default_factory=list,
        description="Stylesheets automatically imported into every file",
    )
    importer: Importer | list[Importer] | None = Field(
        default=None,
        description="User-supplied importer(s)",
    )
    silence_deprecations: list[str] | None = Field(
        default=None,
        description="Compiler deprecation ids to silence",
    )
    file: str | None = Field(
        default=None,
        description="Ignored; the plugin always compiles from source text",
    )

    @property
    def passthrough(self) -> dict[str, Any]:
        """Native compiler options the plugin does not interpret."""
        return dict(self.model_extra or {})


class RenderOptions(BaseModel):
    """Compiler-ready options for a single file.

    Attributes:
        data: Injected imports followed by the original source text.
        indented_syntax: True for the indented (.sass) syntax.
        include_paths: Absolute import search directories.
        importer: Ordered importers; ends with the package importer when the
            host can resolve packages.
        silence_deprecations: Deprecation ids to silence.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    data: str = Field(..., description="Stylesheet source handed to the compiler")
    indented_syntax: bool = Field(default=False, description="Use indented syntax")
    include_paths: list[str] = Field(
        default_factory=list,
        description="Absolute import search directories",
    )
    importer: list[Importer] = Field(
        default_factory=list,
        description="Importers run in order",
    )
    silence_deprecations: list[str] = Field(
        default_factory=list,
        description="Deprecation ids to silence",
    )

    @model_validator(mode="after")
    def reject_extension_fields(self) -> Self:
        """Ensure plugin-only keys never reach the compiler."""
        extension_keys = {*EXTENSION_FIELDS, *(to_camel(name) for name in EXTENSION_FIELDS)}
        leaked = sorted(extension_keys & set(self.model_extra or {}))
        if leaked:
            msg = f"Not valid compiler options: {', '.join(leaked)}"
            raise ValueError(msg)
        return self

    @property
    def passthrough(self) -> dict[str, Any]:
        """Native compiler options forwarded verbatim."""
        return dict(self.model_extra or {})

    def to_compiler_options(self) -> dict[str, Any]:
        """Return the camelCase option mapping handed to the compiler."""
        return self.model_dump(by_alias=True)
