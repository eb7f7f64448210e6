"""Compiler interfaces for emitting Bazel repository files."""

from .emit_alias import AliasSelectorGenerator, variant_label
from .emit_library import (
    ArchiveFallbackWarning,
    LibraryBuild,
    import_name,
    select_main_archive,
    synthesize_library_build,
)
from .emit_stub import StubProvider
from .emit_toolchain import (
    TOOL_NAMES,
    DescriptorEmitter,
    ToolchainDescriptor,
    ToolchainDescriptorEmitter,
    render_deps_build,
)

__all__ = [
    "AliasSelectorGenerator",
    "ArchiveFallbackWarning",
    "DescriptorEmitter",
    "LibraryBuild",
    "StubProvider",
    "TOOL_NAMES",
    "ToolchainDescriptor",
    "ToolchainDescriptorEmitter",
    "import_name",
    "render_deps_build",
    "select_main_archive",
    "synthesize_library_build",
    "variant_label",
]
