"""Public package entrypoint for nixcc."""

from .catalog import PathCatalog
from .config import DeclaredConfig, parse_config, read_config
from .errors import (
    CatalogError,
    ErrorCode,
    LibraryNotFoundError,
    MissingDescriptorFileError,
    NixccError,
    ResolutionError,
    ToolchainUnavailableError,
    UnsupportedTargetError,
    ValidationError,
)
from .flags import FlagAssembler, ToolchainFlags
from .generate import ToolchainBuild, build_toolchain, build_toolchains, write_deps_tree
from .libraries import LibraryRepoResolver
from .manifest import ResolutionManifest
from .materialize import materialize
from .models import (
    UNSET,
    AliasBranch,
    AliasDescriptor,
    ArtifactDirectory,
    EffectiveTarget,
    ExecPlatform,
    RepositorySpec,
    TargetSpec,
    ToolchainAvailable,
    ToolchainConfig,
    ToolchainInstall,
    ToolchainResolution,
    ToolchainUnavailable,
)
from .observability import StructuredLogger
from .repository import RepositoryPlan, ResolutionPass, plan_repositories
from .resolver import ToolchainResolver, resolve_config

__all__ = [
    "AliasBranch",
    "AliasDescriptor",
    "ArtifactDirectory",
    "CatalogError",
    "DeclaredConfig",
    "EffectiveTarget",
    "ErrorCode",
    "ExecPlatform",
    "FlagAssembler",
    "LibraryNotFoundError",
    "LibraryRepoResolver",
    "MissingDescriptorFileError",
    "NixccError",
    "PathCatalog",
    "RepositoryPlan",
    "RepositorySpec",
    "ResolutionError",
    "ResolutionManifest",
    "ResolutionPass",
    "StructuredLogger",
    "TargetSpec",
    "ToolchainAvailable",
    "ToolchainBuild",
    "ToolchainConfig",
    "ToolchainFlags",
    "ToolchainInstall",
    "ToolchainResolution",
    "ToolchainResolver",
    "ToolchainUnavailable",
    "ToolchainUnavailableError",
    "UNSET",
    "UnsupportedTargetError",
    "ValidationError",
    "build_toolchain",
    "build_toolchains",
    "materialize",
    "parse_config",
    "plan_repositories",
    "read_config",
    "resolve_config",
    "write_deps_tree",
]
