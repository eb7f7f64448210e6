"""Placeholder repositories for toolchains missing from the current environment."""

from __future__ import annotations

from dataclasses import dataclass

from nixcc.compiler.templates import (
    STUB_CC_BUILD,
    STUB_CC_CONFIG,
    STUB_DEPS_BUILD,
    render,
)
from nixcc.errors import ToolchainUnavailableError
from nixcc.models import (
    BUILD_FILE,
    CONFIG_FILE,
    DEFAULT_SWITCH_HINT,
    RepositorySpec,
    cc_repo_name,
    deps_repo_name,
)


@dataclass(frozen=True, slots=True)
class StubProvider:
    """Emit repositories that load fine but fail when used to compile."""

    switch_hint: str = DEFAULT_SWITCH_HINT

    def failure_message(self, toolchain: str) -> str:
        error = ToolchainUnavailableError(toolchain=toolchain, switch_hint=self.switch_hint)
        return error.args[0]

    def cc_repository(self, toolchain: str) -> RepositorySpec:
        message = self.failure_message(toolchain).replace("\\", "\\\\").replace('"', '\\"')
        return RepositorySpec(
            name=cc_repo_name(toolchain),
            files={
                BUILD_FILE: render(STUB_CC_BUILD, name=toolchain, switch_hint=self.switch_hint),
                CONFIG_FILE: render(STUB_CC_CONFIG, message=message),
            },
            kind="stub_cc",
        )

    def deps_repository(self, toolchain: str) -> RepositorySpec:
        return RepositorySpec(
            name=deps_repo_name(toolchain),
            files={BUILD_FILE: render(STUB_DEPS_BUILD)},
            kind="stub_deps",
        )
