"""Declared configuration parser."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from nixcc.errors import ValidationError
from nixcc.models import (
    DEFAULT_SWITCH_HINT,
    DEPS_DIR_NAME,
    ExecPlatform,
    TargetSpec,
    ToolchainConfig,
    ToolchainInstall,
)
from nixcc.repository import default_toolchain

_TARGET_KEYS = frozenset(
    {"triple", "cpu", "os", "libc", "libc_name", "link_flags", "fortify_headers"}
)
_NULLABLE_TARGET_KEYS = frozenset({"libc", "fortify_headers"})
_TOOLCHAIN_KEYS = frozenset(
    {"name", "static", "target", "install", "c_standard", "cxx_standard", "exec"}
)


@dataclass(frozen=True, slots=True)
class DeclaredConfig:
    toolchains: tuple[ToolchainConfig, ...] = ()
    packages: tuple[str, ...] = ()
    deps_dir: str = DEPS_DIR_NAME
    switch_hint: str = DEFAULT_SWITCH_HINT
    source: Path | None = field(default=None, compare=False)

    @property
    def toolchain_names(self) -> tuple[str, ...]:
        return tuple(config.name for config in self.toolchains)

    @property
    def default_toolchain(self) -> str:
        return default_toolchain(self.toolchain_names)

    def toolchain(self, name: str) -> ToolchainConfig:
        for config in self.toolchains:
            if config.name == name:
                return config
        raise ValidationError(
            f"Toolchain '{name}' is not declared.",
            context={"operation": "toolchain", "toolchain": name},
        )

    def deps_root(self, workspace: str | Path) -> Path:
        return Path(workspace) / self.deps_dir


def parse_config(raw: str) -> DeclaredConfig:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError("Invalid configuration JSON.", hint=str(exc)) from exc

    if not isinstance(payload, dict):
        raise ValidationError("Invalid configuration payload type.")

    toolchains_raw = payload.get("toolchains", [])
    if not isinstance(toolchains_raw, list):
        raise ValidationError("Invalid configuration `toolchains` value.")
    toolchains = tuple(_parse_toolchain(item) for item in toolchains_raw)
    names = [config.name for config in toolchains]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValidationError(
            "Toolchain names must be unique.",
            context={"operation": "parse_config", "duplicates": ", ".join(duplicates)},
        )

    return DeclaredConfig(
        toolchains=toolchains,
        packages=_optional_str_list(payload, "packages"),
        deps_dir=_optional_str(payload, "deps_dir") or DEPS_DIR_NAME,
        switch_hint=_optional_str(payload, "switch_hint") or DEFAULT_SWITCH_HINT,
    )


def read_config(path: str | Path) -> DeclaredConfig:
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ValidationError(
            "Configuration file does not exist.",
            context={"path": str(config_path)},
        ) from exc
    config = parse_config(raw)
    return DeclaredConfig(
        toolchains=config.toolchains,
        packages=config.packages,
        deps_dir=config.deps_dir,
        switch_hint=config.switch_hint,
        source=config_path,
    )


def _parse_toolchain(item: Any) -> ToolchainConfig:
    if isinstance(item, str):
        return ToolchainConfig(name=_non_empty(item, "toolchains[].name"))
    if not isinstance(item, dict):
        raise ValidationError("Invalid toolchain entry in configuration.")
    _reject_unknown(item, _TOOLCHAIN_KEYS, "toolchain")
    name = _required_str(item, "name")
    static = item.get("static", False)
    if not isinstance(static, bool):
        raise ValidationError(f"Invalid `static` value for toolchain '{name}'.")
    exec_raw = item.get("exec", {})
    if not isinstance(exec_raw, dict):
        raise ValidationError(f"Invalid `exec` value for toolchain '{name}'.")
    install_raw = item.get("install")
    return ToolchainConfig(
        name=name,
        static=static,
        target=_parse_target(item.get("target", {}), name),
        install=None if install_raw is None else _parse_install(install_raw, name),
        c_standard=_optional_str(item, "c_standard") or "c17",
        cxx_standard=_optional_str(item, "cxx_standard") or "c++23",
        exec_platform=ExecPlatform(
            cpu=_optional_str(exec_raw, "cpu") or "x86_64",
            os=_optional_str(exec_raw, "os") or "linux",
        ),
    )


def _parse_target(raw: Any, toolchain: str) -> TargetSpec:
    if not isinstance(raw, dict):
        raise ValidationError(f"Invalid `target` value for toolchain '{toolchain}'.")
    _reject_unknown(raw, _TARGET_KEYS, "target")
    values: dict[str, Any] = {}
    for key, value in raw.items():
        if value is None:
            if key not in _NULLABLE_TARGET_KEYS:
                raise ValidationError(
                    f"Target field `{key}` cannot be null.",
                    context={"toolchain": toolchain, "field": key},
                )
            values[key] = None
        elif key == "link_flags":
            if not isinstance(value, list) or not all(isinstance(flag, str) for flag in value):
                raise ValidationError(
                    "Target `link_flags` must be a list of strings.",
                    context={"toolchain": toolchain},
                )
            values[key] = tuple(value)
        elif isinstance(value, str) and value:
            values[key] = value
        else:
            raise ValidationError(
                f"Invalid target `{key}` value.",
                context={"toolchain": toolchain, "field": key},
            )
    return TargetSpec(**values)


def _parse_install(raw: Any, toolchain: str) -> ToolchainInstall:
    if not isinstance(raw, dict):
        raise ValidationError(f"Invalid `install` value for toolchain '{toolchain}'.")
    wrapper_dirs = raw.get("wrapper_include_dirs", [])
    if not isinstance(wrapper_dirs, list) or not all(isinstance(d, str) for d in wrapper_dirs):
        raise ValidationError("Invalid install `wrapper_include_dirs` value.")
    return ToolchainInstall(
        gcc=_required_str(raw, "gcc"),
        gcc_cc=_required_str(raw, "gcc_cc"),
        binutils=_required_str(raw, "binutils"),
        gcc_version=_required_str(raw, "gcc_version"),
        libc=_optional_str(raw, "libc"),
        libc_dev=_optional_str(raw, "libc_dev"),
        fortify_headers=_optional_str(raw, "fortify_headers"),
        wrapper_include_dirs=tuple(wrapper_dirs),
    )


def _reject_unknown(payload: dict[str, Any], allowed: frozenset[str], section: str) -> None:
    unknown = sorted(str(key) for key in payload if key not in allowed)
    if unknown:
        raise ValidationError(
            f"Configuration {section} contains unknown keys: {', '.join(unknown)}",
            context={"operation": "parse_config", "section": section},
        )


def _non_empty(value: str, key: str) -> str:
    if not value:
        raise ValidationError(f"Invalid configuration `{key}` value.")
    return value


def _required_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise ValidationError(f"Invalid configuration `{key}` value.")
    return value


def _optional_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value:
        raise ValidationError(f"Invalid configuration `{key}` value.")
    return value


def _optional_str_list(payload: dict[str, Any], key: str) -> tuple[str, ...]:
    value = payload.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) and item for item in value):
        raise ValidationError(f"Invalid configuration `{key}` value.")
    return tuple(value)
