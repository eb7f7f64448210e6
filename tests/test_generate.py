from pathlib import Path

import pytest

from nixcc.catalog import PathCatalog
from nixcc.errors import ResolutionError, ValidationError
from nixcc.generate import build_toolchain, build_toolchains, deps_links, write_deps_tree
from nixcc.models import TargetSpec, ToolchainConfig, ToolchainInstall
from nixcc.observability import StructuredLogger
from nixcc.repository import plan_repositories


def test_build_toolchain_renders_descriptor(install: ToolchainInstall) -> None:
    build = build_toolchain(ToolchainConfig(name="default", static=True, install=install))
    assert build.target.link_mode == "static"
    assert build.flags.link[0] == "-static"
    assert 'target_libc = "musl"' in build.descriptor.config_file
    assert "local_config_cc_default_deps" in build.descriptor.build_file
    assert set(build.binaries) >= {"gcc", "ld", "llvm-profdata"}
    assert build.deps_links["gcc-lib"] == Path(install.gcc_cc)


def test_build_toolchain_requires_install() -> None:
    with pytest.raises(ValidationError) as excinfo:
        build_toolchain(ToolchainConfig(name="default"))
    assert excinfo.value.context["toolchain"] == "default"


def test_deps_links_skip_libc_for_bare_metal(install: ToolchainInstall) -> None:
    config = ToolchainConfig(
        name="arm",
        target=TargetSpec(triple="arm-none-eabi", cpu="arm", os="none", libc=None),
        install=install,
    )
    build = build_toolchain(config)
    assert list(build.deps_links) == ["gcc", "gcc-lib", "binutils"]
    assert list(deps_links(build.target)) == ["gcc", "gcc-lib", "binutils"]


def test_build_toolchains_aggregates_failures(install: ToolchainInstall) -> None:
    logger = StructuredLogger()
    configs = [
        ToolchainConfig(name="default", install=install),
        ToolchainConfig(name="bad-cpu", target=TargetSpec(cpu="sparc"), install=install),
        ToolchainConfig(name="no-install"),
    ]
    with pytest.raises(ResolutionError) as excinfo:
        build_toolchains(configs, logger=logger)
    assert set(excinfo.value.failures) == {"bad-cpu", "no-install"}
    assert excinfo.value.context["bad-cpu"] == "E_UNSUPPORTED_TARGET"
    assert [record["toolchain"] for record in logger.records_at("error")] == [
        "bad-cpu",
        "no-install",
    ]
    assert logger.records_for_toolchain("default")[0]["message"] == "Toolchain resolved."


def test_write_deps_tree_round_trips_through_catalog(
    install: ToolchainInstall, tmp_path: Path
) -> None:
    builds = build_toolchains(
        [
            ToolchainConfig(name="default", install=install),
            ToolchainConfig(
                name="aarch64",
                target=TargetSpec(triple="aarch64-unknown-linux-gnu", cpu="aarch64"),
                install=install,
            ),
        ]
    )
    artifacts = {}
    for toolchain in ("default", "aarch64"):
        artifact = tmp_path / "store" / f"zlib-{toolchain}"
        artifact.mkdir(parents=True)
        (artifact / "BUILD.bazel").write_text(f"# zlib {toolchain}\n", encoding="utf-8")
        artifacts[toolchain] = artifact

    root = write_deps_tree(tmp_path / ".nix-bazel-deps", builds, libraries={"zlib": artifacts})

    assert (root / ".toolchain-marker").read_text(encoding="utf-8") == "aarch64\ndefault\n"
    cc_dir = root / "toolchains" / "aarch64" / "cc"
    assert "@platforms//cpu:aarch64" in (cc_dir / "BUILD.bazel").read_text(encoding="utf-8")
    assert (cc_dir / "bin" / "gcc").is_symlink()
    assert (root / "toolchains" / "default" / "deps" / "gcc-lib").is_symlink()
    assert (root / "libs" / "zlib").resolve() == artifacts["default"].resolve()
    assert (root / "libs" / "zlib_aarch64").resolve() == artifacts["aarch64"].resolve()

    plan = plan_repositories(
        PathCatalog.open(root),
        toolchains=["default", "aarch64"],
        packages=["zlib"],
    )
    assert plan.available_toolchains == ("default", "aarch64")
    assert plan.marker == "aarch64\ndefault\n"
    assert plan.repositories["local_config_cc_aarch64_deps"].kind == "deps"


def test_write_deps_tree_is_idempotent(install: ToolchainInstall, tmp_path: Path) -> None:
    builds = build_toolchains([ToolchainConfig(name="default", install=install)])
    root = tmp_path / "deps"
    write_deps_tree(root, builds)
    first = (root / "toolchains" / "default" / "cc" / "cc_toolchain_config.bzl").read_text(
        encoding="utf-8"
    )
    write_deps_tree(root, builds)
    second = (root / "toolchains" / "default" / "cc" / "cc_toolchain_config.bzl").read_text(
        encoding="utf-8"
    )
    assert first == second
    assert sorted(entry.name for entry in (root / "toolchains" / "default").iterdir()) == [
        "cc",
        "deps",
    ]


def test_failed_toolchain_keeps_successful_builds(
    install: ToolchainInstall, tmp_path: Path
) -> None:
    configs = [
        ToolchainConfig(name="default", install=install),
        ToolchainConfig(name="bad-cpu", target=TargetSpec(cpu="sparc"), install=install),
    ]
    with pytest.raises(ResolutionError) as excinfo:
        build_toolchains(configs)
    partial = excinfo.value.partial
    assert [build.name for build in partial] == ["default"]

    root = write_deps_tree(tmp_path / "deps", partial)
    assert (root / ".toolchain-marker").read_text(encoding="utf-8") == "default\n"
    assert (root / "toolchains" / "default" / "cc" / "BUILD.bazel").is_file()
    assert not (root / "toolchains" / "bad-cpu").exists()


def test_library_link_replaces_real_directory(
    install: ToolchainInstall, tmp_path: Path
) -> None:
    builds = build_toolchains([ToolchainConfig(name="default", install=install)])
    artifact = tmp_path / "store" / "zlib"
    artifact.mkdir(parents=True)
    root = tmp_path / "deps"
    stale = root / "libs" / "zlib"
    stale.mkdir(parents=True)
    (stale / "BUILD.bazel").write_text("# stale\n", encoding="utf-8")

    write_deps_tree(root, builds, libraries={"zlib": {"default": artifact}})
    assert stale.is_symlink()
    assert stale.resolve() == artifact.resolve()
