import pytest

from nixcc.errors import ErrorCode, UnsupportedTargetError
from nixcc.platforms import (
    CONDITIONS_DEFAULT,
    cpu_constraint,
    dynamic_loader,
    os_constraint,
    target_constraints,
    toolchain_constraint,
)


@pytest.mark.parametrize("cpu", ["x86_64", "mips64", "aarch64", "arm", "riscv64"])
def test_every_supported_cpu_maps_to_platforms_constraint(cpu: str) -> None:
    assert cpu_constraint(cpu) == f"@platforms//cpu:{cpu}"


@pytest.mark.parametrize("os", ["linux", "none", "macos"])
def test_every_supported_os_maps_to_platforms_constraint(os: str) -> None:
    assert os_constraint(os) == f"@platforms//os:{os}"


def test_target_constraints_orders_cpu_before_os() -> None:
    assert target_constraints("aarch64", "linux") == (
        "@platforms//cpu:aarch64",
        "@platforms//os:linux",
    )


def test_unknown_cpu_names_supported_values() -> None:
    with pytest.raises(UnsupportedTargetError) as excinfo:
        cpu_constraint("sparc")
    assert excinfo.value.code == ErrorCode.UNSUPPORTED_TARGET.value
    assert excinfo.value.field == "cpu"
    assert excinfo.value.value == "sparc"
    assert "x86_64" in excinfo.value.supported
    assert "Unsupported cpu 'sparc'" in str(excinfo.value)


def test_unknown_os_is_rejected() -> None:
    with pytest.raises(UnsupportedTargetError) as excinfo:
        os_constraint("windows")
    assert excinfo.value.field == "os"
    assert excinfo.value.supported == ("linux", "none", "macos")


def test_toolchain_constraint_table() -> None:
    assert toolchain_constraint("default") is None
    assert toolchain_constraint("aarch64") == "@platforms//cpu:aarch64"
    assert toolchain_constraint("riscv64") == "@platforms//cpu:riscv64"
    assert toolchain_constraint("musl-static") is None
    assert CONDITIONS_DEFAULT == "//conditions:default"


def test_dynamic_loader_per_cpu() -> None:
    assert dynamic_loader("x86_64") == "ld-linux-x86-64.so.2"
    assert dynamic_loader("aarch64") == "ld-linux-aarch64.so.1"
    with pytest.raises(UnsupportedTargetError):
        dynamic_loader("sparc")
