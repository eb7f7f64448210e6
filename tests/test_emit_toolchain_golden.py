from nixcc.compiler.emit_toolchain import ToolchainDescriptor, ToolchainDescriptorEmitter
from nixcc.flags import FlagAssembler
from nixcc.models import TargetSpec, ToolchainInstall
from nixcc.resolver import ToolchainResolver

DYNAMIC_BUILD = """\
load("@rules_cc//cc:defs.bzl", "cc_toolchain", "cc_toolchain_suite")
load(":cc_toolchain_config.bzl", "cc_toolchain_config")

package(default_visibility = ["//visibility:public"])

filegroup(name = "empty")
filegroup(name = "all_files", srcs = glob(["bin/*"]) + ["@local_config_cc_default_deps//:all"])
filegroup(name = "compiler_files", srcs = glob(["bin/*"]) + ["@local_config_cc_default_deps//:all"])
filegroup(name = "linker_files", srcs = glob(["bin/*"]) + ["@local_config_cc_default_deps//:all"])

cc_toolchain_config(name = "local_config_cc_toolchain_config")

cc_toolchain(
    name = "local_config_cc_toolchain",
    all_files = ":all_files",
    ar_files = ":all_files",
    as_files = ":all_files",
    compiler_files = ":compiler_files",
    dwp_files = ":empty",
    linker_files = ":linker_files",
    objcopy_files = ":all_files",
    strip_files = ":all_files",
    toolchain_config = ":local_config_cc_toolchain_config",
)

cc_toolchain_suite(
    name = "toolchain",
    toolchains = {"k8": ":local_config_cc_toolchain", "k8|gcc": ":local_config_cc_toolchain"},
)

toolchain(
    name = "cc_toolchain",
    exec_compatible_with = ["@platforms//cpu:x86_64", "@platforms//os:linux"],
    target_compatible_with = ["@platforms//cpu:x86_64", "@platforms//os:linux"],
    toolchain = ":local_config_cc_toolchain",
    toolchain_type = "@bazel_tools//tools/cpp:toolchain_type",
)

# Platform for --platforms flag selection
platform(
    name = "platform",
    constraint_values = ["@platforms//cpu:x86_64", "@platforms//os:linux"],
)
"""

DYNAMIC_CONFIG = """\
load("@bazel_tools//tools/cpp:cc_toolchain_config_lib.bzl", "feature", "flag_group", "flag_set", "tool_path")
load("@bazel_tools//tools/build_defs/cc:action_names.bzl", "ACTION_NAMES")

_COMPILE_ACTIONS = [
    ACTION_NAMES.c_compile, ACTION_NAMES.cpp_compile, ACTION_NAMES.cpp_header_parsing,
    ACTION_NAMES.cpp_module_compile, ACTION_NAMES.cpp_module_codegen,
    ACTION_NAMES.linkstamp_compile, ACTION_NAMES.assemble, ACTION_NAMES.preprocess_assemble,
]
_CXX_ACTIONS = [
    ACTION_NAMES.cpp_compile, ACTION_NAMES.cpp_header_parsing,
    ACTION_NAMES.cpp_module_compile, ACTION_NAMES.cpp_module_codegen, ACTION_NAMES.linkstamp_compile,
]
_LINK_ACTIONS = [
    ACTION_NAMES.cpp_link_executable, ACTION_NAMES.cpp_link_dynamic_library,
    ACTION_NAMES.cpp_link_nodeps_dynamic_library,
]

def _impl(ctx):
    return cc_common.create_cc_toolchain_config_info(
        ctx = ctx,
        toolchain_identifier = "local_x86_64-unknown-linux-gnu",
        host_system_name = "local",
        target_system_name = "x86_64-unknown-linux-gnu",
        target_cpu = "x86_64",
        target_libc = "glibc",
        compiler = "gcc",
        abi_version = "local",
        abi_libc_version = "local",
        cxx_builtin_include_directories = [
            "/nix/store/bbbb-gcc-14.2.0/include/c++/14.2.0",
            "/nix/store/bbbb-gcc-14.2.0/include/c++/14.2.0/x86_64-unknown-linux-gnu",
            "/nix/store/bbbb-gcc-14.2.0/lib/gcc/x86_64-unknown-linux-gnu/14.2.0/include",
            "/nix/store/bbbb-gcc-14.2.0/lib/gcc/x86_64-unknown-linux-gnu/14.2.0/include-fixed",
            "/nix/store/bbbb-gcc-14.2.0/x86_64-unknown-linux-gnu/sys-include",
            "/nix/store/bbbb-gcc-14.2.0/x86_64-unknown-linux-gnu/include",
            "/nix/store/eeee-glibc-2.40-dev/include",
        ],
        tool_paths = [
            tool_path(name = "gcc", path = "bin/gcc"),
            tool_path(name = "g++", path = "bin/g++"),
            tool_path(name = "cpp", path = "bin/cpp"),
            tool_path(name = "ar", path = "bin/ar"),
            tool_path(name = "nm", path = "bin/nm"),
            tool_path(name = "objdump", path = "bin/objdump"),
            tool_path(name = "objcopy", path = "bin/objcopy"),
            tool_path(name = "strip", path = "bin/strip"),
            tool_path(name = "ld", path = "bin/ld"),
            tool_path(name = "gcov", path = "bin/gcov"),
            tool_path(name = "dwp", path = "bin/dwp"),
            tool_path(name = "llvm-profdata", path = "bin/llvm-profdata"),
        ],
        features = [
            feature(
                name = "compile_flags",
                enabled = True,
                flag_sets = [flag_set(
                    actions = _COMPILE_ACTIONS,
                    flag_groups = [flag_group(flags = ["-isystem", "external/local_config_cc_default_deps/gcc-lib/include/c++/14.2.0", "-isystem", "external/local_config_cc_default_deps/gcc-lib/include/c++/14.2.0/x86_64-unknown-linux-gnu", "-isystem", "external/local_config_cc_default_deps/gcc-lib/lib/gcc/x86_64-unknown-linux-gnu/14.2.0/include", "-isystem", "external/local_config_cc_default_deps/gcc-lib/lib/gcc/x86_64-unknown-linux-gnu/14.2.0/include-fixed", "-isystem", "external/local_config_cc_default_deps/libc-dev/include", "-no-canonical-prefixes", "-fno-canonical-system-headers"])],
                )],
            ),
            feature(
                name = "cxx_flags",
                enabled = True,
                flag_sets = [flag_set(
                    actions = _CXX_ACTIONS,
                    flag_groups = [flag_group(flags = ["-std=c++23"])],
                )],
            ),
            feature(
                name = "c_flags",
                enabled = True,
                flag_sets = [flag_set(
                    actions = [ACTION_NAMES.c_compile],
                    flag_groups = [flag_group(flags = ["-std=c17"])],
                )],
            ),
            feature(
                name = "link_flags",
                enabled = True,
                flag_sets = [flag_set(
                    actions = _LINK_ACTIONS,
                    flag_groups = [flag_group(flags = ["-Lexternal/local_config_cc_default_deps/gcc/lib/gcc/x86_64-unknown-linux-gnu/14.2.0", "-Lexternal/local_config_cc_default_deps/gcc-lib/lib", "-Lexternal/local_config_cc_default_deps/libc/lib", "-Wl,-rpath,/nix/store/bbbb-gcc-14.2.0/lib", "-Wl,-rpath,/nix/store/dddd-glibc-2.40/lib", "-Wl,--dynamic-linker=/nix/store/dddd-glibc-2.40/lib/ld-linux-x86-64.so.2", "-Bexternal/local_config_cc_default_deps/binutils/bin", "-lstdc++", "-lm", "-no-canonical-prefixes"])],
                )],
            ),
            feature(
                name = "opt",
                flag_sets = [flag_set(
                    actions = [ACTION_NAMES.c_compile, ACTION_NAMES.cpp_compile],
                    flag_groups = [flag_group(flags = ["-O2", "-DNDEBUG"])],
                )],
            ),
            feature(
                name = "dbg",
                flag_sets = [flag_set(
                    actions = [ACTION_NAMES.c_compile, ACTION_NAMES.cpp_compile],
                    flag_groups = [flag_group(flags = ["-g", "-O0"])],
                )],
            ),
        ],
    )

cc_toolchain_config = rule(implementation = _impl, attrs = {}, provides = [CcToolchainConfigInfo])
"""

BARE_METAL_BUILD = """\
load("@rules_cc//cc:defs.bzl", "cc_toolchain", "cc_toolchain_suite")
load(":cc_toolchain_config.bzl", "cc_toolchain_config")

package(default_visibility = ["//visibility:public"])

filegroup(name = "empty")
filegroup(name = "all_files", srcs = glob(["bin/*"]) + ["@local_config_cc_arm_deps//:all"])
filegroup(name = "compiler_files", srcs = glob(["bin/*"]) + ["@local_config_cc_arm_deps//:all"])
filegroup(name = "linker_files", srcs = glob(["bin/*"]) + ["@local_config_cc_arm_deps//:all"])

cc_toolchain_config(name = "local_config_cc_toolchain_config")

cc_toolchain(
    name = "local_config_cc_toolchain",
    all_files = ":all_files",
    ar_files = ":all_files",
    as_files = ":all_files",
    compiler_files = ":compiler_files",
    dwp_files = ":empty",
    linker_files = ":linker_files",
    objcopy_files = ":all_files",
    strip_files = ":all_files",
    toolchain_config = ":local_config_cc_toolchain_config",
)

cc_toolchain_suite(
    name = "toolchain",
    toolchains = {"k8": ":local_config_cc_toolchain", "k8|gcc": ":local_config_cc_toolchain"},
)

toolchain(
    name = "cc_toolchain",
    exec_compatible_with = ["@platforms//cpu:x86_64", "@platforms//os:linux"],
    target_compatible_with = ["@platforms//cpu:arm", "@platforms//os:none"],
    toolchain = ":local_config_cc_toolchain",
    toolchain_type = "@bazel_tools//tools/cpp:toolchain_type",
)

# Platform for --platforms flag selection
platform(
    name = "platform",
    constraint_values = ["@platforms//cpu:arm", "@platforms//os:none"],
)
"""

BARE_METAL_CONFIG = """\
load("@bazel_tools//tools/cpp:cc_toolchain_config_lib.bzl", "feature", "flag_group", "flag_set", "tool_path")
load("@bazel_tools//tools/build_defs/cc:action_names.bzl", "ACTION_NAMES")

_COMPILE_ACTIONS = [
    ACTION_NAMES.c_compile, ACTION_NAMES.cpp_compile, ACTION_NAMES.cpp_header_parsing,
    ACTION_NAMES.cpp_module_compile, ACTION_NAMES.cpp_module_codegen,
    ACTION_NAMES.linkstamp_compile, ACTION_NAMES.assemble, ACTION_NAMES.preprocess_assemble,
]
_CXX_ACTIONS = [
    ACTION_NAMES.cpp_compile, ACTION_NAMES.cpp_header_parsing,
    ACTION_NAMES.cpp_module_compile, ACTION_NAMES.cpp_module_codegen, ACTION_NAMES.linkstamp_compile,
]
_LINK_ACTIONS = [
    ACTION_NAMES.cpp_link_executable, ACTION_NAMES.cpp_link_dynamic_library,
    ACTION_NAMES.cpp_link_nodeps_dynamic_library,
]

def _impl(ctx):
    return cc_common.create_cc_toolchain_config_info(
        ctx = ctx,
        toolchain_identifier = "local_arm-none-eabi",
        host_system_name = "local",
        target_system_name = "arm-none-eabi",
        target_cpu = "arm",
        target_libc = "musl",
        compiler = "gcc",
        abi_version = "local",
        abi_libc_version = "local",
        cxx_builtin_include_directories = [
            "/nix/store/bbbb-gcc-14.2.0/include/c++/14.2.0",
            "/nix/store/bbbb-gcc-14.2.0/include/c++/14.2.0/arm-none-eabi",
            "/nix/store/bbbb-gcc-14.2.0/lib/gcc/arm-none-eabi/14.2.0/include",
            "/nix/store/bbbb-gcc-14.2.0/lib/gcc/arm-none-eabi/14.2.0/include-fixed",
            "/nix/store/bbbb-gcc-14.2.0/arm-none-eabi/sys-include",
            "/nix/store/bbbb-gcc-14.2.0/arm-none-eabi/include",
        ],
        tool_paths = [
            tool_path(name = "gcc", path = "bin/gcc"),
            tool_path(name = "g++", path = "bin/g++"),
            tool_path(name = "cpp", path = "bin/cpp"),
            tool_path(name = "ar", path = "bin/ar"),
            tool_path(name = "nm", path = "bin/nm"),
            tool_path(name = "objdump", path = "bin/objdump"),
            tool_path(name = "objcopy", path = "bin/objcopy"),
            tool_path(name = "strip", path = "bin/strip"),
            tool_path(name = "ld", path = "bin/ld"),
            tool_path(name = "gcov", path = "bin/gcov"),
            tool_path(name = "dwp", path = "bin/dwp"),
            tool_path(name = "llvm-profdata", path = "bin/llvm-profdata"),
        ],
        features = [
            feature(
                name = "compile_flags",
                enabled = True,
                flag_sets = [flag_set(
                    actions = _COMPILE_ACTIONS,
                    flag_groups = [flag_group(flags = ["-isystem", "external/local_config_cc_arm_deps/gcc-lib/include/c++/14.2.0", "-isystem", "external/local_config_cc_arm_deps/gcc-lib/include/c++/14.2.0/arm-none-eabi", "-isystem", "external/local_config_cc_arm_deps/gcc-lib/lib/gcc/arm-none-eabi/14.2.0/include", "-isystem", "external/local_config_cc_arm_deps/gcc-lib/lib/gcc/arm-none-eabi/14.2.0/include-fixed", "-no-canonical-prefixes", "-fno-canonical-system-headers"])],
                )],
            ),
            feature(
                name = "cxx_flags",
                enabled = True,
                flag_sets = [flag_set(
                    actions = _CXX_ACTIONS,
                    flag_groups = [flag_group(flags = ["-std=c++23"])],
                )],
            ),
            feature(
                name = "c_flags",
                enabled = True,
                flag_sets = [flag_set(
                    actions = [ACTION_NAMES.c_compile],
                    flag_groups = [flag_group(flags = ["-std=c17"])],
                )],
            ),
            feature(
                name = "link_flags",
                enabled = True,
                flag_sets = [flag_set(
                    actions = _LINK_ACTIONS,
                    flag_groups = [flag_group(flags = ["-nostdlib", "-static", "-Lexternal/local_config_cc_arm_deps/gcc-lib/lib/gcc/arm-none-eabi/14.2.0", "-Bexternal/local_config_cc_arm_deps/binutils/bin", "-lgcc", "-no-canonical-prefixes"])],
                )],
            ),
            feature(
                name = "opt",
                flag_sets = [flag_set(
                    actions = [ACTION_NAMES.c_compile, ACTION_NAMES.cpp_compile],
                    flag_groups = [flag_group(flags = ["-O2", "-DNDEBUG"])],
                )],
            ),
            feature(
                name = "dbg",
                flag_sets = [flag_set(
                    actions = [ACTION_NAMES.c_compile, ACTION_NAMES.cpp_compile],
                    flag_groups = [flag_group(flags = ["-g", "-O0"])],
                )],
            ),
        ],
    )

cc_toolchain_config = rule(implementation = _impl, attrs = {}, provides = [CcToolchainConfigInfo])
"""


def _emit(install: ToolchainInstall, spec: TargetSpec, toolchain: str) -> ToolchainDescriptor:
    target = ToolchainResolver(install=install, toolchain=toolchain).resolve(spec)
    assembler = FlagAssembler()
    return ToolchainDescriptorEmitter().emit(
        target,
        assembler.include_paths(target),
        assembler.assemble(target),
        toolchain,
    )


def test_dynamic_descriptor_golden_output(install: ToolchainInstall) -> None:
    descriptor = _emit(install, TargetSpec(), "default")
    assert descriptor.build_file == DYNAMIC_BUILD
    assert descriptor.config_file == DYNAMIC_CONFIG


def test_bare_metal_descriptor_golden_output(install: ToolchainInstall) -> None:
    spec = TargetSpec(
        triple="arm-none-eabi",
        cpu="arm",
        os="none",
        libc=None,
        fortify_headers=None,
    )
    descriptor = _emit(install, spec, "arm")
    assert descriptor.build_file == BARE_METAL_BUILD
    assert descriptor.config_file == BARE_METAL_CONFIG
