"""Named-slot templates for generated Bazel files.

Every template is a :class:`string.Template`; rendering goes through
:func:`render`, which fails on a missing slot instead of leaving a ``$name``
behind in the output.
"""

from __future__ import annotations

import textwrap
from collections.abc import Iterable
from string import Template

from nixcc.errors import ValidationError

CC_TOOLCHAIN_BUILD = Template(
    textwrap.dedent("""\
    load("@rules_cc//cc:defs.bzl", "cc_toolchain", "cc_toolchain_suite")
    load(":cc_toolchain_config.bzl", "cc_toolchain_config")

    package(default_visibility = ["//visibility:public"])

    filegroup(name = "empty")
    filegroup(name = "all_files", srcs = glob(["bin/*"]) + ["@${deps_repo}//:all"])
    filegroup(name = "compiler_files", srcs = glob(["bin/*"]) + ["@${deps_repo}//:all"])
    filegroup(name = "linker_files", srcs = glob(["bin/*"]) + ["@${deps_repo}//:all"])

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
        exec_compatible_with = [${exec_constraints}],
        target_compatible_with = [${target_constraints}],
        toolchain = ":local_config_cc_toolchain",
        toolchain_type = "@bazel_tools//tools/cpp:toolchain_type",
    )

    # Platform for --platforms flag selection
    platform(
        name = "platform",
        constraint_values = [${target_constraints}],
    )
    """)
)

CC_TOOLCHAIN_CONFIG = Template(
    textwrap.dedent("""\
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
            toolchain_identifier = "${toolchain_identifier}",
            host_system_name = "local",
            target_system_name = "${triple}",
            target_cpu = "${cpu}",
            target_libc = "${libc_name}",
            compiler = "gcc",
            abi_version = "local",
            abi_libc_version = "local",
            cxx_builtin_include_directories = [
    ${include_directories}        ],
            tool_paths = [
    ${tool_paths}        ],
            features = [
                feature(
                    name = "compile_flags",
                    enabled = True,
                    flag_sets = [flag_set(
                        actions = _COMPILE_ACTIONS,
                        flag_groups = [flag_group(flags = [${compile_flags}])],
                    )],
                ),
                feature(
                    name = "cxx_flags",
                    enabled = True,
                    flag_sets = [flag_set(
                        actions = _CXX_ACTIONS,
                        flag_groups = [flag_group(flags = [${cxx_flags}])],
                    )],
                ),
                feature(
                    name = "c_flags",
                    enabled = True,
                    flag_sets = [flag_set(
                        actions = [ACTION_NAMES.c_compile],
                        flag_groups = [flag_group(flags = [${c_flags}])],
                    )],
                ),
                feature(
                    name = "link_flags",
                    enabled = True,
                    flag_sets = [flag_set(
                        actions = _LINK_ACTIONS,
                        flag_groups = [flag_group(flags = [${link_flags}])],
                    )],
                ),
                feature(
                    name = "opt",
                    flag_sets = [flag_set(
                        actions = [ACTION_NAMES.c_compile, ACTION_NAMES.cpp_compile],
                        flag_groups = [flag_group(flags = [${opt_flags}])],
                    )],
                ),
                feature(
                    name = "dbg",
                    flag_sets = [flag_set(
                        actions = [ACTION_NAMES.c_compile, ACTION_NAMES.cpp_compile],
                        flag_groups = [flag_group(flags = [${dbg_flags}])],
                    )],
                ),
            ],
        )

    cc_toolchain_config = rule(implementation = _impl, attrs = {}, provides = [CcToolchainConfigInfo])
    """)
)

DEPS_BUILD = Template(
    textwrap.dedent("""\
    package(default_visibility = ["//visibility:public"])
    filegroup(name = "all", srcs = glob(["**/*"]))
    """)
)

STUB_CC_BUILD = Template(
    textwrap.dedent("""\

    # Stub toolchain '${name}' - not available in current shell
    # Use '${switch_hint}' for cross-compilation support
    package(default_visibility = ["//visibility:public"])

    filegroup(name = "empty")

    # Stub platform so use_repo doesn't fail
    platform(
        name = "platform",
        constraint_values = [],
    )
    """)
)

STUB_CC_CONFIG = Template(
    textwrap.dedent("""\

    def cc_toolchain_config(**kwargs):
        fail("${message}")
    """)
)

STUB_DEPS_BUILD = Template(
    textwrap.dedent("""\

    package(default_visibility = ["//visibility:public"])
    filegroup(name = "all", srcs = [])
    """)
)

ALIAS_BUILD = Template(
    textwrap.dedent("""\

    package(default_visibility = ["//visibility:public"])

    alias(
        name = "${library}",
        actual = select({
    ${cases}
        }),
    )
    """)
)

MODULE_DECL = Template('module(name = "${name}")')

HEADER_GLOB = 'glob(["include/**/*.h", "include/**/*.hpp", "include/**/*.ipp"], allow_empty = True)'

DYNAMIC_LIBRARY_BUILD = Template(
    textwrap.dedent("""\
    load("@rules_cc//cc:cc_library.bzl", "cc_library")

    package(default_visibility = ["//visibility:public"])

    cc_library(
        name = "${name}",
        hdrs = ${header_glob},
        srcs = glob(["lib/**/*.so*", "lib/**/*.dylib"], allow_empty = True),
        includes = ["include"],
    )
    """)
)

HEADER_ONLY_LIBRARY_BUILD = Template(
    textwrap.dedent("""\
    load("@rules_cc//cc:cc_library.bzl", "cc_library")

    package(default_visibility = ["//visibility:public"])

    cc_library(
        name = "${name}",
        hdrs = ${header_glob},
        includes = ["include"],
    )
    """)
)

STATIC_LIBRARY_BUILD = Template(
    textwrap.dedent("""\
    load("@rules_cc//cc:cc_library.bzl", "cc_library")
    load("@rules_cc//cc:cc_import.bzl", "cc_import")

    package(default_visibility = ["//visibility:public"])

    cc_library(
        name = "${name}",
        hdrs = ${header_glob},
        includes = ["include"],
        deps = [${deps}],
    )
    """)
)

CC_IMPORT = Template(
    textwrap.dedent("""\

    cc_import(
        name = "${name}",
        static_library = "lib/${archive}",
    )
    """)
)


def render(template: Template, **slots: str) -> str:
    try:
        return template.substitute(slots)
    except KeyError as exc:
        raise ValidationError(
            "Template slot was not provided.",
            hint="Pass every named slot the template declares.",
            context={"operation": "render", "slot": str(exc.args[0])},
        ) from exc


def starlark_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def starlark_list(values: Iterable[str]) -> str:
    """Render strings as the items of an inline Starlark list."""
    return ", ".join(starlark_string(value) for value in values)


def starlark_lines(values: Iterable[str], *, indent: str) -> str:
    """Render strings one per line, each with a trailing comma and newline."""
    return "".join(f"{indent}{starlark_string(value)},\n" for value in values)
