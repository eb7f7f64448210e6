"""BUILD synthesis for prebuilt library artifact directories.

Dynamic libraries get a single ``cc_library`` globbing the shared objects.
Static libraries get one ``cc_import`` per archive plus a ``cc_library`` that
carries the headers and depends on every import; with no archives at all the
library is header-only.
"""

from __future__ import annotations

import re
import warnings
from collections.abc import Iterable
from dataclasses import dataclass

from nixcc.compiler.templates import (
    CC_IMPORT,
    DYNAMIC_LIBRARY_BUILD,
    HEADER_GLOB,
    HEADER_ONLY_LIBRARY_BUILD,
    MODULE_DECL,
    STATIC_LIBRARY_BUILD,
    render,
    starlark_string,
)


class ArchiveFallbackWarning(UserWarning):
    """Warning raised when the main archive was picked without a name match."""


@dataclass(frozen=True, slots=True)
class LibraryBuild:
    name: str
    build_file: str
    module_file: str
    main_archive: str | None = None
    archives: tuple[str, ...] = ()


def select_main_archive(pname: str, archives: Iterable[str]) -> str | None:
    """Pick the archive that most likely belongs to ``pname``.

    Precedence: ``lib<pname>.a``, ``<pname>.a``, ``lib<pname>`` followed by a
    non-letter, then the first archive. The last step is a best-effort guess.
    """
    candidates = sorted(archives)
    if not candidates:
        return None
    for exact in (f"lib{pname}.a", f"{pname}.a"):
        if exact in candidates:
            return exact
    prefixed = re.compile(rf"^lib{re.escape(pname)}[^a-z].*\.a$")
    for archive in candidates:
        if prefixed.match(archive):
            return archive
    if len(candidates) > 1:
        warnings.warn(
            f"No archive matches '{pname}'; using '{candidates[0]}' of {len(candidates)}.",
            ArchiveFallbackWarning,
            stacklevel=2,
        )
    return candidates[0]


def import_name(archive: str) -> str:
    """``libfoo.a`` becomes ``foo-lib`` so it cannot clash with the cc_library."""
    stem = archive[3:] if archive.startswith("lib") else archive
    if stem.endswith(".a"):
        stem = stem[:-2]
    return f"{stem}-lib"


def synthesize_library_build(
    name: str,
    *,
    pname: str | None = None,
    archives: Iterable[str] = (),
    static: bool,
) -> LibraryBuild:
    module_file = render(MODULE_DECL, name=name) + "\n"
    if not static:
        build = render(DYNAMIC_LIBRARY_BUILD, name=name, header_glob=HEADER_GLOB)
        return LibraryBuild(name=name, build_file=build, module_file=module_file)

    found = sorted(set(archives))
    if not found:
        build = render(HEADER_ONLY_LIBRARY_BUILD, name=name, header_glob=HEADER_GLOB)
        return LibraryBuild(name=name, build_file=build, module_file=module_file)

    main = select_main_archive(pname or name, found)
    # The main archive links first; the rest follow in name order.
    ordered = [main, *(archive for archive in found if archive != main)]
    deps = "".join(f"{starlark_string(':' + import_name(archive))}, " for archive in ordered)
    parts = [
        render(STATIC_LIBRARY_BUILD, name=name, header_glob=HEADER_GLOB, deps=deps),
    ]
    for archive in ordered:
        parts.append(render(CC_IMPORT, name=import_name(archive), archive=archive))
    return LibraryBuild(
        name=name,
        build_file="".join(parts),
        module_file=module_file,
        main_archive=main,
        archives=tuple(ordered),
    )
