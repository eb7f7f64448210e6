"""Write planned repositories to disk.

Each repository is assembled in a temporary sibling directory. The previous
repository is renamed aside, the new one renamed into place, and only then is
the old copy deleted; if the swap fails the previous repository is restored.
"""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Mapping
from pathlib import Path

from nixcc.models import RepositorySpec
from nixcc.observability import StructuredLogger
from nixcc.repository import RepositoryPlan


def replace_directory(
    destination: Path,
    *,
    files: Mapping[str, str],
    links: Mapping[str, Path],
) -> Path:
    destination.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=f".{destination.name}-", dir=str(destination.parent)))
    try:
        for relative, content in sorted(files.items()):
            path = staging / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        for relative, target in sorted(links.items()):
            path = staging / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.symlink_to(target)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    previous: Path | None = None
    if destination.is_symlink() or destination.exists():
        previous = destination.with_name(f"{staging.name}.old")
        destination.rename(previous)
    try:
        staging.rename(destination)
    except BaseException:
        if previous is not None:
            previous.rename(destination)
        shutil.rmtree(staging, ignore_errors=True)
        raise
    if previous is not None:
        remove_path(previous)
    return destination


def write_repository(output_root: Path, repository: RepositorySpec) -> Path:
    return replace_directory(
        output_root / repository.name,
        files=repository.files,
        links=repository.links,
    )


def materialize(
    plan: RepositoryPlan,
    output_root: str | Path,
    *,
    logger: StructuredLogger | None = None,
) -> dict[str, Path]:
    root = Path(output_root)
    root.mkdir(parents=True, exist_ok=True)
    written: dict[str, Path] = {}
    for name, repository in sorted(plan.repositories.items()):
        written[name] = write_repository(root, repository)
        if logger is not None:
            logger.log(
                operation="materialize",
                message="Repository written.",
                extra={
                    "repository": name,
                    "kind": repository.kind,
                    "files": sorted(repository.files),
                    "links": sorted(repository.links),
                },
            )
    return written


def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree; a missing path is a no-op."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)
