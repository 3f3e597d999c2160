"""Execution of template transform entries.

Each :class:`~stencil.descriptor.TransformEntry` copies one directory of the
template into the project. Entries with a rename map go through a staging
directory: the tree is first copied verbatim, renamed files are swapped in at
their substituted paths, and only then is the staged tree copied into the
project with substitutions applied. Renaming therefore never touches files
that are not listed, and rename targets can use substitution tokens.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Mapping

from .copier import DirectoryCopier
from .descriptor import TemplateDescriptor, TransformEntry
from .errors import TransformError
from .substitution import adjust_delimiters, substitute

__all__ = ["copy_template_dir", "effective_entries", "run_transforms"]


LOGGER = logging.getLogger(__name__)


def _relative_target(entry: TransformEntry, substitutions: Mapping[str, str]) -> str:
    if not entry.target:
        return ""
    return substitute(entry.target, substitutions).strip("/")


def _content_substitutions(entry: TransformEntry, substitutions: Mapping[str, str]) -> Mapping[str, str] | None:
    if entry.raw:
        return None
    if entry.delims and all(entry.delims):
        open_delim, close_delim = entry.delims
        return adjust_delimiters(substitutions, open_delim, close_delim)
    return substitutions


def copy_template_dir(
    template_dir: str | Path,
    target_dir: str | Path,
    entry: TransformEntry,
    substitutions: Mapping[str, str],
    *,
    copier: DirectoryCopier | None = None,
) -> list[Path]:
    """Copy the files described by ``entry`` into ``target_dir``.

    Returns the paths written in the project. An entry flagged ``only``
    without any files to rename copies nothing. File system errors are
    raised as :class:`TransformError` naming the entry.
    """

    copier = copier or DirectoryCopier()
    template_dir = Path(template_dir)
    target_dir = Path(target_dir)
    source = template_dir / entry.src
    if not source.is_dir():
        raise TransformError(f"template directory {source} does not exist", entry=entry.label())

    try:
        return _copy_entry(source, target_dir, entry, substitutions, copier)
    except OSError as exc:
        raise TransformError(f"could not copy {source}: {exc}", entry=entry.label()) from exc


def _copy_entry(
    source: Path,
    target_dir: Path,
    entry: TransformEntry,
    substitutions: Mapping[str, str],
    copier: DirectoryCopier,
) -> list[Path]:
    relative_target = _relative_target(entry, substitutions)
    replace = _content_substitutions(entry, substitutions)

    if not entry.files:
        if entry.only:
            LOGGER.warning("transform %s is 'only' with no files; nothing copied", entry.label())
            return []
        destination = target_dir / relative_target if relative_target else target_dir
        LOGGER.debug("copying %s to %s", source, destination)
        return copier.copy_dir(destination, [source], replace)

    with tempfile.TemporaryDirectory(prefix="stencil-") as staging:
        staging_dir = Path(staging)
        staged_target = staging_dir / relative_target if relative_target else staging_dir

        if not entry.only:
            copier.copy_dir(staged_target, [source])

        for from_path, to_pattern in entry.files.items():
            original = source / from_path
            if not original.is_file():
                raise TransformError(f"file to rename {original} does not exist", entry=entry.label())
            renamed = substitute(to_pattern, substitutions)
            LOGGER.debug("renaming %s to %s", from_path, renamed)
            copier.delete(staged_target / from_path)
            copier.copy_file(original, staged_target / renamed)

        return copier.copy_dir(target_dir, [staging_dir], replace)


def effective_entries(template_dir: str | Path, descriptor: TemplateDescriptor) -> list[TransformEntry]:
    """Return the entries executed for ``descriptor`` in order.

    The ``root`` directory is copied first, followed by the declared
    transforms. A defaulted ``root`` that does not exist is skipped when the
    template declares transforms of its own.
    """

    entries = list(descriptor.transform)
    root_present = (Path(template_dir) / descriptor.root).is_dir()
    if root_present or descriptor.root_explicit or not entries:
        entries.insert(0, TransformEntry(src=descriptor.root))
    return entries


def run_transforms(
    template_dir: str | Path,
    target_dir: str | Path,
    descriptor: TemplateDescriptor,
    substitutions: Mapping[str, str],
    *,
    copier: DirectoryCopier | None = None,
) -> list[Path]:
    """Execute every transform entry of ``descriptor`` in descriptor order."""

    copier = copier or DirectoryCopier()
    written: list[Path] = []
    for entry in effective_entries(template_dir, descriptor):
        LOGGER.info("applying transform %s", entry.label())
        written.extend(copy_template_dir(template_dir, target_dir, entry, substitutions, copier=copier))
    return written
