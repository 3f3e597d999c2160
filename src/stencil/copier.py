"""Directory copy primitives with optional token substitution."""

from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Mapping

from .substitution import substitute

__all__ = ["BINARY_EXTENSIONS", "DEFAULT_IGNORES", "DirectoryCopier"]


LOGGER = logging.getLogger(__name__)

DEFAULT_IGNORES: tuple[str, ...] = (r".*~$", r"^#.*#$", r"^\.#.*", r"^\.DS_Store$")
BINARY_EXTENSIONS: frozenset[str] = frozenset({"jpg", "jpeg", "png", "gif", "bmp", "ico", "webp"})


@dataclass(slots=True)
class DirectoryCopier:
    """Copy template trees into a project directory.

    When a replacement mapping is given, tokens are substituted in every
    relative path and in the contents of UTF-8 text files. Files with one of
    :data:`BINARY_EXTENSIONS`, and files that do not decode as UTF-8, keep
    their bytes.
    """

    ignores: Iterable[str] = DEFAULT_IGNORES
    binary_extensions: frozenset[str] = BINARY_EXTENSIONS
    _ignore_patterns: list[re.Pattern[str]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._ignore_patterns = [re.compile(pattern) for pattern in self.ignores]

    def _ignored(self, name: str) -> bool:
        return any(pattern.search(name) for pattern in self._ignore_patterns)

    def _walk(self, source: Path) -> Iterator[Path]:
        for path in sorted(source.rglob("*")):
            if path.is_file() and not any(self._ignored(part) for part in path.relative_to(source).parts):
                yield path

    def copy_dir(
        self,
        target_dir: str | Path,
        src_dirs: Iterable[str | Path],
        replace: Mapping[str, str] | None = None,
    ) -> list[Path]:
        """Copy every file under ``src_dirs`` into ``target_dir``.

        Returns the destination paths written, in copy order.
        """

        target_dir = Path(target_dir)
        written: list[Path] = []
        for src_dir in src_dirs:
            source = Path(src_dir)
            if not source.is_dir():
                raise FileNotFoundError(source)

            for path in self._walk(source):
                relative = path.relative_to(source).as_posix()
                if replace:
                    relative = substitute(relative, replace)
                destination = target_dir / relative
                destination.parent.mkdir(parents=True, exist_ok=True)

                if replace and not self._is_binary(path):
                    self._copy_substituted(path, destination, replace)
                else:
                    shutil.copy2(path, destination)
                written.append(destination)
        LOGGER.debug("copied %d file(s) into %s", len(written), target_dir)
        return written

    def copy_file(self, src: str | Path, target: str | Path) -> Path:
        """Copy a single file, creating parent directories as needed."""

        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, target)
        return target

    def delete(self, path: str | Path) -> None:
        """Remove ``path`` whether it is a file or a directory tree."""

        path = Path(path)
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)

    def _is_binary(self, path: Path) -> bool:
        return path.suffix.lstrip(".").lower() in self.binary_extensions

    @staticmethod
    def _copy_substituted(source: Path, destination: Path, replace: Mapping[str, str]) -> None:
        raw = source.read_bytes()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            shutil.copy2(source, destination)
            return
        destination.write_bytes(substitute(text, replace).encode("utf-8"))
        shutil.copymode(source, destination)
