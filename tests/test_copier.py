from __future__ import annotations

import os
from pathlib import Path

import pytest

from stencil.copier import DirectoryCopier

PNG_BYTES = b"\x89PNG\r\n\x1a\n{{name}}"


@pytest.fixture()
def copier() -> DirectoryCopier:
    return DirectoryCopier()


def test_copy_dir_substitutes_contents_and_paths(tmp_path: Path, copier: DirectoryCopier, write_tree):
    source = tmp_path / "source"
    write_tree(source, {"{{name}}/readme.txt": "Hello {{name}}", "plain.txt": "static"})

    written = copier.copy_dir(tmp_path / "out", [source], {"{{name}}": "demo"})

    assert (tmp_path / "out" / "demo" / "readme.txt").read_text(encoding="utf-8") == "Hello demo"
    assert (tmp_path / "out" / "plain.txt").read_text(encoding="utf-8") == "static"
    assert len(written) == 2


def test_copy_dir_without_replacements_is_verbatim(tmp_path: Path, copier: DirectoryCopier, write_tree):
    source = tmp_path / "source"
    write_tree(source, {"{{name}}.txt": "{{name}}"})

    copier.copy_dir(tmp_path / "out", [source])

    assert (tmp_path / "out" / "{{name}}.txt").read_text(encoding="utf-8") == "{{name}}"


def test_binary_extensions_keep_their_bytes(tmp_path: Path, copier: DirectoryCopier, write_tree):
    source = tmp_path / "source"
    write_tree(source, {"{{name}}.png": PNG_BYTES, "data.bin": b"\xff\xfe{{name}}"})

    copier.copy_dir(tmp_path / "out", [source], {"{{name}}": "demo"})

    assert (tmp_path / "out" / "demo.png").read_bytes() == PNG_BYTES
    assert (tmp_path / "out" / "data.bin").read_bytes() == b"\xff\xfe{{name}}"


def test_editor_junk_is_ignored(tmp_path: Path, copier: DirectoryCopier, write_tree):
    source = tmp_path / "source"
    write_tree(source, {"keep.txt": "x", "keep.txt~": "x", "#autosave#": "x", ".#lock": "x", ".DS_Store": "x"})

    copier.copy_dir(tmp_path / "out", [source])

    assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["keep.txt"]


def test_copy_preserves_executable_bit(tmp_path: Path, copier: DirectoryCopier, write_tree):
    source = tmp_path / "source"
    write_tree(source, {"run.sh": "echo {{name}}"})
    os.chmod(source / "run.sh", 0o755)

    copier.copy_dir(tmp_path / "out", [source], {"{{name}}": "demo"})

    assert os.access(tmp_path / "out" / "run.sh", os.X_OK)


def test_copy_dir_missing_source(tmp_path: Path, copier: DirectoryCopier):
    with pytest.raises(FileNotFoundError):
        copier.copy_dir(tmp_path / "out", [tmp_path / "missing"])


def test_copy_file_and_delete(tmp_path: Path, copier: DirectoryCopier, write_tree):
    write_tree(tmp_path, {"a.txt": "a"})
    target = copier.copy_file(tmp_path / "a.txt", tmp_path / "nested" / "dir" / "b.txt")
    assert target.read_text(encoding="utf-8") == "a"

    copier.delete(target)
    assert not target.exists()
    copier.delete(target)

    copier.delete(tmp_path / "nested")
    assert not (tmp_path / "nested").exists()
