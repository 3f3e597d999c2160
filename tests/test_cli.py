from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from stencil.cli import _parse_key_value_pairs, main


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STENCIL_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.delenv("STENCIL_TEMPLATE_PATH", raising=False)
    monkeypatch.chdir(tmp_path)


def test_parse_key_value_pairs():
    context = _parse_key_value_pairs(["license=MIT", "version=1.0=beta"])
    assert context == {"license": "MIT", "version": "1.0=beta"}

    with pytest.raises(argparse.ArgumentTypeError):
        _parse_key_value_pairs(["invalid"])
    with pytest.raises(argparse.ArgumentTypeError):
        _parse_key_value_pairs(["=value"])


def test_cli_create_from_bundled_template(tmp_path: Path, capsys):
    project_dir = tmp_path / "output"
    exit_code = main(["create", "lib", "acme/cool-lib", "--target-dir", str(project_dir), "-c", "description=Tools"])

    assert exit_code == 0
    assert (project_dir / "src" / "cool_lib" / "__init__.py").exists()
    assert "Tools" in (project_dir / "README.md").read_text(encoding="utf-8")
    assert "Project created at" in capsys.readouterr().out


def test_cli_default_target_is_main_name(tmp_path: Path):
    assert main(["create", "lib", "acme/widget"]) == 0
    assert (tmp_path / "widget" / "pyproject.toml").exists()


def test_cli_search_root(tmp_path: Path, write_tree):
    write_tree(
        tmp_path / "mine",
        {"acme/tpl/template.yaml": "", "acme/tpl/root/{{main}}.txt": "{{flavor}}"},
    )
    exit_code = main(["-v", "create", "acme/tpl", "demo", "-s", str(tmp_path / "mine"), "-c", "flavor=mint"])

    assert exit_code == 0
    assert (tmp_path / "demo" / "demo.txt").read_text(encoding="utf-8") == "mint"


def test_cli_reports_errors(capsys):
    exit_code = main(["create", "acme/absent", "demo"])
    assert exit_code == 1
    assert "could not find acme/absent/template.yaml" in capsys.readouterr().err


def test_cli_rejects_bad_context(capsys):
    with pytest.raises(SystemExit):
        main(["create", "lib", "demo", "-c", "oops"])


def test_cli_reports_write_failures(tmp_path: Path, capsys):
    blocker = tmp_path / "taken"
    blocker.write_text("", encoding="utf-8")

    assert main(["create", "lib", "acme/cool-lib", "--target-dir", str(blocker)]) == 1
    assert capsys.readouterr().err.startswith("error: could not copy")
