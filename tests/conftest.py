from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from stencil.git import auto_git_url  # noqa: E402
from stencil.hooks import HookRegistry  # noqa: E402
from stencil.locator import ResourceLocator  # noqa: E402


class FakeResolver:
    """Repository resolver serving pre-built checkouts from disk."""

    def __init__(self, checkouts: dict[str, Path] | None = None, refs: dict[str | None, str] | None = None) -> None:
        self.checkouts = dict(checkouts or {})
        self.refs = dict(refs or {None: "0" * 40})
        self.calls: list[tuple[str, ...]] = []

    def resolve_url(self, symbolic_name: str) -> str | None:
        return auto_git_url(symbolic_name)

    def resolve_ref(self, url: str, tag: str | None) -> str | None:
        self.calls.append(("resolve_ref", url, str(tag)))
        return self.refs.get(tag)

    def procure(self, url: str, symbolic_name: str, sha: str) -> Path:
        self.calls.append(("procure", url, symbolic_name, sha))
        return self.checkouts[symbolic_name]


def write_files(base: Path, files: dict[str, str | bytes]) -> None:
    """Create ``files`` (relative path -> content) beneath ``base``."""

    for relative, content in files.items():
        path = base / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")


@pytest.fixture()
def fake_resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture()
def registry() -> HookRegistry:
    return HookRegistry(group="stencil.tests.hooks")


@pytest.fixture()
def no_resources() -> ResourceLocator:
    return ResourceLocator([])


@pytest.fixture()
def make_template(tmp_path: Path):
    """Build a template directory ``<tmp>/templates/<qualifier path>/<name>``."""

    def _make(template: str, descriptor: str, files: dict[str, str | bytes] | None = None) -> Path:
        template_dir = tmp_path / "templates" / template.replace(".", "/").replace("-", "_")
        template_dir.mkdir(parents=True, exist_ok=True)
        (template_dir / "template.yaml").write_text(descriptor, encoding="utf-8")
        write_files(template_dir, files or {})
        return template_dir

    return _make


@pytest.fixture()
def write_tree():
    return write_files
