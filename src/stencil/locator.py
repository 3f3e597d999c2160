"""Locate templates on local search roots, package resources and git."""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from .descriptor import DESCRIPTOR_FILENAME
from .errors import OptionsError, RemoteResolutionError, TemplateNotFoundError
from .git import RepositoryResolver
from .naming import to_file

__all__ = [
    "DEFAULT_TEMPLATE_NAMESPACE",
    "RemoteCheckout",
    "ResourceLocator",
    "TemplateName",
    "find_root",
    "locate_template",
    "resolve_remote",
]


LOGGER = logging.getLogger(__name__)

DEFAULT_TEMPLATE_NAMESPACE = "stencil.templates"

# repo%deps-root%template#tag, every part after the repo optional
_TEMPLATE_NAME = re.compile(r"^(.+?)(%(.+?))?(%(.+?))?(#(.+?))?$")


@dataclass(frozen=True, slots=True)
class TemplateName:
    """A parsed template argument.

    Attributes
    ----------
    repo:
        The leading coordinate; when it follows a git hosting convention the
        repository is fetched.
    deps_root:
        Subdirectory of the repository that holds the templates.
    template:
        The qualified template symbol searched for on the template roots.
    tag:
        Git tag or sha to resolve instead of the default branch.
    """

    repo: str
    deps_root: str | None
    template: str
    tag: str | None

    @classmethod
    def parse(cls, text: str, *, namespace: str = DEFAULT_TEMPLATE_NAMESPACE) -> "TemplateName":
        match = _TEMPLATE_NAME.match(str(text).strip())
        if match is None:
            raise OptionsError("template name must not be empty")

        repo, root, path, tag = match.group(1), match.group(3), match.group(5), match.group(7)
        template = path or root or repo
        if "/" not in template:
            template = f"{namespace}/{template}"
        return cls(
            repo=repo,
            deps_root=root if path else None,
            template=template,
            tag=tag,
        )


class ResourceLocator:
    """Find relative paths on the importable roots of the interpreter.

    The directory holding the installed ``stencil`` package comes first,
    followed by every directory entry of :data:`sys.path`.
    """

    def __init__(self, roots: Iterable[str | Path] | None = None) -> None:
        self._roots = None if roots is None else [Path(root) for root in roots]

    @property
    def roots(self) -> list[Path]:
        if self._roots is not None:
            return list(self._roots)
        roots = [Path(__file__).resolve().parent.parent]
        roots.extend(Path(entry) for entry in sys.path if entry)
        return roots

    def find(self, relative_path: str) -> Path | None:
        """Return the first existing ``<root>/<relative_path>``."""

        for root in self.roots:
            candidate = root / relative_path
            if candidate.is_file():
                return candidate.resolve()
        return None


def find_root(
    search_roots: Sequence[str | Path],
    template: str,
    *,
    resources: ResourceLocator | None = None,
) -> tuple[Path, Path] | None:
    """Return ``(template_dir, descriptor_path)`` for ``template``.

    Package resources are searched before ``search_roots``; the first
    directory containing ``<template path>/template.yaml`` wins.
    """

    template_path = to_file(template)
    descriptor = f"{template_path}/{DESCRIPTOR_FILENAME}"

    resources = resources or ResourceLocator()
    found = resources.find(descriptor)
    if found is not None:
        return found.parent, found

    for root in search_roots:
        candidate = Path(root) / descriptor
        if candidate.is_file():
            candidate = candidate.resolve()
            return candidate.parent, candidate
    return None


def locate_template(
    search_roots: Sequence[str | Path],
    template: str,
    *,
    resources: ResourceLocator | None = None,
) -> tuple[Path, Path]:
    """Like :func:`find_root` but raise when the template is missing."""

    found = find_root(search_roots, template, resources=resources)
    if found is None:
        roots = ", ".join(str(root) for root in search_roots) or "<none>"
        raise TemplateNotFoundError(
            f"could not find {to_file(template)}/{DESCRIPTOR_FILENAME} on the resource path or in: {roots}",
            entry=template,
        )
    LOGGER.debug("template %s found at %s", template, found[0])
    return found


@dataclass(frozen=True, slots=True)
class RemoteCheckout:
    """A template repository checked out at a specific commit."""

    url: str
    sha: str
    path: Path

    def search_roots(self, deps_root: str | None = None) -> list[Path]:
        """Directories of the checkout that may hold templates."""

        base = self.path / deps_root if deps_root else self.path
        return [base, base / "resources"]


def resolve_remote(repo: str, tag: str | None, resolver: RepositoryResolver) -> RemoteCheckout | None:
    """Check out ``repo`` when it is a git coordinate.

    Returns ``None`` when ``repo`` does not look like a git repository. A
    ``tag`` the repository does not have falls back to its ``HEAD``.
    """

    url = resolver.resolve_url(repo)
    if url is None:
        return None

    LOGGER.info("resolving %s as a git dependency%s", repo, f" at {tag}" if tag else "")
    sha = resolver.resolve_ref(url, tag)
    if sha is None and tag:
        LOGGER.warning("%s has no ref %s, using HEAD", repo, tag)
        sha = resolver.resolve_ref(url, None)
    if sha is None:
        raise RemoteResolutionError(f"could not resolve {tag or 'HEAD'} in {url}", entry=repo)
    try:
        path = Path(resolver.procure(url, repo, sha))
    except OSError as exc:
        raise RemoteResolutionError(f"could not check out {url} at {sha}: {exc}", entry=repo) from exc
    return RemoteCheckout(url=url, sha=sha, path=path)
