"""Git coordinates and a subprocess backed repository resolver."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from .errors import RemoteResolutionError
from .naming import split_qualified

__all__ = [
    "GIT_SERVICES",
    "GitResolver",
    "GitService",
    "RepositoryResolver",
    "auto_git_url",
    "match_service",
]


LOGGER = logging.getLogger(__name__)

_FULL_SHA = re.compile(r"^[0-9a-f]{40}$")


@dataclass(frozen=True, slots=True)
class GitService:
    """A hosting service recognised from a reverse-domain qualifier."""

    label: str
    pattern: re.Pattern[str]
    url_format: str

    def match(self, qualifier: str) -> str | None:
        """Return the organization captured from ``qualifier``, if any."""

        found = self.pattern.fullmatch(qualifier)
        if found is None:
            return None
        return found.group(1)

    def url(self, organization: str, repository: str) -> str:
        return self.url_format.format(org=organization, repo=repository)


GIT_SERVICES: tuple[GitService, ...] = (
    GitService("github", re.compile(r"(?:com|io)\.github\.([^.]+)"), "https://github.com/{org}/{repo}.git"),
    GitService("gitlab", re.compile(r"(?:com|io)\.gitlab\.([^.]+)"), "https://gitlab.com/{org}/{repo}.git"),
    GitService(
        "bitbucket",
        re.compile(r"(?:org|io)\.bitbucket\.([^.]+)"),
        "https://bitbucket.org/{org}/{repo}.git",
    ),
    GitService(
        "beanstalk",
        re.compile(r"(?:com|io)\.beanstalkapp\.([^.]+)"),
        "https://{org}.git.beanstalkapp.com/{repo}.git",
    ),
    GitService("sourcehut", re.compile(r"ht\.sr\.([^.]+)"), "https://git.sr.ht/~{org}/{repo}"),
)


def match_service(qualifier: str) -> tuple[GitService, str] | None:
    """Return the first service whose pattern matches ``qualifier``."""

    for service in GIT_SERVICES:
        organization = service.match(qualifier)
        if organization is not None:
            return service, organization
    return None


def auto_git_url(lib: str) -> str | None:
    """Derive a clone URL from a ``qualifier/name`` coordinate.

    ``io.github.acme/widgets`` maps to ``https://github.com/acme/widgets.git``.
    Coordinates without a qualifier, or whose qualifier does not follow one of
    the :data:`GIT_SERVICES` conventions, yield ``None``.
    """

    if "/" not in lib:
        return None
    qualifier, name = split_qualified(lib)
    matched = match_service(qualifier)
    if matched is None:
        return None
    service, organization = matched
    return service.url(organization, name)


def _ref_candidates(tag: str | None) -> tuple[str, ...]:
    if not tag or tag == "HEAD":
        return ("HEAD",)
    # annotated tags list the peeled commit as "<ref>^{}"
    return (f"refs/tags/{tag}^{{}}", f"refs/tags/{tag}", f"refs/heads/{tag}", tag)


@runtime_checkable
class RepositoryResolver(Protocol):
    """Resolve symbolic repository names to local checkouts."""

    def resolve_url(self, symbolic_name: str) -> str | None:
        """Return the clone URL for ``symbolic_name`` or ``None``."""

    def resolve_ref(self, url: str, tag: str | None) -> str | None:
        """Return the commit id ``tag`` (or the default branch) points at."""

    def procure(self, url: str, symbolic_name: str, sha: str) -> Path:
        """Return a local checkout of ``url`` at ``sha``."""


class GitResolver:
    """Resolve and check out template repositories with the ``git`` binary.

    Checkouts are cached beneath ``cache_dir`` as
    ``libs/<qualifier>/<name>/<sha>`` and reused on later runs.
    """

    def __init__(self, cache_dir: Path | str, *, git: str = "git", timeout: float = 120.0) -> None:
        self.cache_dir = Path(cache_dir).expanduser()
        self._git = git
        self._timeout = timeout

    def _run(self, args: Sequence[str], *, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
        argv = [self._git, *args]
        LOGGER.debug("running %s", " ".join(argv))
        try:
            return subprocess.run(
                argv,
                cwd=str(cwd) if cwd is not None else None,
                capture_output=True,
                text=True,
                check=False,
                timeout=self._timeout,
            )
        except FileNotFoundError as exc:
            raise RemoteResolutionError(f"git executable not found: {self._git!r}") from exc
        except subprocess.TimeoutExpired as exc:
            raise RemoteResolutionError(f"git {args[0]} timed out after {self._timeout}s") from exc

    def resolve_url(self, symbolic_name: str) -> str | None:
        return auto_git_url(symbolic_name)

    def resolve_ref(self, url: str, tag: str | None) -> str | None:
        if tag and _FULL_SHA.match(tag):
            return tag

        ref = tag or "HEAD"
        result = self._run(["ls-remote", url, ref])
        if result.returncode != 0:
            raise RemoteResolutionError(
                f"git ls-remote {url} {ref} failed: {result.stderr.strip() or result.returncode}"
            )

        refs: dict[str, str] = {}
        for line in result.stdout.splitlines():
            sha, _, name = line.partition("\t")
            if sha and name:
                refs[name.strip()] = sha.strip()

        # ls-remote matches on the trailing path, so "v1" also lists "refs/tags/a/v1"
        for candidate in _ref_candidates(tag):
            if candidate in refs:
                return refs[candidate]
        return None

    def procure(self, url: str, symbolic_name: str, sha: str) -> Path:
        qualifier, name = split_qualified(symbolic_name)
        checkout = self.cache_dir / "libs" / qualifier / name / sha
        if (checkout / ".git").exists():
            LOGGER.debug("reusing checkout %s", checkout)
            return checkout

        checkout.parent.mkdir(parents=True, exist_ok=True)
        LOGGER.info("cloning %s at %s", url, sha[:12])
        try:
            clone = self._run(["clone", "--quiet", "--no-checkout", url, str(checkout)])
            if clone.returncode != 0:
                raise RemoteResolutionError(f"git clone {url} failed: {clone.stderr.strip()}")
            checkout_result = self._run(["checkout", "--quiet", "--detach", sha], cwd=checkout)
            if checkout_result.returncode != 0:
                raise RemoteResolutionError(
                    f"git checkout {sha} failed in {checkout}: {checkout_result.stderr.strip()}"
                )
        except RemoteResolutionError:
            shutil.rmtree(checkout, ignore_errors=True)
            raise
        return checkout
