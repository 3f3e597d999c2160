"""Project identities derived from ``qualifier/name`` tokens."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Mapping

from .errors import InvalidIdentityError
from .git import auto_git_url, match_service
from .naming import split_qualified

__all__ = ["DEFAULT_GROUP_PREFIX", "DEFAULT_SCM_HOST", "ProjectIdentity", "resolve_identity"]


DEFAULT_GROUP_PREFIX = "net.clojars."
DEFAULT_SCM_HOST = "github.com"

_VALID_SEGMENT = re.compile(r'[^\s/\\:*?"<>|\x00-\x1f]+')
_SCM_PREFIX = re.compile(r"^(?:com|org)\.")


def _scm_host(url: str | None) -> str:
    if not url:
        return DEFAULT_SCM_HOST
    host = re.sub(r"^https://", "", url)
    return re.sub(r"/.*$", "", host)


@dataclass(frozen=True, slots=True)
class ProjectIdentity:
    """Identifiers describing the project being generated.

    Attributes
    ----------
    artifact_id:
        The name segment of the project token.
    group_id:
        A dotted group, either the qualifier itself or the qualifier prefixed
        with the default group prefix when it has no dot.
    main:
        The main name of the project, used as the default target directory.
    name:
        The canonical ``qualifier/name`` token.
    top:
        The leading namespace segment. For git-hosted qualifiers such as
        ``io.github.acme`` this is the organization (``acme``).
    scm_host, scm_user, scm_repo:
        Source-control coordinates guessed from the token.
    """

    artifact_id: str
    group_id: str
    main: str
    name: str
    top: str
    scm_host: str
    scm_user: str
    scm_repo: str

    @property
    def qualifier(self) -> str:
        return self.name.split("/", 1)[0]

    def context(self) -> Mapping[str, str]:
        """Return the identity as generation data."""

        return {
            "artifact/id": self.artifact_id,
            "group/id": self.group_id,
            "main": self.main,
            "name": self.name,
            "scm/domain": self.scm_host,
            "scm/user": self.scm_user,
            "scm/repo": self.scm_repo,
            "top": self.top,
        }


def resolve_identity(
    token: str,
    *,
    group_prefix: str = DEFAULT_GROUP_PREFIX,
    resolve_url: Callable[[str], str | None] = auto_git_url,
) -> ProjectIdentity:
    """Build a :class:`ProjectIdentity` from a raw project name token.

    ``token`` is either ``qualifier/name`` or a bare ``name``, in which case it
    is normalised to ``name/name``.
    """

    raw = str(token).strip() if token is not None else ""
    if not raw:
        raise InvalidIdentityError("project name must not be empty")

    qualifier, base_name = split_qualified(raw)
    for segment in (qualifier, base_name):
        if not _VALID_SEGMENT.fullmatch(segment):
            raise InvalidIdentityError(f"invalid project name {raw!r}", entry=segment or "<empty>")

    qualified = f"{qualifier}/{base_name}"
    matched = match_service(qualifier)
    top = matched[1] if matched is not None else qualifier

    return ProjectIdentity(
        artifact_id=base_name,
        group_id=qualifier if "." in qualifier else f"{group_prefix}{qualifier}",
        main=base_name,
        name=qualified,
        top=top,
        scm_host=_scm_host(resolve_url(qualified)),
        scm_user=_SCM_PREFIX.sub("", top),
        scm_repo=base_name,
    )
