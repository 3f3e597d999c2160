"""Configuration helpers shared by the project scaffolder and CLI."""

from __future__ import annotations

import getpass
import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Mapping

from .errors import OptionsError
from .git import GitResolver, RepositoryResolver
from .identity import DEFAULT_GROUP_PREFIX, ProjectIdentity, resolve_identity
from .locator import DEFAULT_TEMPLATE_NAMESPACE, RemoteCheckout, TemplateName, resolve_remote
from .naming import capitalize

__all__ = ["DEFAULT_VERSION", "GeneratorSettings", "PreparedOptions", "preprocess_options"]


DEFAULT_VERSION = "0.1.0"
DEFAULT_CACHE_DIR = Path("~/.cache/stencil")

_CONSUMED_OPTIONS = frozenset({"template", "name", "target-dir", "target_dir"})


@dataclass(slots=True)
class GeneratorSettings:
    """Settings that do not change between generations.

    Attributes
    ----------
    search_roots:
        Local directories searched for templates, in order, after package
        resources and any git checkout.
    cache_dir:
        Where git checkouts of remote templates are kept.
    template_namespace:
        Namespace given to unqualified template names, so ``lib`` means
        ``stencil.templates/lib``.
    group_prefix:
        Prefix turning a dot-less qualifier into a group id.
    version:
        Initial version written into generated projects.
    """

    search_roots: list[Path] = field(default_factory=lambda: [Path.cwd()])
    cache_dir: Path = field(default_factory=lambda: DEFAULT_CACHE_DIR.expanduser())
    template_namespace: str = DEFAULT_TEMPLATE_NAMESPACE
    group_prefix: str = DEFAULT_GROUP_PREFIX
    version: str = DEFAULT_VERSION

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "GeneratorSettings":
        """Build settings from ``STENCIL_*`` environment variables.

        ``STENCIL_TEMPLATE_PATH`` lists search roots separated by
        :data:`os.pathsep`; ``STENCIL_CACHE_DIR`` and ``STENCIL_GROUP_PREFIX``
        override the defaults.
        """

        environment: Mapping[str, str] = env if env is not None else os.environ
        settings = cls()

        template_path = environment.get("STENCIL_TEMPLATE_PATH", "")
        extra_roots = [Path(entry).expanduser() for entry in template_path.split(os.pathsep) if entry]
        if extra_roots:
            settings.search_roots = extra_roots + settings.search_roots

        cache_dir = environment.get("STENCIL_CACHE_DIR")
        if cache_dir:
            settings.cache_dir = Path(cache_dir).expanduser()

        group_prefix = environment.get("STENCIL_GROUP_PREFIX")
        if group_prefix:
            settings.group_prefix = group_prefix

        return settings


@dataclass(slots=True)
class PreparedOptions:
    """Outcome of :func:`preprocess_options`."""

    data: dict[str, Any]
    identity: ProjectIdentity
    template: TemplateName
    search_roots: list[Path]
    checkout: RemoteCheckout | None = None


def _username(env: Mapping[str, str]) -> str:
    for variable in ("USER", "USERNAME", "LOGNAME"):
        if env.get(variable):
            return env[variable]
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "developer"


def preprocess_options(
    options: Mapping[str, Any],
    settings: GeneratorSettings | None = None,
    *,
    resolver: RepositoryResolver | None = None,
    env: Mapping[str, str] | None = None,
    today: date | None = None,
) -> PreparedOptions:
    """Validate raw generation options and derive the base generation data.

    ``options`` must contain ``template`` and ``name``; ``target-dir`` is
    optional and defaults to the project's main name. Every other option is
    passed through as generation data, overriding derived values.
    """

    template_option = options.get("template")
    name_option = options.get("name")
    if not template_option or not name_option:
        raise OptionsError("both template and name are required")

    settings = settings or GeneratorSettings()
    environment: Mapping[str, str] = env if env is not None else os.environ
    today = today or date.today()

    identity = resolve_identity(str(name_option), group_prefix=settings.group_prefix)
    template = TemplateName.parse(str(template_option), namespace=settings.template_namespace)

    resolver = resolver or GitResolver(settings.cache_dir)
    checkout = resolve_remote(template.repo, template.tag, resolver)

    search_roots = list(settings.search_roots)
    git_dir: str | None = None
    if checkout is not None:
        checkout_roots = checkout.search_roots(template.deps_root)
        git_dir = str(checkout_roots[0])
        search_roots = checkout_roots + search_roots

    target_dir = options.get("target-dir") or options.get("target_dir") or identity.main
    username = _username(environment)

    data: dict[str, Any] = dict(identity.context())
    data.update(
        {
            "developer": capitalize(username),
            "git-dir": git_dir,
            "now/date": today.isoformat(),
            "now/year": str(today.year),
            "raw-name": str(name_option),
            "template": template.template,
            "target-dir": str(target_dir),
            "user": username,
            "version": settings.version,
        }
    )
    data.update({key: value for key, value in options.items() if key not in _CONSUMED_OPTIONS})

    return PreparedOptions(
        data=data,
        identity=identity,
        template=template,
        search_roots=search_roots,
        checkout=checkout,
    )
