"""Project generation from templates."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Mapping

from .config import GeneratorSettings, preprocess_options
from .copier import DirectoryCopier
from .descriptor import TemplateDescriptor, load_descriptor
from .errors import HookError
from .git import RepositoryResolver
from .hooks import HookRegistry, apply_template_fns, default_registry, run_post_process
from .locator import ResourceLocator, locate_template
from .substitution import build_substitutions
from .transform import run_transforms

__all__ = ["GenerationResult", "ProjectScaffolder", "create"]


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class GenerationResult:
    """What a single :meth:`ProjectScaffolder.create` call produced."""

    target_dir: Path
    template_dir: Path
    data: dict[str, Any]
    descriptor: TemplateDescriptor
    written: list[Path] = field(default_factory=list)
    post_process_error: HookError | None = None

    @property
    def post_processed(self) -> bool:
        return self.descriptor.post_process_fn is not None and self.post_process_error is None


class ProjectScaffolder:
    """Create projects from templates.

    The collaborators (repository resolver, hook registry, directory copier
    and resource locator) can be swapped out, which is how the tests run
    without network access.
    """

    def __init__(
        self,
        settings: GeneratorSettings | None = None,
        *,
        resolver: RepositoryResolver | None = None,
        registry: HookRegistry | None = None,
        copier: DirectoryCopier | None = None,
        resources: ResourceLocator | None = None,
    ) -> None:
        self.settings = settings or GeneratorSettings.from_env()
        self.resolver = resolver
        self.registry = registry or default_registry
        self.copier = copier or DirectoryCopier()
        self.resources = resources or ResourceLocator()

    def create(
        self,
        options: Mapping[str, Any],
        *,
        env: Mapping[str, str] | None = None,
        today: date | None = None,
    ) -> GenerationResult:
        """Generate the project described by ``options``.

        ``options`` needs ``template`` and ``name``; ``target-dir`` defaults
        to the project's main name and every other key seeds the generation
        data. Files already written stay on disk if a later step fails.
        """

        prepared = preprocess_options(
            options,
            self.settings,
            resolver=self.resolver,
            env=env,
            today=today,
        )
        template_dir, descriptor_path = locate_template(
            prepared.search_roots,
            prepared.template.template,
            resources=self.resources,
        )
        descriptor = load_descriptor(descriptor_path)

        data, descriptor = apply_template_fns(str(template_dir), prepared.data, descriptor, self.registry)
        substitutions = build_substitutions(data)

        target_dir = Path(str(data["target-dir"])).expanduser().resolve()
        LOGGER.info("creating %s from %s in %s", prepared.identity.name, prepared.template.template, target_dir)
        written = run_transforms(template_dir, target_dir, descriptor, substitutions, copier=self.copier)

        post_process_error = run_post_process(data, descriptor, self.registry)
        return GenerationResult(
            target_dir=target_dir,
            template_dir=template_dir,
            data=data,
            descriptor=descriptor,
            written=written,
            post_process_error=post_process_error,
        )


def create(options: Mapping[str, Any] | None = None, **kwargs: Any) -> GenerationResult:
    """Generate a project with default settings.

    Keyword arguments use underscores and are translated to the hyphenated
    option names, so ``create(template="lib", name="acme/demo", target_dir="out")``
    works.
    """

    merged: dict[str, Any] = dict(options or {})
    merged.update({key.replace("_", "-"): value for key, value in kwargs.items()})
    return ProjectScaffolder().create(merged)
