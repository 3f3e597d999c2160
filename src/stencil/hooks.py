"""User supplied hooks run while a template is applied.

Templates name their hooks in ``template.yaml``::

    data_fn: licenses
    template_fn: my_templates.hooks:template_fn
    post_process_fn: my_templates.hooks.run_tests

A reference is looked up, in order, among hooks registered with
:meth:`HookRegistry.register`, among the ``stencil.hooks`` entry points of the
installed distributions, and finally as an importable ``module:attribute``
(``module.attribute`` and ``module/attribute`` are accepted too).
"""

from __future__ import annotations

import importlib
import logging
from importlib.metadata import entry_points
from typing import Any, Callable, Mapping, MutableMapping, Protocol, TypeVar

from pydantic import ValidationError

from .descriptor import TemplateDescriptor
from .errors import HookError

__all__ = [
    "DataFunction",
    "ENTRY_POINT_GROUP",
    "HookRegistry",
    "PostProcessFunction",
    "TemplateFunction",
    "apply_template_fns",
    "default_registry",
    "register",
    "run_post_process",
]


LOGGER = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "stencil.hooks"

F = TypeVar("F", bound=Callable[..., Any])


class DataFunction(Protocol):
    def __call__(self, context: Mapping[str, Any]) -> Mapping[str, Any] | None: ...


class TemplateFunction(Protocol):
    def __call__(
        self, descriptor: TemplateDescriptor, context: Mapping[str, Any]
    ) -> TemplateDescriptor | Mapping[str, Any]: ...


class PostProcessFunction(Protocol):
    def __call__(self, context: Mapping[str, Any], descriptor: TemplateDescriptor) -> None: ...


class HookRegistry:
    """Map stable hook names to callables."""

    def __init__(self, *, group: str = ENTRY_POINT_GROUP) -> None:
        self._hooks: MutableMapping[str, Callable[..., Any]] = {}
        self._group = group

    def __contains__(self, name: object) -> bool:
        return name in self._hooks

    def register(self, name: str, func: F | None = None) -> Any:
        """Register ``func`` under ``name``; usable as a decorator."""

        def decorator(target: F) -> F:
            self._hooks[name] = target
            return target

        if func is not None:
            return decorator(func)
        return decorator

    def unregister(self, name: str) -> None:
        self._hooks.pop(name, None)

    def resolve(self, reference: str) -> Callable[..., Any]:
        """Return the callable ``reference`` points at."""

        if reference in self._hooks:
            return self._hooks[reference]

        for candidate in entry_points(group=self._group, name=reference):
            try:
                loaded = candidate.load()
            except Exception as exc:
                raise HookError(f"cannot load entry point {reference!r}: {exc}", entry=reference) from exc
            return _ensure_callable(loaded, reference)

        return _ensure_callable(_import_reference(reference), reference)


def _import_reference(reference: str) -> Any:
    if ":" in reference:
        module_name, _, attribute = reference.partition(":")
    elif "/" in reference:
        module_name, _, attribute = reference.partition("/")
    else:
        module_name, _, attribute = reference.rpartition(".")
    if not module_name or not attribute:
        raise HookError(f"unknown hook {reference!r}", entry=reference)

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise HookError(f"cannot import {module_name!r} for hook {reference!r}: {exc}", entry=reference) from exc

    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise HookError(f"{module_name!r} has no attribute {attribute!r}", entry=reference) from exc
    return target


def _ensure_callable(value: Any, reference: str) -> Callable[..., Any]:
    if not callable(value):
        raise HookError(f"hook {reference!r} is not callable", entry=reference)
    return value


default_registry = HookRegistry()
register = default_registry.register


def _invoke(kind: str, reference: str, registry: HookRegistry, *args: Any) -> Any:
    func = registry.resolve(reference)
    LOGGER.debug("calling %s %s", kind, reference)
    try:
        return func(*args)
    except HookError:
        raise
    except Exception as exc:
        raise HookError(f"{kind} {reference!r} failed: {exc}", entry=reference) from exc


def apply_template_fns(
    template_dir: str,
    data: Mapping[str, Any],
    descriptor: TemplateDescriptor,
    registry: HookRegistry | None = None,
) -> tuple[dict[str, Any], TemplateDescriptor]:
    """Run ``data_fn`` and ``template_fn`` and return the final data and descriptor.

    ``template-dir`` is added to the context before any hook runs. The
    ``data_fn`` result is merged into the context; the ``template_fn`` result
    replaces the descriptor. Template defaults are merged underneath the
    context so the caller's values always win.
    """

    registry = registry or default_registry
    context: dict[str, Any] = {**data, "template-dir": str(template_dir)}

    if descriptor.data_fn:
        extra = _invoke("data_fn", descriptor.data_fn, registry, dict(context))
        if extra is not None:
            if not isinstance(extra, Mapping):
                raise HookError(
                    f"data_fn {descriptor.data_fn!r} must return a mapping, got {type(extra).__name__}",
                    entry=descriptor.data_fn,
                )
            context.update(extra)

    working = descriptor
    if descriptor.template_fn:
        replacement = _invoke("template_fn", descriptor.template_fn, registry, descriptor, dict(context))
        if isinstance(replacement, TemplateDescriptor):
            working = replacement
        elif isinstance(replacement, Mapping):
            try:
                working = TemplateDescriptor.model_validate(dict(replacement))
            except ValidationError as exc:
                raise HookError(
                    f"template_fn {descriptor.template_fn!r} returned an invalid descriptor: {exc}",
                    entry=descriptor.template_fn,
                ) from exc
        else:
            raise HookError(
                f"template_fn {descriptor.template_fn!r} must return a descriptor",
                entry=descriptor.template_fn,
            )

    template_name = context.get("template")
    description = f"FIXME: my new {template_name} project." if template_name else "FIXME: my new project."
    final = {"description": description, **working.defaults(), **context}
    return final, working


def run_post_process(
    data: Mapping[str, Any],
    descriptor: TemplateDescriptor,
    registry: HookRegistry | None = None,
) -> HookError | None:
    """Call ``post_process_fn`` if the descriptor names one.

    Failures are logged and returned rather than raised: the project has
    already been written at this point.
    """

    if not descriptor.post_process_fn:
        return None

    registry = registry or default_registry
    try:
        _invoke("post_process_fn", descriptor.post_process_fn, registry, dict(data), descriptor)
    except HookError as exc:
        LOGGER.warning("post-processing failed: %s", exc)
        return exc
    return None
