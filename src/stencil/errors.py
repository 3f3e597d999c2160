"""Exception types raised while generating a project from a template."""

from __future__ import annotations


class StencilError(RuntimeError):
    """Base class for every failure surfaced by the generator.

    ``stage`` names the part of the pipeline that failed (``"identity"``,
    ``"locate"``, ``"transform"``, ...) and ``entry`` optionally identifies the
    transform entry or hook involved.
    """

    stage: str | None = None

    def __init__(self, message: str, *, stage: str | None = None, entry: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage
        self.entry = entry

    def __str__(self) -> str:
        message = super().__str__()
        if self.entry:
            return f"{message} [{self.stage or 'generate'}: {self.entry}]"
        return message


class OptionsError(StencilError):
    """Raised when required generation options are missing."""

    stage = "options"


class InvalidIdentityError(StencilError):
    """Raised when a project name token cannot be turned into an identity."""

    stage = "identity"


class TemplateNotFoundError(StencilError):
    """Raised when no ``template.yaml`` exists on any search root."""

    stage = "locate"


class RemoteResolutionError(StencilError):
    """Raised when a git coordinate cannot be resolved or checked out."""

    stage = "remote"


class DescriptorError(StencilError):
    """Raised when a template descriptor cannot be parsed or validated."""

    stage = "descriptor"


class TransformError(StencilError):
    """Raised when a transform entry references missing template files."""

    stage = "transform"


class HookError(StencilError):
    """Raised when a hook reference fails to resolve or the hook raises."""

    stage = "hook"


__all__ = [
    "DescriptorError",
    "HookError",
    "InvalidIdentityError",
    "OptionsError",
    "RemoteResolutionError",
    "StencilError",
    "TemplateNotFoundError",
    "TransformError",
]
