"""Generate new projects from reusable templates.

A template is a directory holding a ``template.yaml`` descriptor next to the
files to copy. The package resolves the template (locally, from installed
packages or from a git repository), derives substitution data from the
project name, and copies the template into the target directory, replacing
``{{token}}`` markers in paths and file contents along the way.
"""

from __future__ import annotations

from .config import GeneratorSettings, preprocess_options
from .descriptor import TemplateDescriptor, TransformEntry, load_descriptor
from .errors import (
    DescriptorError,
    HookError,
    InvalidIdentityError,
    OptionsError,
    RemoteResolutionError,
    StencilError,
    TemplateNotFoundError,
    TransformError,
)
from .hooks import HookRegistry, register
from .identity import ProjectIdentity, resolve_identity
from .naming import to_file, to_ns
from .scaffold import GenerationResult, ProjectScaffolder, create
from .substitution import adjust_delimiters, build_substitutions

__all__ = [
    "DescriptorError",
    "GenerationResult",
    "GeneratorSettings",
    "HookError",
    "HookRegistry",
    "InvalidIdentityError",
    "OptionsError",
    "ProjectIdentity",
    "ProjectScaffolder",
    "RemoteResolutionError",
    "StencilError",
    "TemplateDescriptor",
    "TemplateNotFoundError",
    "TransformEntry",
    "TransformError",
    "adjust_delimiters",
    "build_substitutions",
    "create",
    "load_descriptor",
    "preprocess_options",
    "register",
    "resolve_identity",
    "to_file",
    "to_ns",
]

__version__ = "0.1.0"
