"""Template descriptors: the ``template.yaml`` file shipped with a template."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Literal, Mapping, Optional, Tuple

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import DescriptorError

__all__ = [
    "DESCRIPTOR_FILENAME",
    "TemplateDescriptor",
    "TransformEntry",
    "load_descriptor",
]


DESCRIPTOR_FILENAME = "template.yaml"

Flag = Literal["raw", "only"]


def _entry_from_sequence(items: list[Any]) -> dict[str, Any]:
    if not items:
        raise ValueError("transform entry must name a source directory")

    parsed: dict[str, Any] = {"src": items[0]}
    if len(items) > 1:
        parsed["target"] = items[1]

    rest = list(items[2:])
    if rest and (rest[0] is None or isinstance(rest[0], Mapping)):
        parsed["files"] = rest.pop(0) or {}
    if rest and (rest[0] is None or isinstance(rest[0], (list, tuple))):
        delims = rest.pop(0)
        if delims:
            parsed["delims"] = delims
    if rest:
        parsed["opts"] = rest
    return parsed


class TransformEntry(BaseModel):
    """How one template subdirectory is copied into the project.

    The positional YAML form ``[src, target, files, delims, *flags]`` is
    accepted as well as the mapping form.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    src: str = Field(..., description="Directory relative to the template directory.")
    target: Optional[str] = Field(None, description="Target subdirectory; may contain substitution tokens.")
    files: Dict[str, str] = Field(
        default_factory=dict,
        description="Files to rename: source path -> target path pattern.",
    )
    delims: Optional[Tuple[str, str]] = Field(None, description="Alternate open/close token delimiters.")
    opts: FrozenSet[Flag] = Field(default_factory=frozenset, description="Copy flags: 'raw' and/or 'only'.")

    @model_validator(mode="before")
    @classmethod
    def _accept_sequence(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return _entry_from_sequence(list(value))
        return value

    @field_validator("opts", mode="before")
    @classmethod
    def _normalize_flags(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(str(flag).lstrip(":") for flag in value)

    @property
    def raw(self) -> bool:
        return "raw" in self.opts

    @property
    def only(self) -> bool:
        return "only" in self.opts

    def label(self) -> str:
        """Short human readable form used in errors and logs."""

        if self.target:
            return f"{self.src} -> {self.target}"
        return self.src


class TemplateDescriptor(BaseModel):
    """Parsed ``template.yaml``.

    Keys other than the ones declared here are kept and become default
    generation data, so a template can provide values for its own tokens.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    description: Optional[str] = Field(None, description="Human readable description of the template.")
    root: str = Field("root", description="Directory copied as a whole into the project.")
    transform: List[TransformEntry] = Field(default_factory=list, description="Additional transform entries.")
    data_fn: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("data_fn", "data-fn"),
        description="Hook returning extra generation data.",
    )
    template_fn: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("template_fn", "template-fn"),
        description="Hook returning a replacement descriptor.",
    )
    post_process_fn: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("post_process_fn", "post-process-fn"),
        description="Hook run after every file has been generated.",
    )

    @property
    def root_explicit(self) -> bool:
        """Whether ``root`` was set rather than defaulted."""

        return "root" in self.model_fields_set

    def defaults(self) -> dict[str, Any]:
        """Return the template-provided default generation data."""

        data: dict[str, Any] = dict(self.model_extra or {})
        if self.description is not None:
            data["description"] = self.description
        return data


def load_descriptor(path: str | Path) -> TemplateDescriptor:
    """Read and validate the descriptor stored at ``path``."""

    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    except OSError as exc:
        raise DescriptorError(f"cannot read {path}: {exc}", entry=str(path)) from exc
    except yaml.YAMLError as exc:
        raise DescriptorError(f"invalid YAML in {path}: {exc}", entry=str(path)) from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise DescriptorError(f"{path} must contain a mapping", entry=str(path))

    try:
        return TemplateDescriptor.model_validate(raw)
    except ValidationError as exc:
        raise DescriptorError(f"invalid template descriptor {path}: {exc}", entry=str(path)) from exc
