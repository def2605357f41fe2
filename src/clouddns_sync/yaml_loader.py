"""Load and validate desired-state YAML files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import jinja2
import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .models import ParseError, RawEntry


class RecordSpec(BaseModel):
    """Schema for a desired DNS record-set."""

    name: str
    type: str
    values: list[str] = Field(default_factory=list)
    value: str | None = None
    ttl: int | None = Field(default=None, ge=0)

    @field_validator("type")
    @classmethod
    def _uppercase_type(cls, value: str) -> str:
        """Normalise RR type to uppercase."""
        return value.upper()

    @model_validator(mode="after")
    def _merge_single_value(self) -> "RecordSpec":
        """Fold the ``value`` shorthand into ``values``."""
        if self.value is not None:
            self.values = [*self.values, self.value]
            self.value = None
        if not self.values:
            raise ValueError(f"record {self.name} {self.type} has no values")
        return self


class ZoneSpec(BaseModel):
    """Schema for the YAML document."""

    zone: str | None = None
    default_ttl: int | None = Field(default=None, ge=0)
    records: list[RecordSpec]


def _ensure_absolute(name: str) -> str:
    """Return an absolute DNS name."""
    stripped = name.strip()
    return stripped if stripped.endswith(".") else f"{stripped}."


def _render_yaml(path: Path, extra_context: dict[str, Any] | None = None) -> str:
    """Render a YAML file through Jinja2."""
    env = Environment(
        loader=FileSystemLoader(str(path.parent)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    context: dict[str, Any] = {"env": os.environ}
    if extra_context:
        context.update(extra_context)
    try:
        template = env.get_template(path.name)
        return template.render(**context)
    except jinja2.TemplateNotFound as exc:
        raise ParseError(f"Desired-state file not found: {path}") from exc
    except jinja2.TemplateError as exc:
        raise ParseError(f"Failed to render {path}: {exc}") from exc


def load_spec(path: Path, template_vars: dict[str, Any] | None = None) -> ZoneSpec:
    """Render, parse and validate a desired-state YAML document."""
    rendered = _render_yaml(path, template_vars)
    try:
        data = yaml.safe_load(rendered) or {}
    except yaml.YAMLError as exc:
        raise ParseError(f"Failed to parse YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError("Desired-state YAML must be a mapping.")

    try:
        return ZoneSpec.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"YAML validation error: {exc}") from exc


def read_entries(
    path: Path,
    zone_domain: str,
    template_vars: dict[str, Any] | None = None,
) -> list[RawEntry]:
    """Load desired entries from a YAML document."""
    spec = load_spec(path, template_vars)
    if spec.zone and _ensure_absolute(spec.zone).lower() != zone_domain.lower():
        raise ParseError(f"YAML zone {spec.zone} does not match managed zone {zone_domain}")

    return [
        RawEntry(
            type=record.type,
            domain=record.name.strip(),
            values=tuple(value.strip() for value in record.values),
            ttl=record.ttl if record.ttl is not None else spec.default_ttl,
        )
        for record in spec.records
    ]
