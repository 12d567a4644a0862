# decode.py
"""
Decoding of inbound build requests.

A request goes through three stages, each with its own failure phase:

1. the JSON envelope (`job_spec` + `source_archive`),
2. the job spec markup (YAML, which also accepts JSON),
3. the structural mapping of that markup onto a `JobSpec`.

Either a complete `DecodedRequest` comes back or a `DecodeError` is raised;
there is no partially decoded result.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

from .errors import DecodeError, DecodePhase
from .model import Artifact, JobSpec


# -------------------- Schemas --------------------

class BuildRequestPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    job_spec: StrictStr
    source_archive: StrictStr


class ArtifactSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    source: StrictStr
    destination: Optional[StrictStr] = None
    options: Optional[Dict[StrictStr, StrictStr]] = None


class JobSpecSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    driver: StrictStr
    config: Dict[StrictStr, Any]
    artifacts: Optional[List[ArtifactSchema]] = None
    env: Optional[Dict[StrictStr, StrictStr]] = None
    resources: Optional[Dict[StrictStr, Any]] = None

    def to_job_spec(self) -> JobSpec:
        return JobSpec(
            driver=self.driver,
            config=self.config,
            artifacts=[
                Artifact(source=a.source, destination=a.destination, options=a.options)
                for a in (self.artifacts or [])
            ],
            env=self.env or {},
            resources=self.resources or {},
        )


class _SpecLoader(yaml.SafeLoader):
    """Safe loader that keeps timestamps as the strings the user wrote."""
    pass


_SpecLoader.add_constructor("tag:yaml.org,2002:timestamp", _SpecLoader.construct_yaml_str)


@dataclass
class DecodedRequest:
    spec: JobSpec
    source_archive: str


# -------------------- Decoding --------------------

def _first_error(err: ValidationError) -> tuple[Optional[str], str]:
    errors = err.errors()
    if not errors:
        return None, str(err)
    first = errors[0]
    path = ".".join(str(part) for part in first.get("loc", ())) or None
    return path, first.get("msg", "invalid value")


def decode_envelope(body: bytes) -> BuildRequestPayload:
    try:
        return BuildRequestPayload.model_validate_json(body)
    except ValidationError as e:
        path, msg = _first_error(e)
        raise DecodeError(DecodePhase.ENVELOPE_MALFORMED, msg, path) from e


def parse_markup(text: str) -> Any:
    try:
        return yaml.load(text, Loader=_SpecLoader)
    except yaml.YAMLError as e:
        raise DecodeError(DecodePhase.SPEC_MARKUP_INVALID, str(e)) from e


_JSON_SCALARS = (str, int, float, bool, type(None))


def _check_json_values(value: Any, path: str = "") -> None:
    # The scheduler API takes JSON, so yaml-only types (!!binary, !!set) are rejected.
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, _JSON_SCALARS):
                raise DecodeError(
                    DecodePhase.SPEC_SHAPE_MISMATCH,
                    f"unsupported key type {type(key).__name__}",
                    path or None,
                )
            _check_json_values(item, f"{path}.{key}" if path else str(key))
    elif isinstance(value, list):
        for i, item in enumerate(value):
            _check_json_values(item, f"{path}.{i}" if path else str(i))
    elif not isinstance(value, _JSON_SCALARS):
        raise DecodeError(
            DecodePhase.SPEC_SHAPE_MISMATCH,
            f"value of type {type(value).__name__} cannot be sent to the scheduler",
            path or None,
        )


def coerce_job_spec(tree: Any) -> JobSpec:
    if not isinstance(tree, dict):
        raise DecodeError(
            DecodePhase.SPEC_SHAPE_MISMATCH,
            f"job spec must be a mapping, got {type(tree).__name__}",
        )
    _check_json_values(tree)
    try:
        return JobSpecSchema.model_validate(tree).to_job_spec()
    except ValidationError as e:
        path, msg = _first_error(e)
        raise DecodeError(DecodePhase.SPEC_SHAPE_MISMATCH, msg, path) from e


def decode_job_spec(text: str) -> JobSpec:
    return coerce_job_spec(parse_markup(text))


def decode_request(body: bytes) -> DecodedRequest:
    """Decode a raw request body into a job spec and its source archive."""
    payload = decode_envelope(body)
    spec = decode_job_spec(payload.job_spec)
    return DecodedRequest(spec=spec, source_archive=payload.source_archive)
