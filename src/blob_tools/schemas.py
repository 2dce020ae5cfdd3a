"""Storage configuration and maintenance pass schemas for blob-tools."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Type, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from blob_tools.core.exceptions import ConfigError

ModelT = TypeVar("ModelT", bound=BaseModel)


class S3StorageConfig(BaseModel):
    """Configuration for S3 object storage."""

    type: str = "s3"
    access_key_id: str | None = Field(default=None, description="AWS access key ID")
    secret_access_key: str | None = Field(
        default=None, description="AWS secret access key"
    )
    session_token: str | None = Field(default=None, description="AWS session token")
    region_name: str | None = Field(default=None, description="AWS region")
    endpoint_url: str | None = Field(default=None, description="Custom S3 endpoint URL")
    aws_profile: str | None = Field(default=None, description="AWS profile name")


class PipelineKind(str, Enum):
    """Which maintenance pass a run performs."""

    COMPRESSION = "compression"
    CACHE_CONTROL = "cache_control"


class ScopeSpec(BaseModel):
    """Which objects of a container a pass may touch.

    Attributes:
        allowed_extensions: Lower-cased extensions including the leading dot
        subpath_prefix: Optional "directory" (or exact file) inside the container
        in_place: Overwrite the original object instead of writing a sibling
        new_extension_suffix: Suffix appended to the key for sibling objects
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed_extensions: frozenset[str]
    subpath_prefix: Optional[str] = None
    in_place: bool = True
    new_extension_suffix: str = ".gz"

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> frozenset[str]:
        if isinstance(value, str):
            value = [value]
        normalized = set()
        for ext in value:
            ext = str(ext).strip().lower()
            if not ext or ext == ".":
                continue
            normalized.add(ext if ext.startswith(".") else f".{ext}")
        if not normalized:
            raise ValueError("at least one extension is required")
        return frozenset(normalized)

    @field_validator("subpath_prefix")
    @classmethod
    def _normalize_subpath(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip("/")
        return value or None

    @model_validator(mode="after")
    def _check_sibling_suffix(self) -> "ScopeSpec":
        if not self.in_place and not self.new_extension_suffix:
            raise ValueError("new_extension_suffix is required when in_place is False")
        return self


class PolicySpec(BaseModel):
    """Cache policy stamped onto processed objects."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cache_control_max_age_seconds: int = Field(..., ge=0)

    @property
    def cache_control_header(self) -> str:
        return f"public, max-age={self.cache_control_max_age_seconds}"


class RunMode(BaseModel):
    """Run options. Simulated runs compute everything but write nothing."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    simulate: bool = False


@dataclass(frozen=True)
class ObjectDescriptor:
    """One listed object, as seen by a maintenance pass.

    A listing only knows the key and size. The content headers are filled
    in when the object is described, so they are None before that.

    Attributes:
        container: Bucket the object lives in
        key: Object key inside the bucket
        content_type: Recorded Content-Type
        content_encoding: Recorded Content-Encoding, if any
        cache_control: Recorded Cache-Control, if any
        size: Size in bytes, informational
    """

    container: str
    key: str
    content_type: Optional[str] = None
    content_encoding: Optional[str] = None
    cache_control: Optional[str] = None
    size: int = 0

    @property
    def path(self) -> str:
        """Container-qualified path used for scope matching."""
        return f"/{self.container}/{self.key}"


@dataclass(frozen=True)
class ObjectProperties:
    """Header updates for an object. None means leave unchanged."""

    content_encoding: Optional[str] = None
    content_type: Optional[str] = None
    cache_control: Optional[str] = None


def build_config(model: Type[ModelT], **values: Any) -> ModelT:
    """Construct a settings model, reporting invalid values as ConfigError."""
    try:
        return model(**values)
    except pydantic.ValidationError as e:
        raise ConfigError(f"Invalid {model.__name__}: {e}") from e
