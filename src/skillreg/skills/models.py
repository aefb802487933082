"""
Skill models for skillreg.

Defines the persisted documents (skill metadata, user profiles), the
frontmatter embedded in skill content, and the values returned by
registry operations.
"""

import re
from datetime import datetime
from typing import Annotated

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

NAMESPACE_PATTERN = r"^[a-z0-9]([a-z0-9-]{0,38}[a-z0-9])?$"
SKILL_NAME_PATTERN = r"^[a-z0-9]([a-z0-9-]{0,62}[a-z0-9])?$"
SEMVER_PATTERN = (
    r"^(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)"
    r"(-[a-zA-Z0-9]+(\.[a-zA-Z0-9]+)*)?$"
)
OPAQUE_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"
CHECKSUM_PATTERN = r"^sha256:[0-9a-f]{64}$"
# Frontmatter names are stricter than path names: no consecutive hyphens.
FRONTMATTER_NAME_PATTERN = r"^[a-z0-9]+(-[a-z0-9]+)*$"

Namespace = Annotated[str, StringConstraints(min_length=1, max_length=40, pattern=NAMESPACE_PATTERN)]
SkillName = Annotated[str, StringConstraints(min_length=1, max_length=64, pattern=SKILL_NAME_PATTERN)]
SemVer = Annotated[str, StringConstraints(pattern=SEMVER_PATTERN)]
OpaqueId = Annotated[str, StringConstraints(pattern=OPAQUE_ID_PATTERN)]

_NAMESPACE_RE = re.compile(NAMESPACE_PATTERN)
_SKILL_NAME_RE = re.compile(SKILL_NAME_PATTERN)
_SEMVER_RE = re.compile(SEMVER_PATTERN)

_url_adapter = TypeAdapter(AnyUrl)


def is_valid_namespace(value: str) -> bool:
    """Check a namespace against the namespace grammar."""
    return bool(_NAMESPACE_RE.match(value))


def is_valid_skill_name(value: str) -> bool:
    """Check a skill name against the skill-name grammar."""
    return bool(_SKILL_NAME_RE.match(value))


def is_valid_semver(value: str) -> bool:
    """Check a version string against the semver grammar."""
    return bool(_SEMVER_RE.match(value))


class RegistryModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Identity
# =============================================================================


class Identity(RegistryModel):
    """Authenticated caller, as supplied by the auth layer.

    Trusted input: the registry only compares ``namespace`` against the
    target namespace and never validates the rest.
    """

    namespace: str
    email: str | None = None


# =============================================================================
# Frontmatter
# =============================================================================


class SkillFrontmatter(RegistryModel):
    """Frontmatter header embedded at the top of a skill's content."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=64,
        pattern=FRONTMATTER_NAME_PATTERN,
        description="Skill name (must match the published name)",
    )
    description: str = Field(..., min_length=1, max_length=1024, description="What the skill does")
    license: str | None = Field(default=None, max_length=100, description="License identifier")
    compatibility: str | None = Field(default=None, max_length=100, description="Tool compatibility hint")
    metadata: dict[str, str] | None = Field(default=None, description="Free-form string metadata")


# =============================================================================
# Persisted Documents
# =============================================================================


class VersionInfo(RegistryModel):
    """Record kept for every published version."""

    published: datetime
    size: int = Field(..., ge=0)
    checksum: str = Field(..., pattern=CHECKSUM_PATTERN)


class SkillMetadata(RegistryModel):
    """Metadata document for a skill.

    Stored at skills/{namespace}/{name}/metadata.json
    """

    id: OpaqueId
    namespace_id: OpaqueId
    namespace: Namespace
    name: SkillName
    created: datetime
    updated: datetime
    versions: dict[SemVer, VersionInfo] = Field(default_factory=dict)
    latest: SemVer | None = None

    @model_validator(mode="after")
    def _latest_is_published(self) -> "SkillMetadata":
        if self.latest is not None and self.latest not in self.versions:
            raise ValueError(f"latest version {self.latest} is not in versions")
        return self

    def to_storage_json(self) -> str:
        """Serialize for the store."""
        return self.model_dump_json(by_alias=True)


class UserProfile(RegistryModel):
    """Profile document for a namespace.

    Stored at skills/{namespace}/user.json. The id doubles as the
    namespace's opaque id.
    """

    id: OpaqueId
    namespace: Namespace
    display_name: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    website: str | None = None
    created: datetime
    updated: datetime

    @field_validator("website")
    @classmethod
    def _website_is_url(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            _url_adapter.validate_python(value)
        except ValidationError:
            raise ValueError("website must be a valid URL") from None
        return value

    def to_storage_json(self) -> str:
        """Serialize for the store, omitting unset optional fields."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ProfileUpdate(RegistryModel):
    """Partial profile update; fields left as None keep their value."""

    display_name: str | None = None
    bio: str | None = None
    website: str | None = None


# =============================================================================
# Operation Results
# =============================================================================


class PublishResult(RegistryModel):
    """Outcome of a successful publish."""

    namespace: str
    name: str
    version: str
    size: int
    checksum: str
    frontmatter: SkillFrontmatter


class SkillContent(RegistryModel):
    """Version content plus the opaque ids analytics needs."""

    content: str
    skill_id: str
    namespace_id: str


class LatestSkillContent(SkillContent):
    """Content of the resolved latest version."""

    version: str


class SkillRef(RegistryModel):
    """A (namespace, name) pair found in the store."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"@{self.namespace}/{self.name}"
