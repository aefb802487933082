"""
skillreg skills system.

A skill is a markdown document with a frontmatter header, published under
@namespace/name at an immutable semver version.

Usage:
    from skillreg.skills import Identity, SkillRegistry
    from skillreg.storage import MemoryStorage

    registry = SkillRegistry(MemoryStorage())

    result = await registry.publish("acme", "review", "1.0.0", content, Identity(namespace="acme"))
    latest = (await registry.get_latest("acme", "review")).unwrap()
"""

# Errors
from skillreg.skills.errors import (
    CorruptStorageDataError,
    ErrorCode,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    RegistryError,
    Result,
    VersionAlreadyExistsError,
)

# Models
from skillreg.skills.models import (
    Identity,
    LatestSkillContent,
    ProfileUpdate,
    PublishResult,
    SkillContent,
    SkillFrontmatter,
    SkillMetadata,
    SkillRef,
    UserProfile,
    VersionInfo,
)

# Frontmatter
from skillreg.skills.frontmatter import (
    FrontmatterError,
    FrontmatterErrorCode,
    ParsedFrontmatter,
    generate_frontmatter_template,
    parse_frontmatter,
)

# Versions
from skillreg.skills.versions import resolve_latest_version

# Registry
from skillreg.skills.registry import (
    DEFAULT_MAX_SKILL_BYTES,
    Keys,
    SkillRegistry,
    compute_checksum,
)

__all__ = [
    # Errors
    "CorruptStorageDataError",
    "ErrorCode",
    "ForbiddenError",
    "InvalidInputError",
    "NotFoundError",
    "RegistryError",
    "Result",
    "VersionAlreadyExistsError",
    # Models
    "Identity",
    "LatestSkillContent",
    "ProfileUpdate",
    "PublishResult",
    "SkillContent",
    "SkillFrontmatter",
    "SkillMetadata",
    "SkillRef",
    "UserProfile",
    "VersionInfo",
    # Frontmatter
    "FrontmatterError",
    "FrontmatterErrorCode",
    "ParsedFrontmatter",
    "generate_frontmatter_template",
    "parse_frontmatter",
    # Versions
    "resolve_latest_version",
    # Registry
    "DEFAULT_MAX_SKILL_BYTES",
    "Keys",
    "SkillRegistry",
    "compute_checksum",
]
