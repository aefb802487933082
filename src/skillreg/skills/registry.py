"""
Skill registry for skillreg.

Provides the main interface for publishing and reading skills. The
registry keeps no state of its own: every call is a handful of reads and
writes against the injected StorageBackend.
"""

import hashlib
import logging
import re
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TypeVar

from pydantic import ValidationError

from skillreg.skills.errors import (
    CorruptStorageDataError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    Result,
    VersionAlreadyExistsError,
)
from skillreg.skills.frontmatter import FrontmatterError, parse_frontmatter
from skillreg.skills.models import (
    Identity,
    LatestSkillContent,
    ProfileUpdate,
    PublishResult,
    SkillContent,
    SkillMetadata,
    SkillRef,
    UserProfile,
    VersionInfo,
    is_valid_namespace,
    is_valid_semver,
    is_valid_skill_name,
)
from skillreg.skills.versions import resolve_latest_version
from skillreg.storage.base import StorageBackend

logger = logging.getLogger(__name__)

DEFAULT_MAX_SKILL_BYTES = 262144

DocumentT = TypeVar("DocumentT", SkillMetadata, UserProfile)


class Keys:
    """Storage key layout."""

    ROOT = "skills/"
    METADATA_RE = re.compile(r"^skills/([^/]+)/([^/]+)/metadata\.json$")

    @staticmethod
    def metadata(namespace: str, name: str) -> str:
        return f"skills/{namespace}/{name}/metadata.json"

    @staticmethod
    def version(namespace: str, name: str, version: str) -> str:
        return f"skills/{namespace}/{name}/versions/{version}.md"

    @staticmethod
    def user_profile(namespace: str) -> str:
        return f"skills/{namespace}/user.json"

    @staticmethod
    def namespace_prefix(namespace: str) -> str:
        return f"skills/{namespace}/"


def compute_checksum(data: bytes) -> str:
    """Compute the content checksum in ``sha256:<hex>`` form."""
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def generate_id() -> str:
    """Generate an opaque identifier."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def _check_identifiers(
    namespace: str,
    name: str | None = None,
    version: str | None = None,
) -> InvalidInputError | None:
    """Validate path identifiers before they are turned into store keys."""
    if not is_valid_namespace(namespace):
        return InvalidInputError(
            "namespace",
            "must be 1-40 lowercase alphanumeric characters or hyphens, no leading/trailing hyphen",
        )
    if name is not None and not is_valid_skill_name(name):
        return InvalidInputError(
            "name",
            "must be 1-64 lowercase alphanumeric characters or hyphens, no leading/trailing hyphen",
        )
    if version is not None and not is_valid_semver(version):
        return InvalidInputError("version", "must be valid semver (e.g., 1.0.0, 2.1.3-beta.1)")
    return None


class SkillRegistry:
    """Namespaced, versioned skill registry.

    Provides methods to:
    - Publish immutable skill versions
    - Read a specific version, the latest version, or a skill's metadata
    - List versions, skills in a namespace, or every skill
    - Read and update namespace profiles

    Every operation returns a Result. Expected failures (missing data, bad
    input, authorization, immutability, corruption) are carried as typed
    errors; only StorageError from the backend is raised.
    """

    def __init__(
        self,
        storage: StorageBackend,
        max_skill_bytes: int = DEFAULT_MAX_SKILL_BYTES,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        """Initialize the registry.

        Args:
            storage: Backend holding all documents and content.
            max_skill_bytes: Maximum UTF-8 size of published content.
            clock: Returns the current time. Defaults to UTC now.
            id_factory: Returns fresh opaque ids. Defaults to uuid4 hex.
        """
        self.storage = storage
        self.max_skill_bytes = max_skill_bytes
        self._clock = clock or utc_now
        self._new_id = id_factory or generate_id

    # =========================================================================
    # Document helpers
    # =========================================================================

    async def _load_document(self, key: str, model: type[DocumentT]) -> Result[DocumentT | None]:
        """Load and validate a JSON document.

        Returns a successful None when the key is absent, and a
        CorruptStorageDataError when the stored value does not validate.
        """
        raw = await self.storage.get(key)
        if raw is None:
            return Result.success(None)

        try:
            return Result.success(model.model_validate_json(raw))
        except ValidationError as e:
            if any(err["type"] == "json_invalid" for err in e.errors()):
                reason = "invalid JSON"
            else:
                reason = str(e)
            logger.warning(f"Corrupt {model.__name__} document at {key}: {reason}")
            return Result.failure(CorruptStorageDataError(key, reason))

    async def _load_metadata(self, namespace: str, name: str) -> Result[SkillMetadata | None]:
        return await self._load_document(Keys.metadata(namespace, name), SkillMetadata)

    async def _resolve_namespace_id(self, namespace: str) -> str:
        """Get the namespace's opaque id, creating its profile if needed."""
        key = Keys.user_profile(namespace)
        loaded = await self._load_document(key, UserProfile)
        if loaded.ok and loaded.value is not None:
            return loaded.value.id

        if not loaded.ok:
            logger.warning(f"Replacing unreadable profile for @{namespace}")

        now = self._clock()
        profile = UserProfile(id=self._new_id(), namespace=namespace, created=now, updated=now)
        await self.storage.put(key, profile.to_storage_json())
        logger.debug(f"Created profile for @{namespace}")
        return profile.id

    # =========================================================================
    # Publishing
    # =========================================================================

    async def publish(
        self,
        namespace: str,
        name: str,
        version: str,
        content: str,
        identity: Identity,
    ) -> Result[PublishResult]:
        """Publish a new immutable version of a skill.

        The content write is atomic: of several callers publishing the same
        version concurrently exactly one succeeds. The metadata update that
        follows is a plain read-modify-write, so two callers publishing
        *different* new versions of the same skill at the same moment can
        lose one version from the metadata even though its content was
        stored. One writer per skill at a time is assumed.

        Args:
            namespace: Target namespace.
            name: Skill name.
            version: Semver version to publish.
            content: Markdown document with a frontmatter header.
            identity: Authenticated caller.

        Returns:
            Result with PublishResult, or ForbiddenError, InvalidInputError,
            VersionAlreadyExistsError, CorruptStorageDataError.
        """
        if identity.namespace != namespace:
            return Result.failure(ForbiddenError(f"Cannot publish to namespace @{namespace}"))

        invalid = _check_identifiers(namespace, name, version)
        if invalid is not None:
            return Result.failure(invalid)

        try:
            data = content.encode("utf-8")
        except UnicodeEncodeError:
            return Result.failure(InvalidInputError("content", "must be valid UTF-8 text"))

        size = len(data)
        if size > self.max_skill_bytes:
            return Result.failure(
                InvalidInputError("content", f"Exceeds max size of {self.max_skill_bytes} bytes")
            )

        try:
            parsed = parse_frontmatter(content)
        except FrontmatterError as e:
            reason = f"{e.message}: {e.details}" if e.details else e.message
            return Result.failure(InvalidInputError("content", reason))

        frontmatter = parsed.frontmatter
        if frontmatter.name != name:
            return Result.failure(
                InvalidInputError(
                    "content",
                    f'Frontmatter name "{frontmatter.name}" does not match URL path "{name}"',
                )
            )

        version_key = Keys.version(namespace, name, version)
        if not await self.storage.put_if_absent(version_key, content):
            logger.warning(f"Rejected republish of @{namespace}/{name}@{version}")
            return Result.failure(VersionAlreadyExistsError(namespace, name, version))

        loaded = await self._load_metadata(namespace, name)
        if not loaded.ok:
            return Result.failure(loaded.error)

        now = self._clock()
        checksum = compute_checksum(data)
        info = VersionInfo(published=now, size=size, checksum=checksum)
        existing = loaded.value

        if existing is None:
            metadata = SkillMetadata(
                id=self._new_id(),
                namespace_id=await self._resolve_namespace_id(namespace),
                namespace=namespace,
                name=name,
                created=now,
                updated=now,
                versions={version: info},
                latest=version,
            )
        else:
            versions = {**existing.versions, version: info}
            metadata = existing.model_copy(
                update={
                    "updated": now,
                    "versions": versions,
                    "latest": resolve_latest_version(versions),
                }
            )

        await self.storage.put(Keys.metadata(namespace, name), metadata.to_storage_json())
        logger.info(f"Published @{namespace}/{name}@{version} ({size} bytes, latest={metadata.latest})")

        return Result.success(
            PublishResult(
                namespace=namespace,
                name=name,
                version=version,
                size=size,
                checksum=checksum,
                frontmatter=frontmatter,
            )
        )

    # =========================================================================
    # Reading
    # =========================================================================

    async def get_content(self, namespace: str, name: str, version: str) -> Result[SkillContent]:
        """Get the content of one version, with the skill and namespace ids."""
        if _check_identifiers(namespace, name, version) is not None:
            return Result.failure(NotFoundError(f"@{namespace}/{name}@{version}"))

        loaded = await self._load_metadata(namespace, name)
        if not loaded.ok:
            return Result.failure(loaded.error)
        if loaded.value is None:
            return Result.failure(NotFoundError(f"@{namespace}/{name}@{version}"))

        content = await self.storage.get(Keys.version(namespace, name, version))
        if content is None:
            return Result.failure(NotFoundError(f"@{namespace}/{name}@{version}"))

        return Result.success(
            SkillContent(
                content=content,
                skill_id=loaded.value.id,
                namespace_id=loaded.value.namespace_id,
            )
        )

    async def get_metadata(self, namespace: str, name: str) -> Result[SkillMetadata]:
        """Get a skill's metadata document."""
        if _check_identifiers(namespace, name) is not None:
            return Result.failure(NotFoundError(f"@{namespace}/{name}"))

        loaded = await self._load_metadata(namespace, name)
        if not loaded.ok:
            return Result.failure(loaded.error)
        if loaded.value is None:
            return Result.failure(NotFoundError(f"@{namespace}/{name}"))
        return Result.success(loaded.value)

    async def get_latest(self, namespace: str, name: str) -> Result[LatestSkillContent]:
        """Get the content of the skill's latest version.

        Metadata pointing at content that is not in the store is reported
        as CorruptStorageDataError rather than NotFoundError.
        """
        if _check_identifiers(namespace, name) is not None:
            return Result.failure(NotFoundError(f"@{namespace}/{name}"))

        loaded = await self._load_metadata(namespace, name)
        if not loaded.ok:
            return Result.failure(loaded.error)

        metadata = loaded.value
        if metadata is None:
            return Result.failure(NotFoundError(f"@{namespace}/{name}"))
        if metadata.latest is None:
            return Result.failure(NotFoundError(f"@{namespace}/{name} versions"))

        content = await self.storage.get(Keys.version(namespace, name, metadata.latest))
        if content is None:
            logger.warning(f"@{namespace}/{name} latest {metadata.latest} has no stored content")
            return Result.failure(
                CorruptStorageDataError(
                    Keys.metadata(namespace, name),
                    f"Latest version {metadata.latest} not found in storage",
                )
            )

        return Result.success(
            LatestSkillContent(
                version=metadata.latest,
                content=content,
                skill_id=metadata.id,
                namespace_id=metadata.namespace_id,
            )
        )

    # =========================================================================
    # Listing
    # =========================================================================

    async def list_versions(self, namespace: str, name: str) -> Result[list[str]]:
        """List published versions; an unknown skill has none."""
        if _check_identifiers(namespace, name) is not None:
            return Result.success([])

        loaded = await self._load_metadata(namespace, name)
        if not loaded.ok:
            return Result.failure(loaded.error)
        if loaded.value is None:
            return Result.success([])
        return Result.success(list(loaded.value.versions))

    async def list_skills_in_namespace(self, namespace: str) -> Result[list[str]]:
        """List skill names published under a namespace."""
        if _check_identifiers(namespace) is not None:
            return Result.success([])

        refs = await self._scan(Keys.namespace_prefix(namespace))
        return Result.success([ref.name for ref in refs])

    async def list_skills(self) -> Result[list[SkillRef]]:
        """List every skill in the registry."""
        return Result.success(await self._scan(Keys.ROOT))

    async def _scan(self, prefix: str) -> list[SkillRef]:
        """Collect distinct skills from metadata keys under ``prefix``."""
        seen: dict[tuple[str, str], SkillRef] = {}
        for key in await self.storage.list(prefix):
            match = Keys.METADATA_RE.match(key)
            if match is None:
                continue
            pair = (match.group(1), match.group(2))
            if pair not in seen:
                seen[pair] = SkillRef(namespace=pair[0], name=pair[1])
        return list(seen.values())

    # =========================================================================
    # Profiles
    # =========================================================================

    async def get_profile(self, namespace: str) -> Result[UserProfile]:
        """Get a namespace's profile."""
        if _check_identifiers(namespace) is not None:
            return Result.failure(NotFoundError(f"Profile @{namespace}"))

        loaded = await self._load_document(Keys.user_profile(namespace), UserProfile)
        if not loaded.ok:
            return Result.failure(loaded.error)
        if loaded.value is None:
            return Result.failure(NotFoundError(f"Profile @{namespace}"))
        return Result.success(loaded.value)

    async def update_profile(
        self,
        namespace: str,
        fields: ProfileUpdate | dict,
        identity: Identity,
    ) -> Result[UserProfile]:
        """Merge ``fields`` into a namespace's profile, creating it if needed.

        Fields left as None keep their stored value. The profile id and
        creation time never change; ``updated`` is refreshed.
        """
        if identity.namespace != namespace:
            return Result.failure(ForbiddenError(f"Cannot update profile for @{namespace}"))

        invalid = _check_identifiers(namespace)
        if invalid is not None:
            return Result.failure(invalid)

        if isinstance(fields, dict):
            try:
                fields = ProfileUpdate.model_validate(fields)
            except ValidationError as e:
                return Result.failure(InvalidInputError("profile", str(e)))

        key = Keys.user_profile(namespace)
        loaded = await self._load_document(key, UserProfile)
        existing = loaded.value if loaded.ok else None
        if not loaded.ok:
            logger.warning(f"Replacing unreadable profile for @{namespace}")

        now = self._clock()
        try:
            profile = UserProfile(
                id=existing.id if existing else self._new_id(),
                namespace=namespace,
                display_name=_pick(fields.display_name, existing.display_name if existing else None),
                bio=_pick(fields.bio, existing.bio if existing else None),
                website=_pick(fields.website, existing.website if existing else None),
                created=existing.created if existing else now,
                updated=now,
            )
        except ValidationError as e:
            return Result.failure(InvalidInputError("profile", str(e)))

        await self.storage.put(key, profile.to_storage_json())
        logger.info(f"Updated profile for @{namespace}")
        return Result.success(profile)


def _pick(new: str | None, old: str | None) -> str | None:
    return new if new is not None else old
