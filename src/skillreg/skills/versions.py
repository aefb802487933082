"""Semantic version ordering and latest-version resolution."""

from collections.abc import Iterable


def is_prerelease(version: str) -> bool:
    """A version with a '-' suffix is a pre-release."""
    return "-" in version


def version_sort_key(version: str) -> tuple[int, int, int, str]:
    """Sort key for a version string.

    Orders by the numeric MAJOR.MINOR.PATCH triple. Pre-release suffixes
    are not ranked semantically; equal triples fall back to comparing the
    full version string so the ordering is deterministic.
    """
    core = version.split("-", 1)[0]
    parts = core.split(".")
    numbers = []
    for index in range(3):
        try:
            numbers.append(int(parts[index]))
        except (IndexError, ValueError):
            numbers.append(0)
    return numbers[0], numbers[1], numbers[2], version


def resolve_latest_version(versions: Iterable[str]) -> str | None:
    """Pick the version that "latest" should point at.

    Stable versions win whenever at least one exists; otherwise the
    highest pre-release is used.

    Args:
        versions: Every published version of a skill.

    Returns:
        The resolved version, or None when there are no versions.

    Examples:
        >>> resolve_latest_version(["1.0.0", "1.1.0", "2.0.0-beta.1"])
        '1.1.0'
        >>> resolve_latest_version(["1.0.0-alpha.1", "1.0.0-beta.1"])
        '1.0.0-beta.1'
    """
    candidates = list(versions)
    if not candidates:
        return None

    stable = [v for v in candidates if not is_prerelease(v)]
    pool = stable or candidates
    return max(pool, key=version_sort_key)
