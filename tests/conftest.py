"""
Pytest configuration and fixtures for skillreg tests.
"""

import itertools
import tempfile
from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from skillreg.skills import Identity, SkillRegistry
from skillreg.storage import MemoryStorage


class FakeClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 60) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


def build_skill_content(
    name: str,
    body: str = "# Skill body",
    description: str | None = None,
    metadata: dict[str, str] | None = None,
) -> str:
    """Build a skill document with valid frontmatter."""
    lines = [
        "---",
        f"name: {name}",
        f"description: {description or f'A skill for {name}'}",
        "license: MIT",
        "compatibility: opencode",
    ]
    if metadata:
        lines.append("metadata:")
        lines.extend(f"  {key}: {value}" for key, value in metadata.items())
    lines.append("---")
    lines.append("")
    lines.append(body)
    return "\n".join(lines) + "\n"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_skillreg_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point SKILLREG_HOME at a temporary directory."""
    home = temp_dir / ".skillreg"
    home.mkdir()
    monkeypatch.setenv("SKILLREG_HOME", str(home))
    return home


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fixed clock starting at 2025-01-01T00:00:00Z."""
    return FakeClock(datetime(2025, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Provide sequential opaque ids: id0001, id0002, ..."""
    counter = itertools.count(1)
    return lambda: f"id{next(counter):04d}"


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Provide an empty in-memory store."""
    return MemoryStorage()


@pytest.fixture
def registry(memory_storage: MemoryStorage, clock: FakeClock, id_factory) -> SkillRegistry:
    """Provide a registry over memory storage with deterministic time and ids."""
    return SkillRegistry(memory_storage, clock=clock, id_factory=id_factory)


@pytest.fixture
def acme() -> Identity:
    """Provide the identity that owns @acme."""
    return Identity(namespace="acme", email="dev@acme.example")


@pytest.fixture
def skill_content() -> Callable[..., str]:
    """Provide a builder for valid skill documents."""
    return build_skill_content


@pytest.fixture
def sample_skill_md() -> str:
    """Provide sample skill content with metadata."""
    return """---
name: code-review
description: "Reviews pull requests for style and correctness"
license: MIT
compatibility: opencode
metadata:
  audience: engineers
  workflow: 'github'
---

# Code Review

## Instructions

1. Read the diff
2. Comment on issues
"""
