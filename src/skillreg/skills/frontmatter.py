"""
Frontmatter parser for skillreg.

Parses the header block at the top of a skill document and validates it
against the SkillFrontmatter model. The header grammar is a narrow subset
of YAML: top-level ``key: value`` pairs plus one nested level of string
pairs under ``metadata``. Anything outside that grammar is rejected.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import ValidationError

from skillreg.skills.models import SkillFrontmatter

DELIMITER = "---"

# Only this key may hold a nested block of key: value pairs.
NESTED_KEY = "metadata"

_TOP_LEVEL_RE = re.compile(r"^([A-Za-z0-9_-]+):\s*(.*)$")
_NESTED_RE = re.compile(r"^\s+([A-Za-z0-9_-]+):\s*(.*)$")


class FrontmatterErrorCode(str, Enum):
    """Why a frontmatter header was rejected."""

    MISSING_FRONTMATTER = "MISSING_FRONTMATTER"
    INVALID_YAML = "INVALID_YAML"
    INVALID_FRONTMATTER = "INVALID_FRONTMATTER"


class FrontmatterError(Exception):
    """Error parsing or validating a frontmatter header."""

    def __init__(self, code: FrontmatterErrorCode, message: str, details: str | None = None):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"{message}: {details}" if details else message)


@dataclass(frozen=True)
class ParsedFrontmatter:
    """A validated header and the markdown body that follows it."""

    frontmatter: SkillFrontmatter
    body: str


def _unquote(value: str) -> str:
    """Strip one pair of matching surrounding quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def split_frontmatter(content: str) -> tuple[list[str], str]:
    """Split a document into header lines and body.

    Args:
        content: The full markdown document.

    Returns:
        Tuple of (header lines between the delimiters, stripped body).

    Raises:
        FrontmatterError: If the document does not open with a delimiter
            line or the header is never closed.
    """
    # Only "\n" ends a line; str.splitlines() would also break on U+2028 etc.
    lines = [line.removesuffix("\r") for line in content.split("\n")]

    if not content or lines[0].rstrip() != DELIMITER:
        raise FrontmatterError(
            FrontmatterErrorCode.MISSING_FRONTMATTER,
            f"Content must start with frontmatter ({DELIMITER})",
        )

    for index, line in enumerate(lines[1:], start=1):
        if line.rstrip() == DELIMITER:
            body = "\n".join(lines[index + 1 :]).strip()
            return lines[1:index], body

    raise FrontmatterError(
        FrontmatterErrorCode.MISSING_FRONTMATTER,
        f"Frontmatter must have a closing delimiter ({DELIMITER})",
    )


def parse_header(lines: list[str]) -> dict[str, Any]:
    """Parse header lines into a mapping.

    Args:
        lines: Lines between the opening and closing delimiters.

    Returns:
        Mapping of top-level keys to strings, with ``metadata`` mapped to
        a dict of strings when present.

    Raises:
        FrontmatterError: If a line falls outside the supported grammar.
    """
    result: dict[str, Any] = {}
    nested_key: str | None = None

    for raw_line in lines:
        line = raw_line.rstrip()
        if not line.strip():
            continue

        if line[0].isspace():
            match = _NESTED_RE.match(line)
            if nested_key is None or match is None:
                raise FrontmatterError(
                    FrontmatterErrorCode.INVALID_YAML,
                    f"Invalid YAML syntax: {line.strip()}",
                )
            if nested_key != NESTED_KEY:
                raise FrontmatterError(
                    FrontmatterErrorCode.INVALID_YAML,
                    f"Nested values are only supported under '{NESTED_KEY}'",
                    f"found nested value under '{nested_key}'",
                )
            nested = result[nested_key]
            key, value = match.group(1), _unquote((match.group(2) or "").strip())
            if key in nested:
                raise FrontmatterError(
                    FrontmatterErrorCode.INVALID_YAML,
                    f"Duplicate key: {nested_key}.{key}",
                )
            nested[key] = value
            continue

        match = _TOP_LEVEL_RE.match(line)
        if match is None:
            raise FrontmatterError(
                FrontmatterErrorCode.INVALID_YAML,
                f"Invalid YAML syntax: {line}",
            )

        key, value = match.group(1), (match.group(2) or "").strip()
        if key in result:
            raise FrontmatterError(FrontmatterErrorCode.INVALID_YAML, f"Duplicate key: {key}")

        if value:
            result[key] = _unquote(value)
            nested_key = None
        else:
            # Empty value opens a nested block
            result[key] = {}
            nested_key = key

    return result


def parse_frontmatter(content: str) -> ParsedFrontmatter:
    """Parse and validate the frontmatter of a skill document.

    Expects content in the format::

        ---
        name: skill-name
        description: A description
        metadata:
          audience: engineers
        ---
        # Body content

    Args:
        content: The full skill document.

    Returns:
        ParsedFrontmatter with the validated header and the body.

    Raises:
        FrontmatterError: If the header is missing, malformed, or fails
            schema validation.
    """
    header_lines, body = split_frontmatter(content)
    header = parse_header(header_lines)

    try:
        frontmatter = SkillFrontmatter.model_validate(header)
    except ValidationError as e:
        raise FrontmatterError(
            FrontmatterErrorCode.INVALID_FRONTMATTER,
            "Invalid frontmatter",
            str(e),
        ) from e

    return ParsedFrontmatter(frontmatter=frontmatter, body=body)


SKILL_TEMPLATE = """---
name: {name}
description: {description}
license: MIT
compatibility: opencode
metadata:
  audience: engineers
  workflow: development
---

## What I do

- Describe the main capabilities of this skill
- Add specific guidance or best practices
- Include relevant context

## When to use me

Use this skill when...
"""


def generate_frontmatter_template(
    name: str,
    description: str = "A brief description of what this skill does",
) -> str:
    """Build a starter skill document for ``name``.

    Args:
        name: Skill name written into the frontmatter.
        description: Short description for the header.

    Returns:
        Markdown document that parses with ``parse_frontmatter``.
    """
    return SKILL_TEMPLATE.format(name=name, description=description)
