from __future__ import annotations

import re
from dataclasses import dataclass

import yaml


_HEADING_RE = re.compile(r"^#{1,6}(\s|$)")
_INLINE_CODE_RE = re.compile(r"`[^`]*`")
_TAG_RE = re.compile(r"(?:^|(?<=\s))#([A-Za-z0-9_/-]+)")


@dataclass(frozen=True)
class FrontmatterParse:
    frontmatter: dict
    body: str
    error: str | None


@dataclass(frozen=True)
class MarkdownMeta:
    title: str | None
    description: str | None
    tags: list[str]
    frontmatter_error: str | None


def parse_frontmatter(markdown: str) -> FrontmatterParse:
    lines = markdown.split("\n")
    if not lines or lines[0].rstrip("\r") != "---":
        return FrontmatterParse(frontmatter={}, body=markdown, error=None)

    for idx in range(1, len(lines)):
        if lines[idx].rstrip("\r") != "---":
            continue
        yaml_block = "\n".join(lines[1:idx])
        body = "\n".join(lines[idx + 1 :])
        try:
            parsed = yaml.safe_load(yaml_block) or {}
        except yaml.YAMLError:
            return FrontmatterParse(frontmatter={}, body=markdown, error="frontmatter_yaml_error")
        if not isinstance(parsed, dict):
            return FrontmatterParse(frontmatter={}, body=markdown, error="frontmatter_not_mapping")
        return FrontmatterParse(frontmatter=parsed, body=body, error=None)

    # No closing fence: the whole document is body.
    return FrontmatterParse(frontmatter={}, body=markdown, error=None)


def normalize_tag(tag: str) -> str:
    return tag.strip().lstrip("#").strip().lower()


def extract_frontmatter_tags(frontmatter: dict) -> list[str]:
    raw = frontmatter.get("tags")
    if isinstance(raw, str):
        values = raw.split(",")
    elif isinstance(raw, list):
        values = [v for v in raw if isinstance(v, str)]
    else:
        return []
    return [t for t in (normalize_tag(v) for v in values) if t]


def extract_inline_tags(body: str) -> list[str]:
    tags: set[str] = set()
    in_fence = False
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("```"):
            in_fence = not in_fence
            continue
        if in_fence or _HEADING_RE.match(stripped):
            continue
        # Inline code spans never carry tags.
        text = _INLINE_CODE_RE.sub(" ", line)
        for match in _TAG_RE.finditer(text):
            tag = normalize_tag(match.group(1))
            if tag:
                tags.add(tag)
    return sorted(tags)


def _first_heading(body: str) -> str | None:
    in_fence = False
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("```"):
            in_fence = not in_fence
            continue
        if not in_fence and stripped.startswith("# "):
            heading = stripped[2:].strip()
            if heading:
                return heading
    return None


def _string_field(frontmatter: dict, key: str) -> str | None:
    value = frontmatter.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def extract_markdown_meta(markdown: str) -> MarkdownMeta:
    fm = parse_frontmatter(markdown)
    title = _string_field(fm.frontmatter, "title") or _first_heading(fm.body)
    tags = sorted(set(extract_frontmatter_tags(fm.frontmatter)).union(extract_inline_tags(fm.body)))
    return MarkdownMeta(
        title=title,
        description=_string_field(fm.frontmatter, "description"),
        tags=tags,
        frontmatter_error=fm.error,
    )
