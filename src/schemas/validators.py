"""
Shared validation functions for Pydantic schemas.

Tag names are stored exactly as given: no case folding and no trimming beyond the
whitespace splitting done by parse_tags() for space-separated input.
"""
import re

from core.config import get_settings

WHITESPACE_PATTERN = re.compile(r"\s+")


def parse_tags(tag_string: str | None) -> list[str]:
    """
    Parse a space-separated tag string into tag names.

    Splits on any run of whitespace and drops empty values. Order and case are
    preserved; duplicates are kept (they collapse when tags are resolved).

    Examples:
        parse_tags("react  typescript   nodejs") -> ["react", "typescript", "nodejs"]
        parse_tags("") -> []
        parse_tags(None) -> []
    """
    if not tag_string:
        return []
    return [tag for tag in WHITESPACE_PATTERN.split(tag_string) if tag]


def validate_tag_name(tag: str) -> str:
    """
    Validate a single tag name.

    Raises:
        ValueError: If tag is empty, contains whitespace, or is too long.
    """
    settings = get_settings()
    if not tag or not tag.strip():
        raise ValueError("Tag name cannot be empty")
    if WHITESPACE_PATTERN.search(tag):
        raise ValueError(f"Tag name cannot contain whitespace: '{tag}'")
    if len(tag) > settings.max_tag_length:
        raise ValueError(
            f"Tag '{tag}' exceeds maximum length of {settings.max_tag_length} characters.",
        )
    return tag


def validate_tag_names(tags: list[str]) -> list[str]:
    """
    Validate a list of tag names.

    Raises:
        ValueError: If any tag is invalid or there are too many tags.
    """
    settings = get_settings()
    validated = [validate_tag_name(tag) for tag in tags]
    if len(set(validated)) > settings.max_tags_per_bookmark:
        raise ValueError(
            f"A bookmark can have at most {settings.max_tags_per_bookmark} tags "
            f"(got {len(set(validated))}).",
        )
    return validated


def validate_url_length(url: str) -> str:
    """Validate that url doesn't exceed maximum length."""
    settings = get_settings()
    if len(url) > settings.max_url_length:
        raise ValueError(
            f"URL exceeds maximum length of {settings.max_url_length:,} characters "
            f"(got {len(url):,} characters).",
        )
    return url


def validate_title(title: str | None) -> str | None:
    """Validate that a title is not blank and doesn't exceed maximum length."""
    settings = get_settings()
    if title is None:
        return title
    if not title.strip():
        raise ValueError("Title cannot be empty")
    if len(title) > settings.max_title_length:
        raise ValueError(
            f"Title exceeds maximum length of {settings.max_title_length:,} characters "
            f"(got {len(title):,} characters).",
        )
    return title


def validate_description_length(description: str | None) -> str | None:
    """Validate that description doesn't exceed maximum length."""
    settings = get_settings()
    if description is not None and len(description) > settings.max_description_length:
        max_len = settings.max_description_length
        raise ValueError(
            f"Description exceeds maximum length of {max_len:,} characters "
            f"(got {len(description):,} characters).",
        )
    return description
