"""
Meme URL sanitization.

Upstream responses (and LLM replies that echo them) sometimes hand back the
meme URL wrapped in markdown or with trailing junk, e.g.:

- "[https://i.imgflip.com/x.jpg](https://i.imgflip.com/x.jpg)"
- "https://i.imgflip.com/x.jpg](https://i.imgflip.com/x.jpg"
- "https://i.imgflip.com/x.jpg  and some trailing prose"

sanitize_url() reduces such strings to a bare URL through an ordered chain
of recovery stages. It never raises: an empty string means no URL could be
recovered.
"""

import re
from typing import Any, Callable, NamedTuple, Optional

MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]*)\]\(([^)]+)\)")
DANGLING_BRACKET_PATTERN = re.compile(r"^([^\]]+)\]")
SCHEME_URL_PATTERN = re.compile(r"https?://[^\s)\]\[<>\"]+")
DISALLOWED_CHARS_PATTERN = re.compile(r"[^A-Za-z0-9._/:\-?=&#%]")
ABSOLUTE_URL_PATTERN = re.compile(r"^https?://[A-Za-z0-9]")


class SanitizeStage(NamedTuple):
    """A single named pattern-match-and-replace step."""

    name: str
    apply: Callable[[str], str]


def _extract_markdown_target(text: str) -> str:
    """Return the target of the first [label](target) link."""
    match = MARKDOWN_LINK_PATTERN.search(text)
    return match.group(2) if match else text


def _strip_dangling_bracket(text: str) -> str:
    """Keep what precedes the first "]", recovering "url](url" leftovers."""
    match = DANGLING_BRACKET_PATTERN.match(text)
    return match.group(1) if match else text


def _extract_scheme_url(text: str) -> str:
    """Narrow to the first http(s):// run; leave the text alone if there is none."""
    match = SCHEME_URL_PATTERN.search(text)
    return match.group(0) if match else text


def _drop_disallowed_chars(text: str) -> str:
    return DISALLOWED_CHARS_PATTERN.sub("", text)


# Order matters: each stage sees the output of the previous one.
SANITIZE_STAGES: tuple[SanitizeStage, ...] = (
    SanitizeStage("markdown_link", _extract_markdown_target),
    SanitizeStage("dangling_bracket", _strip_dangling_bracket),
    SanitizeStage("scheme_match", _extract_scheme_url),
    SanitizeStage("allowed_chars", _drop_disallowed_chars),
)


def sanitize_url(value: Optional[Any]) -> str:
    """
    Clean a raw URL candidate into a bare URL.

    Args:
        value: Raw value from an upstream response. Anything that is not a
            non-empty string is treated as "no URL".

    Returns:
        The sanitized URL, or "" when nothing could be recovered. A non-empty
        result is best effort only: use is_absolute_url() before trusting it.
        Well-formed and markdown-wrapped URLs are stable under repeated
        sanitizing. Input where dropping characters joins a new scheme
        (e.g. "xhttp ://y.com") may shrink again on a second pass.
    """
    if not value or not isinstance(value, str):
        return ""

    cleaned = value.strip()
    for stage in SANITIZE_STAGES:
        cleaned = stage.apply(cleaned)

    return cleaned.strip()


def is_absolute_url(value: Optional[Any]) -> bool:
    """True for strings that start with http:// or https:// and a host character."""
    return isinstance(value, str) and bool(ABSOLUTE_URL_PATTERN.match(value))
