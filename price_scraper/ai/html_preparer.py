"""HTML condensing for language-model extraction.

Strips noise, narrows to the main content container and enforces a hard
character budget so the excerpt sent to the model is bounded.
"""

import logging
import re
from typing import Optional

from selectolax.parser import HTMLParser

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "... [truncated]"
NOISE_TAGS = ("style", "noscript", "iframe")
CONTENT_CONTAINERS = ("main", "article")
JSON_LD_TYPE = "application/ld+json"

_WHITESPACE_RE = re.compile(r"\s+")


def clean_html(parser: HTMLParser) -> None:
    """Remove scripts (keeping JSON-LD product data), styles, noscript and iframes."""
    for node in parser.css("script"):
        script_type = (node.attributes.get("type") or "").strip().lower()
        if script_type != JSON_LD_TYPE:
            node.decompose()
    for tag in NOISE_TAGS:
        for node in parser.css(tag):
            node.decompose()


def extract_main_content(parser: HTMLParser, min_content_length: int) -> str:
    """Pick the narrowest container with enough content, falling back to body."""
    for tag in CONTENT_CONTAINERS:
        node = parser.css_first(tag)
        if node is None:
            continue
        content = node.html or ""
        if len(content) >= min_content_length:
            logger.debug(f"Using <{tag}> with {len(content)} chars")
            return content
        logger.debug(f"<{tag}> content too small ({len(content)} < {min_content_length})")

    if parser.body is not None and parser.body.html:
        logger.debug(f"Using <body> with {len(parser.body.html)} chars")
        return parser.body.html

    logger.debug("No body found, using full HTML")
    return parser.html or ""


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate_text(text: str, max_chars: int) -> str:
    """Truncate so the result, marker included, is at most ``max_chars`` long."""
    if len(text) <= max_chars:
        return text
    if max_chars <= len(TRUNCATION_MARKER):
        return text[:max_chars]
    return text[:max_chars - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER


def prepare_html_for_ai(
    html: Optional[str],
    max_chars: int = 150000,
    min_content_length: int = 3000,
) -> str:
    """
    Prepare rendered HTML for a model call.

    Args:
        html: Fully rendered page markup
        max_chars: Hard budget for the returned excerpt
        min_content_length: Minimum container size before falling back

    Returns:
        Cleaned, whitespace-normalized excerpt no longer than ``max_chars``
    """
    if not html:
        return ""

    logger.debug(f"Input HTML length: {len(html)} chars")
    parser = HTMLParser(html)
    clean_html(parser)

    content = extract_main_content(parser, min_content_length)
    normalized = normalize_whitespace(content)
    excerpt = truncate_text(normalized, max_chars)

    logger.debug(
        f"Prepared HTML: {len(content)} -> {len(normalized)} -> {len(excerpt)} chars (max {max_chars})"
    )
    return excerpt
