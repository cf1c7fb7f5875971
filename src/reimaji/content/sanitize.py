"""Allow-list HTML sanitizer for editor-authored content.

Tags outside the allow-list are dropped but their text is kept, except for
script-like tags whose content is discarded too. Attributes are limited per
tag, link/image URLs must use a safe scheme and links get
``rel="noopener noreferrer"``.
"""

from __future__ import annotations

import nh3

ALLOWED_TAGS = {
    "a", "abbr", "b", "blockquote", "br", "caption", "cite", "code", "dd", "div",
    "dl", "dt", "em", "figcaption", "figure", "h1", "h2", "h3", "h4", "h5", "h6",
    "hr", "i", "img", "kbd", "li", "mark", "ol", "p", "pre", "q", "s", "small",
    "span", "strong", "sub", "sup", "table", "tbody", "td", "tfoot", "th",
    "thead", "tr", "u", "ul",
}
ALLOWED_ATTRIBUTES: dict[str, set[str]] = {
    "a": {"href", "name", "target"},
    "img": {"src", "alt", "title", "width", "height"},
    "td": {"colspan", "rowspan"},
    "th": {"colspan", "rowspan", "scope"},
}
ALLOWED_SCHEMES = {"http", "https", "mailto", "tel"}
DISCARD_CONTENT_TAGS = {"script", "style", "iframe", "object", "textarea", "noscript", "template"}


def sanitize_html(value: str) -> str:
    """Return `value` with only allow-listed markup left."""
    return nh3.clean(
        value,
        tags=ALLOWED_TAGS,
        clean_content_tags=DISCARD_CONTENT_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        url_schemes=ALLOWED_SCHEMES,
    )
