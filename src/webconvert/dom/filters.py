"""Skip filter: decides whether a text segment may be scanned."""

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

PROCESSED_ATTR = "data-webconverted"
ORIGINAL_TEXT_ATTR = "data-original-text"

SKIPPED_TAGS = frozenset(
    {
        "script",
        "style",
        "pre",
        "code",
        "textarea",
        "input",
        "noscript",
        "iframe",
        "object",
        "embed",
        "audio",
        "video",
        "canvas",
        "svg",
        "math",
    }
)

_EDITABLE_VALUES = {"", "true", "plaintext-only"}


def is_text_segment(node) -> bool:
    """True for plain text leaves (comments, CDATA, doctypes are not text)."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def is_editable(element: Tag) -> bool:
    """Resolve inherited ``contenteditable`` like a browser would."""
    for current in [element, *element.parents]:
        if not isinstance(current, Tag) or isinstance(current, BeautifulSoup):
            break
        value = current.get("contenteditable")
        if value is None:
            continue
        if isinstance(value, list):
            value = " ".join(value)
        return value.strip().lower() in _EDITABLE_VALUES
    return False


def is_processed(container: Tag) -> bool:
    return container.has_attr(PROCESSED_ATTR)


def should_skip(node) -> bool:
    """Reject segments that must never be converted.

    No side effects; called on every observed mutation.
    """
    if not is_text_segment(node):
        return True
    parent = node.parent
    if parent is None or not isinstance(parent, Tag) or isinstance(parent, BeautifulSoup):
        return True
    if (parent.name or "").lower() in SKIPPED_TAGS:
        return True
    if is_editable(parent):
        return True
    if parent.get("translate") == "no":
        return True
    if "notranslate" in parent.get_attribute_list("class"):
        return True
    if is_processed(parent):
        return True
    return False


__all__ = [
    "PROCESSED_ATTR",
    "ORIGINAL_TEXT_ATTR",
    "SKIPPED_TAGS",
    "is_text_segment",
    "is_editable",
    "is_processed",
    "should_skip",
]
