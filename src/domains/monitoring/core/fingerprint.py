"""Structural fingerprint extraction from HTML content."""

from __future__ import annotations

from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag


@dataclass(frozen=True)
class PageFingerprint:
    """What a page references, not what it says.

    Script, stylesheet and image URLs are unordered sets; meta tags map
    name (or property) to content.
    """

    scripts: frozenset[str] = frozenset()
    styles: frozenset[str] = frozenset()
    images: frozenset[str] = frozenset()
    meta_tags: dict[str, str] = field(default_factory=dict)


def _attr(tag: Tag, name: str) -> str:
    """Read a tag attribute as a stripped string, joining multi-valued attributes."""
    value = tag.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        value = " ".join(value)
    return str(value).strip()


def _is_stylesheet(tag: Tag) -> bool:
    rel = tag.get("rel")
    if not rel:
        return False
    if isinstance(rel, str):
        rel = rel.split()
    return any(str(item).lower() == "stylesheet" for item in rel)


def extract_fingerprint(html: str) -> PageFingerprint:
    """Extract script, stylesheet, image and meta tag references from HTML.

    Uses the stdlib-backed ``html.parser`` builder, which recovers from
    malformed markup instead of raising. Empty attribute values are ignored.
    """
    soup = BeautifulSoup(html, "html.parser")

    scripts = {_attr(tag, "src") for tag in soup.find_all("script", src=True)}
    styles = {
        _attr(tag, "href") for tag in soup.find_all("link", href=True) if _is_stylesheet(tag)
    }
    images = {_attr(tag, "src") for tag in soup.find_all("img", src=True)}

    meta_tags: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        key = _attr(tag, "name") or _attr(tag, "property")
        content = _attr(tag, "content")
        if key and content:
            meta_tags[key] = content

    return PageFingerprint(
        scripts=frozenset(scripts - {""}),
        styles=frozenset(styles - {""}),
        images=frozenset(images - {""}),
        meta_tags=meta_tags,
    )
