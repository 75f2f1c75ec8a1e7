"""Closed vocabulary of element type tags and fuzzy suggestions against it."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

ESSENTIAL_NAMESPACE = "EssentialElements\\"
OXYGEN_NAMESPACE = "OxygenElements\\"
VALID_NAMESPACES: Tuple[str, ...] = (ESSENTIAL_NAMESPACE, OXYGEN_NAMESPACE)

_ESSENTIAL_TYPES = (
    "Section",
    "Container",
    "Div",
    "Columns",
    "Column",
    "Grid",
    "Heading",
    "Text",
    "RichText",
    "TextEditor",
    "Button",
    "ButtonV2",
    "Link",
    "Image",
    "Image2",
    "Icon",
    "IconBox",
    "IconList",
    "Video",
    "Audio",
    "Spacer",
    "Divider",
    "Tabs",
    "Accordion",
    "Slider",
    "Gallery",
    "Testimonial",
    "PricingTable",
    "Counter",
    "ProgressBar",
    "StarRating",
    "SocialIcons",
    "GoogleMap",
    "FormBuilder",
    "LoginForm",
    "SearchForm",
    "WpMenu",
    "MenuBuilder",
    "HeaderBuilder",
    "PostsList",
    "PostTitle",
    "PostContent",
    "PostExcerpt",
    "FeaturedImage",
    "Breadcrumbs",
    "Shortcode",
    "CodeBlock",
    "Popup",
    "Countdown",
    "Table",
)

_OXYGEN_TYPES = (
    "Container",
    "Text",
    "RichText",
    "TextLink",
    "Image",
    "HtmlCode",
    "CssCode",
    "PhpCode",
    "JavaScriptCode",
    "Shortcode",
    "Template",
)

ELEMENT_TYPES: Tuple[str, ...] = tuple(ESSENTIAL_NAMESPACE + name for name in _ESSENTIAL_TYPES) + tuple(
    OXYGEN_NAMESPACE + name for name in _OXYGEN_TYPES
)

_KNOWN = frozenset(ELEMENT_TYPES)

SUGGESTION_LIMIT = 3
SUGGESTION_THRESHOLD = 0.6
SUBSTRING_BONUS = 3


def short_name(element_type: str) -> str:
    return element_type.rsplit("\\", 1)[-1]


def has_valid_namespace(element_type: str) -> bool:
    return element_type.startswith(VALID_NAMESPACES)


def is_known_type(element_type: str) -> bool:
    return element_type in _KNOWN


def levenshtein(left: str, right: str) -> int:
    if left == right:
        return 0
    if not left:
        return len(right)
    if not right:
        return len(left)
    previous = list(range(len(right) + 1))
    for i, lch in enumerate(left, start=1):
        current = [i]
        for j, rch in enumerate(right, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (lch != rch),
                )
            )
        previous = current
    return previous[-1]


def _score(candidate: str, value: str) -> Tuple[float, bool]:
    needle = value.lower()
    best: Optional[Tuple[int, int]] = None
    for target in (candidate.lower(), short_name(candidate).lower()):
        distance = levenshtein(needle, target)
        if best is None or distance < best[0]:
            best = (distance, max(len(needle), len(target)))
    distance, maxlen = best
    substring = any(
        needle in target or target in needle for target in (candidate.lower(), short_name(candidate).lower())
    )
    bonus = SUBSTRING_BONUS if substring else 0
    return (maxlen - distance + bonus) / maxlen, substring


def suggest_types(value: str, vocabulary: Tuple[str, ...] = ELEMENT_TYPES, limit: int = SUGGESTION_LIMIT) -> List[str]:
    """Closest known types to ``value``, best first. Deterministic for a given vocabulary."""
    if not value:
        return []
    scored: List[Tuple[float, int, str]] = []
    for order, candidate in enumerate(vocabulary):
        score, substring = _score(candidate, value)
        if score >= SUGGESTION_THRESHOLD or substring:
            scored.append((score, order, candidate))
    scored.sort(key=lambda item: (-item[0], item[1]))
    return [candidate for _, _, candidate in scored[:limit]]


def _short_name_index() -> Dict[str, str]:
    index: Dict[str, str] = {}
    for element_type in ELEMENT_TYPES:
        index.setdefault(short_name(element_type).lower(), element_type)
    return index


_SHORT_NAMES = _short_name_index()


def match_short_name(value: str) -> Optional[str]:
    """Exact case-insensitive short-name match; EssentialElements wins over OxygenElements."""
    return _SHORT_NAMES.get(value.strip().lower())
