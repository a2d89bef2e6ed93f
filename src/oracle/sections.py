"""Split a generated reading into its six named sections and apply the paywall.

The interpreter is asked to write level-2 markdown headers::

    ## Saludo
    ## Pasado
    ## Presente
    ## Futuro
    ## Síntesis
    ## Consejo

Headers are matched case- and accent-insensitively. Text without any
recognised header is kept whole and delivered unsectioned.
"""

import json
import re
import unicodedata
from dataclasses import dataclass, field, replace

SECTION_ORDER = ("saludo", "pasado", "presente", "futuro", "sintesis", "consejo")

# Sections still delivered in full when the future is hidden
FREE_SECTIONS = ("saludo", "pasado", "presente")
TEASER_SECTION = "futuro"

FULL_CONTENT_VERSION = 2

_HEADER_RE = re.compile(r"^##[ \t]+(.+?)[ \t]*$", re.MULTILINE)
_FIRST_SENTENCE_RE = re.compile(r"^[^.!?]*[.!?]")
_TEASER_FALLBACK_CHARS = 100


@dataclass
class Sections:
    """Parsed reading. ``parts`` is keyed in display order."""

    sectioned: bool
    raw: str = ""
    parts: dict[str, str] = field(default_factory=dict)
    future_hidden: bool = False

    def visible(self) -> list[tuple[str, str]]:
        """Non-empty sections in canonical order."""
        return [(key, self.parts[key]) for key in SECTION_ORDER if self.parts.get(key)]


def fold_accents(name: str) -> str:
    """Lowercase and strip diacritics: 'Síntesis' -> 'sintesis'."""
    decomposed = unicodedata.normalize("NFD", name.strip().lower())
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def parse_sections(raw_text: str) -> Sections:
    """Map each recognised header to the text up to the next recognised header."""
    matches = [m for m in _HEADER_RE.finditer(raw_text) if fold_accents(m.group(1)) in SECTION_ORDER]
    if not matches:
        return Sections(sectioned=False, raw=raw_text)

    found: dict[str, str] = {}
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(raw_text)
        found[fold_accents(match.group(1))] = raw_text[match.end() : end].strip()

    parts = {key: found[key] for key in SECTION_ORDER if key in found}
    return Sections(sectioned=True, raw=raw_text, parts=parts)


def _teaser(text: str) -> str:
    first = _FIRST_SENTENCE_RE.match(text)
    if first:
        return first.group(0) + " ..."
    return text[:_TEASER_FALLBACK_CHARS] + "..."


def filter_for_paywall(sections: Sections, future_hidden: bool) -> Sections:
    """Reduce a reading to what a user without future access may see.

    saludo/pasado/presente pass through, futuro shrinks to its first sentence,
    sintesis and consejo are dropped. Already-filtered input is returned as is.
    """
    if not future_hidden or not sections.sectioned or sections.future_hidden:
        return sections

    parts = {key: sections.parts[key] for key in FREE_SECTIONS if key in sections.parts}
    if sections.parts.get(TEASER_SECTION):
        parts[TEASER_SECTION] = _teaser(sections.parts[TEASER_SECTION])

    return replace(sections, parts=parts, future_hidden=True)


def visible_text(sections: Sections) -> str:
    """Full text the client may see, as delivered in the legacy interpretation event."""
    if not sections.sectioned:
        return sections.raw
    return "\n\n".join(text for _, text in sections.visible())


def to_full_content(sections: Sections) -> str:
    """Serialize the unfiltered reading for storage (version 2 message content)."""
    return json.dumps(
        {
            "_version": FULL_CONTENT_VERSION,
            "sections": dict(sections.visible()),
            "rawText": sections.raw,
        },
        ensure_ascii=False,
    )


def sections_from_full_content(content: str) -> Sections | None:
    """Decode version 2 message content; None for legacy plain text."""
    try:
        payload = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(payload, dict) or payload.get("_version") != FULL_CONTENT_VERSION:
        return None
    stored = payload.get("sections")
    if not isinstance(stored, dict):
        return None
    parts = {key: str(stored[key]) for key in SECTION_ORDER if stored.get(key)}
    return Sections(sectioned=True, raw=str(payload.get("rawText", "")), parts=parts)
