"""
Recover structured fields from a devotional post body.

WordPress block-editor markup is not parsed into a tree. Each field is an
ordered list of pattern rules; rules are tried in order, first match wins,
and every chain ends in a fixed default so extraction never fails:

  verse_ref           <cite> text -> citation pattern -> default
  verse_text          <blockquote> -> pull-quote figure -> default
  biblical_treasure   cleaned body cut at the action boundary -> whole body
  call_to_action      body after the action boundary -> "Hoy ..." paragraph
                      -> default

The action boundary ("Punto de Acción" start) is searched in priority order:
  1. label    subtitle paragraph containing "Punto de Acción"
  2. divider  <hr class="...has-alpha-channel..."> followed by a subtitle paragraph
  3. heading  <h2> with has-background
"""

import html
import re
from dataclasses import dataclass
from typing import Callable, Iterable

from text_utils import normalize_ws, strip_html


# --- Defaults ---

DEFAULT_VERSE_REF = 'Salmo 119:71 (NTV)'
DEFAULT_VERSE_TEXT = (
    '"Me hizo bien haber sido afligido, porque así pude aprender tus estatutos"'
)
DEFAULT_CALL_TO_ACTION = (
    '<p>Reflexiona en este día sobre la Palabra de Dios y ponla en práctica.</p>'
)

TREASURE_LABEL = 'Tesoro Bíblico'
ACTION_LABEL = 'Punto de Acción'
ACTION_PHRASES = ('Hoy identifica', 'Hoy puedes', 'Hoy reflexiona')


# --- Citation patterns ---

# Book-name alphabet and version-code shape per locale. Version codes are
# matched case-sensitively (NTV, NVI, RVR1960).
CITATION_LOCALES = {
    'es': {
        'book_letters': 'A-Za-záéíóúÁÉÍÓÚñÑüÜ',
        'version': r'[A-Z][A-Z0-9]*',
    },
}


def citation_pattern(locale: str = 'es') -> re.Pattern:
    """Compile '<book> <chapter>:<verse[-verse][, verse]> (<VERSION>)' for a locale.

    Ranges may use '-' or an en dash, and a period may precede the version.
    """
    table = CITATION_LOCALES[locale]
    verses = r'\d+(?:\s*[-–]\s*\d+)?'
    return re.compile(
        rf'[1-3]?\s*[{table["book_letters"]}]+\s+\d+:{verses}(?:,\s*{verses})*'
        rf'\.?\s*\({table["version"]}\)'
    )


CITATION_RE = citation_pattern()

_FLAGS = re.IGNORECASE | re.DOTALL

CITE_RE = re.compile(r'<cite[^>]*>(.*?)</cite>', _FLAGS)
BLOCKQUOTE_RE = re.compile(r'<blockquote[^>]*>(.*?)</blockquote>', _FLAGS)
PULLQUOTE_RE = re.compile(
    r'<figure[^>]*class="wp-block-pullquote\b[^"]*"[^>]*>(.*?)</figure>', _FLAGS
)
COVER_RE = re.compile(r'<div[^>]*class="wp-block-cover\b[^"]*"[^>]*>.*?</div>', _FLAGS)
POST_DATE_RE = re.compile(
    r'<div[^>]*class="wp-block-post-date\b[^"]*"[^>]*>.*?</div>', _FLAGS
)
QUERY_BLOCK_RE = re.compile(r'<div[^>]*class="wp-block-query\b[^"]*"[^>]*>.*$', _FLAGS)
GROUP_OPEN_RE = re.compile(r'<div[^>]*class="wp-block-group[^"]*"[^>]*>', _FLAGS)
DIV_CLOSE_RE = re.compile(r'</div>', re.IGNORECASE)
TRAILING_HR_RE = re.compile(r'(?:\s*<hr[^>]*>)+\s*$', re.IGNORECASE)

# (?:(?!</p>).)* keeps a label match inside a single paragraph
_IN_PARAGRAPH = r'(?:(?!</p>).)*'
TREASURE_LABEL_RE = re.compile(
    rf'<p[^>]*is-style-text-subtitle[^>]*>{_IN_PARAGRAPH}{TREASURE_LABEL}{_IN_PARAGRAPH}</p>',
    _FLAGS,
)
ACTION_LABEL_RE = re.compile(
    rf'<p[^>]*is-style-text-subtitle[^>]*>{_IN_PARAGRAPH}{ACTION_LABEL}{_IN_PARAGRAPH}</p>',
    _FLAGS,
)
DIVIDER_SUBTITLE_RE = re.compile(
    r'<hr[^>]*class="[^"]*has-alpha-channel[^"]*"[^>]*>\s*'
    rf'<p[^>]*is-style-text-subtitle[^>]*>{_IN_PARAGRAPH}</p>',
    _FLAGS,
)
HEADING_RE = re.compile(r'<h2[^>]*has-background[^>]*>(.*?)</h2>', _FLAGS)
ACTION_PHRASE_RE = re.compile(
    r'<p[^>]*>\s*(?:' + '|'.join(ACTION_PHRASES) + r').*$', re.DOTALL
)


@dataclass(frozen=True)
class ExtractedFields:
    verse_ref: str
    verse_text: str
    biblical_treasure: str
    call_to_action: str


@dataclass(frozen=True)
class ActionBoundary:
    """Where the call-to-action starts inside a prepared body.

    `start` is where the treasure ends, `end` is where the action content
    begins (after the marker). `heading` holds the h2 inner markup for
    heading boundaries.
    """
    kind: str
    start: int
    end: int
    heading: str = ''


Rule = Callable[[str], str | None]


def first_match(rules: Iterable[Rule], text: str, default: str) -> str:
    """Return the first non-empty rule result, or the default."""
    for rule in rules:
        value = rule(text)
        if value:
            return value
    return default


# ---------------------------------------------------------------------------
# Bible reference
# ---------------------------------------------------------------------------

def ref_from_cite(body: str) -> str | None:
    match = CITE_RE.search(body)
    return strip_html(match.group(1)) if match else None


def ref_from_citation(body: str) -> str | None:
    match = CITATION_RE.search(body)
    return match.group(0).strip() if match else None


VERSE_REF_RULES = (ref_from_cite, ref_from_citation)


def extract_bible_ref(body: str) -> str:
    return first_match(VERSE_REF_RULES, body or '', DEFAULT_VERSE_REF)


# ---------------------------------------------------------------------------
# Verse text
# ---------------------------------------------------------------------------

def strip_citations(text: str) -> str:
    """Remove citation-shaped text; applying it again changes nothing."""
    previous = None
    while previous != text:
        previous = text
        text = CITATION_RE.sub('', text)
    return normalize_ws(text)


def _quote_text(fragment: str) -> str:
    # <cite> holds the reference, not the verse
    return strip_citations(strip_html(CITE_RE.sub('', fragment)))


def verse_from_blockquote(body: str) -> str | None:
    match = BLOCKQUOTE_RE.search(body)
    return _quote_text(match.group(1)) if match else None


def verse_from_pullquote(body: str) -> str | None:
    match = PULLQUOTE_RE.search(body)
    return _quote_text(match.group(1)) if match else None


VERSE_TEXT_RULES = (verse_from_blockquote, verse_from_pullquote)


def extract_verse(body: str) -> str:
    return first_match(VERSE_TEXT_RULES, body or '', DEFAULT_VERSE_TEXT)


# ---------------------------------------------------------------------------
# Action boundary (shared by treasure and call to action)
# ---------------------------------------------------------------------------

def boundary_at_label(content: str) -> ActionBoundary | None:
    match = ACTION_LABEL_RE.search(content)
    if not match:
        return None
    return ActionBoundary('label', match.start(), match.end())


def boundary_at_divider(content: str) -> ActionBoundary | None:
    match = DIVIDER_SUBTITLE_RE.search(content)
    if not match:
        return None
    return ActionBoundary('divider', match.start(), match.end())


def boundary_at_heading(content: str) -> ActionBoundary | None:
    match = HEADING_RE.search(content)
    if not match:
        return None
    return ActionBoundary('heading', match.start(), match.end(), heading=match.group(1))


BOUNDARY_RULES = (boundary_at_label, boundary_at_divider, boundary_at_heading)


def find_action_boundary(content: str) -> ActionBoundary | None:
    for rule in BOUNDARY_RULES:
        boundary = rule(content)
        if boundary is not None:
            return boundary
    return None


def unwrap_groups(content: str) -> str:
    """Drop wp-block-group wrappers, keeping what they wrap."""
    content = GROUP_OPEN_RE.sub('', content)
    return DIV_CLOSE_RE.sub('', content)


def remove_query_block(content: str) -> str:
    return QUERY_BLOCK_RE.sub('', content)


# ---------------------------------------------------------------------------
# Biblical treasure
# ---------------------------------------------------------------------------

def prepare_treasure_content(body: str) -> str:
    content = COVER_RE.sub('', body, count=1)
    content = POST_DATE_RE.sub('', content, count=1)
    content = PULLQUOTE_RE.sub('', content, count=1)
    content = remove_query_block(content)
    content = TREASURE_LABEL_RE.sub('', content, count=1)
    return unwrap_groups(content)


def extract_biblical_treasure(body: str) -> str:
    content = prepare_treasure_content(body or '')
    boundary = find_action_boundary(content)
    if boundary is not None:
        content = content[:boundary.start]
    return TRAILING_HR_RE.sub('', content).strip()


# ---------------------------------------------------------------------------
# Call to action
# ---------------------------------------------------------------------------

def prepare_action_content(body: str) -> str:
    content = remove_query_block(body)
    content = TREASURE_LABEL_RE.sub('', content, count=1)
    return unwrap_groups(content)


def action_after_boundary(content: str) -> str | None:
    boundary = find_action_boundary(content)
    if boundary is None:
        return None
    rest = content[boundary.end:].strip()
    if boundary.kind == 'heading':
        return f"<p><strong>{html.escape(strip_html(boundary.heading))}</strong></p>{rest}"
    return rest or None


def action_from_phrase(content: str) -> str | None:
    match = ACTION_PHRASE_RE.search(content)
    return match.group(0).strip() if match else None


CALL_TO_ACTION_RULES = (action_after_boundary, action_from_phrase)


def extract_call_to_action(body: str) -> str:
    content = prepare_action_content(body or '')
    return first_match(CALL_TO_ACTION_RULES, content, DEFAULT_CALL_TO_ACTION)


def extract_fields(body: str) -> ExtractedFields:
    """Extract all four fields; each falls back independently."""
    return ExtractedFields(
        verse_ref=extract_bible_ref(body),
        verse_text=extract_verse(body),
        biblical_treasure=extract_biblical_treasure(body),
        call_to_action=extract_call_to_action(body),
    )
