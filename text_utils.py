"""
Markup and text helpers shared by the extractor, the catalog and the feed.

All functions are pure and tolerate None/empty input.
"""

import html
import re
from datetime import date, datetime


STYLE_BLOCK_RE = re.compile(r'<style[^>]*>.*?</style>', re.IGNORECASE | re.DOTALL)
SCRIPT_BLOCK_RE = re.compile(r'<script[^>]*>.*?</script>', re.IGNORECASE | re.DOTALL)
TAG_RE = re.compile(r'<[^>]+>')
INLINE_STYLE_RE = re.compile(r'\s+style\s*=\s*(?:"[^"]*"|\'[^\']*\')', re.IGNORECASE)
WS_RE = re.compile(r'\s+')

WEEKDAYS = ['lunes', 'martes', 'miércoles', 'jueves', 'viernes', 'sábado', 'domingo']
MONTHS = [
    'enero', 'febrero', 'marzo', 'abril', 'mayo', 'junio',
    'julio', 'agosto', 'septiembre', 'octubre', 'noviembre', 'diciembre',
]


def decode_entities(text: str) -> str:
    """Decode HTML entities; non-breaking spaces become plain spaces."""
    return html.unescape(text or '').replace('\xa0', ' ')


def strip_html(markup: str) -> str:
    """Return the plain text of a markup fragment."""
    if not markup:
        return ''
    text = STYLE_BLOCK_RE.sub('', markup)
    text = SCRIPT_BLOCK_RE.sub('', text)
    text = TAG_RE.sub('', text)
    return decode_entities(text).strip()


def strip_inline_styles(markup: str) -> str:
    """Remove style="..." attributes, keeping the tags themselves."""
    return INLINE_STYLE_RE.sub('', markup or '')


def normalize_ws(text: str) -> str:
    return WS_RE.sub(' ', text or '').strip()


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # WordPress gives local time without offset ("2025-12-08T06:00:00")
    return datetime.fromisoformat(str(value).replace('Z', '+00:00')).date()


def format_spanish_date(value) -> str:
    """lunes 8 de diciembre de 2025"""
    d = _as_date(value)
    return f"{WEEKDAYS[d.weekday()]} {d.day} de {MONTHS[d.month - 1]} de {d.year}"


def format_display_date(value) -> str:
    """LUNES 8 DE DICIEMBRE DE 2025, as shown in the page header."""
    return format_spanish_date(value).upper()
