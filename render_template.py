"""
Fill {{name}} placeholders in the page template.

The template markup is opaque: only {{name}} tokens are touched, in a
single pass, so replacement values are never scanned for tokens and
unknown tokens are left as they are.
"""

import re
from typing import Mapping

from build_catalog import DocumentMetadata
from extract_fields import ExtractedFields
from navigation import NavigationLink, render_navigation
from text_utils import format_display_date


TOKEN_RE = re.compile(r'\{\{([A-Za-z0-9_]+)\}\}')

PAGE_TOKENS = (
    'verse_ref', 'date', 'verse_text', 'devotional_title', 'biblical_treasure',
    'call_to_action', 'audio_filename', 'png_filename', 'css_variant',
    'cover_image', 'prev_next_navigation',
)


def render_template(template: str, values: Mapping[str, str]) -> str:
    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name in values:
            return str(values[name])
        return match.group(0)

    return TOKEN_RE.sub(substitute, template)


def resolve_globals(template: str, audio_base_url: str) -> str:
    """Replace the run-wide tokens once, before any page is rendered."""
    return render_template(template, {'audio_server_url': audio_base_url})


def template_values(
    meta: DocumentMetadata,
    fields: ExtractedFields,
    link: NavigationLink,
) -> dict[str, str]:
    """Per-page values for every token in PAGE_TOKENS."""
    return {
        'verse_ref': fields.verse_ref,
        'date': format_display_date(meta.published),
        'verse_text': fields.verse_text,
        'devotional_title': meta.display_title,
        'biblical_treasure': fields.biblical_treasure,
        'call_to_action': fields.call_to_action,
        'audio_filename': f"{meta.date_slug}.mp3",
        'png_filename': f"{meta.date_slug}.png",
        'css_variant': meta.css_variant,
        'cover_image': f"images/{meta.banner}",
        'prev_next_navigation': render_navigation(link),
    }
