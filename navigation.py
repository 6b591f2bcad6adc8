"""
Previous/next links across the full devotional set.

Input is the metadata list sorted newest first. "previous" points to the
older neighbour (index + 1), "next" to the newer one (index - 1).
"""

import html
from dataclasses import dataclass

from build_catalog import DocumentMetadata
from text_utils import strip_html


@dataclass(frozen=True)
class NavigationLink:
    previous: DocumentMetadata | None = None
    next: DocumentMetadata | None = None


def link_neighbors(sorted_metadata: list[DocumentMetadata]) -> dict[str, NavigationLink]:
    """Map each date slug to its older/newer neighbours."""
    links = {}
    last = len(sorted_metadata) - 1
    for i, meta in enumerate(sorted_metadata):
        links[meta.date_slug] = NavigationLink(
            previous=sorted_metadata[i + 1] if i < last else None,
            next=sorted_metadata[i - 1] if i > 0 else None,
        )
    return links


def _nav_anchor(meta: DocumentMetadata | None, css_class: str, arrow: str) -> str:
    if meta is None:
        return f'<span class="{css_class} devo-nav__empty"></span>'
    title = html.escape(strip_html(meta.display_title))
    label = f'{arrow} {title}' if arrow == '&larr;' else f'{title} {arrow}'
    return (
        f'<a class="{css_class}" href="{html.escape(meta.file_name)}">'
        f'<span class="devo-nav__date">{html.escape(meta.date_slug)}</span>'
        f'<span class="devo-nav__title">{label}</span></a>'
    )


def render_navigation(link: NavigationLink) -> str:
    """HTML for {{prev_next_navigation}}; hidden from screenshots."""
    return (
        '<nav class="devo-nav no-screenshot">'
        + _nav_anchor(link.previous, 'devo-nav__prev', '&larr;')
        + _nav_anchor(link.next, 'devo-nav__next', '&rarr;')
        + '</nav>'
    )
