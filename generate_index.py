#!/usr/bin/env python3
"""
Generate the index page from devocionales.json.

The index template is plain HTML; the catalog is embedded before </body>
as `window.__DEVOCIONALES`, so the page works from file:// and from any
static host without fetching the JSON.

Usage:
    python generate_index.py [--catalog PATH] [--template PATH] [--output PATH]
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any


INDEX_FILENAME = 'index.html'
DATA_VARIABLE = 'window.__DEVOCIONALES'


def load_catalog(catalog_path: Path) -> list[dict[str, Any]]:
    """Load devocionales.json."""
    with open(catalog_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def embed_catalog(index_html: str, entries: list[dict[str, Any]]) -> str:
    """Inject the catalog as a script tag before </body> (or at the end)."""
    data = json.dumps(entries, ensure_ascii=False, separators=(',', ':'))
    # Escape </script> inside embedded JSON to prevent premature tag closing
    data = data.replace('</script>', '<\\/script>')
    inject = f'<script>{DATA_VARIABLE} = {data};</script>\n'

    if '</body>' in index_html:
        return index_html.replace('</body>', inject + '</body>', 1)
    return index_html + '\n' + inject


def write_index_page(
    template_path: Path,
    entries: list[dict[str, Any]],
    output_path: Path,
) -> Path | None:
    """Write the index page; returns None when there is no template."""
    if not template_path.exists():
        return None
    index_html = embed_catalog(template_path.read_text(encoding='utf-8'), entries)
    output_path.write_text(index_html, encoding='utf-8')
    return output_path


def main():
    parser = argparse.ArgumentParser(description='Generate index.html from devocionales.json')
    parser.add_argument('--catalog', type=Path, default=Path('output/devocionales.json'),
                        help='Path to devocionales.json')
    parser.add_argument('--template', type=Path, default=Path('index-template.html'),
                        help='Index page template')
    parser.add_argument('--output', type=Path, default=None,
                        help='Output file (default: index.html next to the catalog)')
    args = parser.parse_args()

    if not args.catalog.exists():
        print(f"Error: Catalog not found: {args.catalog}")
        print("Run build_site.py or build_catalog.py first.")
        sys.exit(1)

    entries = load_catalog(args.catalog)
    output = args.output or args.catalog.parent / INDEX_FILENAME
    written = write_index_page(args.template, entries, output)
    if written is None:
        print(f"Error: Index template not found: {args.template}")
        sys.exit(1)

    size_kb = written.stat().st_size / 1024
    print(f"Generated: {written} ({size_kb:.0f} KB, {len(entries)} devotionals)")


if __name__ == '__main__':
    main()
