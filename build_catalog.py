#!/usr/bin/env python3
"""
Build devocionales.json from WordPress posts.

Derives one metadata record per post (date slug, display title, verse,
presentation variant, file names) and writes the public catalog sorted
newest first. build_site.py runs the same steps as its first pass.

Usage:
    python build_catalog.py [--source URL|PATH] [--output PATH] [--validate] [--stats]

Options:
    --source PATH   WordPress posts endpoint or local JSON file
                    Default: $DEVO_JSON_SOURCE or the cenfolic.com API
    --output PATH   Output catalog file path
                    Default: devocionales.json
"""

import argparse
import json
import re
import sys
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from config import ConfigError, load_config
from extract_fields import DEFAULT_VERSE_REF, DEFAULT_VERSE_TEXT, extract_bible_ref, extract_verse
from fetch_source import SourceDocument, SourceError, load_posts
from text_utils import strip_inline_styles


CATALOG_FILENAME = 'devocionales.json'
VARIANT_COUNT = 7

LINK_DATE_RE = re.compile(r'(\d{4})/(\d{2})/(\d{2})')


@dataclass(frozen=True)
class DocumentMetadata:
    date_slug: str
    display_title: str
    verse_ref: str
    verse_text: str
    file_name: str
    css_variant: str
    banner: str
    published: str
    # Internal only: never written to the catalog
    document: SourceDocument | None = field(default=None, repr=False, compare=False)


def date_slug_for(link: str, slug: str) -> str:
    """YYYY-MM-DD from a /YYYY/MM/DD/ permalink, else the slug unchanged."""
    match = LINK_DATE_RE.search(link or '')
    if match:
        return f"{match.group(1)}-{match.group(2)}-{match.group(3)}"
    return slug


def presentation_variant(date_slug: str) -> str:
    """One of '01'..'07', a pure function of the digits in the slug."""
    digits = ''.join(ch for ch in date_slug if ch.isdigit())
    number = int(digits) if digits else 0
    return f"{number % VARIANT_COUNT + 1:02d}"


class UnsafeSlugError(ValueError):
    """The date slug cannot name a file inside the output directory."""


def unsafe_slug_reason(date_slug: str) -> str | None:
    """Why `date_slug` is not usable as a file name, or None when it is."""
    if not date_slug.strip():
        return 'empty slug'
    if any(ch in date_slug for ch in ('/', '\\', '\x00')) or '..' in date_slug:
        return 'path separator or ".." in slug'
    return None


def build_metadata(document: SourceDocument) -> DocumentMetadata:
    date_slug = date_slug_for(document.link, document.slug)
    reason = unsafe_slug_reason(date_slug)
    if reason:
        raise UnsafeSlugError(f"{date_slug!r}: {reason}")
    variant = presentation_variant(date_slug)
    return DocumentMetadata(
        date_slug=date_slug,
        display_title=strip_inline_styles(document.title).strip(),
        verse_ref=extract_bible_ref(document.body),
        verse_text=extract_verse(document.body),
        file_name=f"{date_slug}.html",
        css_variant=variant,
        banner=f"devo-{variant}.jpg",
        published=document.date,
        document=document,
    )


def sort_newest_first(metadata: list[DocumentMetadata]) -> list[DocumentMetadata]:
    # Fixed-width YYYY-MM-DD slugs sort correctly as strings
    return sorted(metadata, key=lambda m: m.date_slug, reverse=True)


def find_duplicate_slugs(metadata: list[DocumentMetadata]) -> list[str]:
    counts = Counter(m.date_slug for m in metadata)
    return sorted(slug for slug, count in counts.items() if count > 1)


def drop_duplicate_slugs(metadata: list[DocumentMetadata]) -> list[DocumentMetadata]:
    """Keep the first record per date slug, in input order."""
    seen = set()
    unique = []
    for meta in metadata:
        if meta.date_slug in seen:
            continue
        seen.add(meta.date_slug)
        unique.append(meta)
    return unique


def collect_metadata(documents: list[SourceDocument]) -> list[DocumentMetadata]:
    """One record per document, in input order.

    Posts whose slug would leave the output directory are skipped with a
    warning. Any other exception propagates, since navigation needs the
    complete set.
    """
    metadata = []
    for document in documents:
        try:
            metadata.append(build_metadata(document))
        except UnsafeSlugError as e:
            print(f"  Warning: skipping post {document.id}, unsafe file name {e}", flush=True)
    return metadata


def order_catalog(metadata: list[DocumentMetadata]) -> list[DocumentMetadata]:
    """Newest first, one record per date slug."""
    duplicates = find_duplicate_slugs(metadata)
    if duplicates:
        print(f"  Warning: duplicate date slugs, keeping the first post for each: "
              f"{', '.join(duplicates)}", flush=True)
        metadata = drop_duplicate_slugs(metadata)
    return sort_newest_first(metadata)


def build_catalog(documents: list[SourceDocument]) -> list[DocumentMetadata]:
    return order_catalog(collect_metadata(documents))


def catalog_entry(meta: DocumentMetadata) -> dict[str, Any]:
    return {
        'date': meta.date_slug,
        'title': meta.display_title,
        'verse_ref': meta.verse_ref,
        'verse_text': meta.verse_text,
        'file': meta.file_name,
        'css_variant': meta.css_variant,
        'banner': meta.banner,
        'published': meta.published,
    }


def catalog_entries(metadata: list[DocumentMetadata]) -> list[dict[str, Any]]:
    return [catalog_entry(meta) for meta in sort_newest_first(metadata)]


def write_catalog(metadata: list[DocumentMetadata], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(catalog_entries(metadata), f, indent=2, ensure_ascii=False)
        f.write('\n')
    return path


def validate_catalog(
    metadata: list[DocumentMetadata],
    documents: list[SourceDocument] = (),
) -> list[str]:
    """Check for slugs that are not YYYY-MM-DD, skipped posts and fallback fields."""
    issues = []
    for document in documents:
        date_slug = date_slug_for(document.link, document.slug)
        reason = unsafe_slug_reason(date_slug)
        if reason:
            issues.append(f"{date_slug!r}: {reason}, post skipped")
    for meta in metadata:
        if not re.fullmatch(r'\d{4}-\d{2}-\d{2}', meta.date_slug):
            issues.append(f"{meta.date_slug}: slug is not a YYYY-MM-DD date")
        if meta.verse_ref == DEFAULT_VERSE_REF:
            issues.append(f"{meta.date_slug}: no bible reference found, using default")
        if meta.verse_text == DEFAULT_VERSE_TEXT:
            issues.append(f"{meta.date_slug}: no verse found, using default")
    return issues


def print_variant_stats(metadata: list[DocumentMetadata]) -> None:
    counts = Counter(m.css_variant for m in metadata)
    print("\n--- Variant Distribution ---")
    for variant in sorted(counts):
        print(f"  devo-{variant}: {counts[variant]}")
    print(f"\nTotal devotionals: {len(metadata)}")


def main():
    try:
        config = load_config()
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    parser = argparse.ArgumentParser(
        description='Build devocionales.json from WordPress posts'
    )
    parser.add_argument(
        '--source',
        default=config.json_source,
        help='Posts endpoint URL or local JSON file'
    )
    parser.add_argument(
        '--output',
        type=Path,
        default=Path(CATALOG_FILENAME),
        help='Output catalog file path'
    )
    parser.add_argument(
        '--validate',
        action='store_true',
        help='Report malformed slugs and fallback fields'
    )
    parser.add_argument(
        '--stats',
        action='store_true',
        help='Print presentation variant distribution'
    )

    args = parser.parse_args()

    try:
        documents = load_posts(args.source)
    except SourceError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Posts found: {len(documents)}")
    metadata = build_catalog(documents)
    write_catalog(metadata, args.output)

    print(f"\nCatalog written to {args.output}")
    print(f"Total devotionals: {len(metadata)}")

    if args.validate:
        issues = validate_catalog(metadata, documents)
        if issues:
            print("\n--- Validation Issues ---")
            for issue in issues:
                print(f"  {issue}")
        else:
            print("\nNo validation issues found.")

    if args.stats:
        print_variant_stats(metadata)


if __name__ == '__main__':
    main()
