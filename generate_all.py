#!/usr/bin/env python3
"""
Generate everything: the podcast feed, then the devotional pages.

Each step runs even if the other fails; the exit status is 1 when any
step failed.

Usage:
    python generate_all.py
"""

import sys
from pathlib import Path

from build_site import TemplateError, build_site
from config import ConfigError, load_config
from fetch_source import SourceError
from generate_podcast_rss import FeedConfigError, generate_feed, load_podcast_settings


def run_feed():
    settings = load_podcast_settings(Path('podcast.yaml'))
    generate_feed(settings, Path('podcast.xml'), Path('episodes-list.json'))


def run_site():
    build_site(load_config())


STEPS = [
    ('Podcast RSS', run_feed),
    ('HTML from JSON', run_site),
]


def main():
    print('=' * 50)
    print('  DEVOTIONAL GENERATOR')
    print('=' * 50)

    failures = []
    for index, (name, step) in enumerate(STEPS, 1):
        print(f"\n[{index}/{len(STEPS)}] {name}")
        print('-' * 50)
        try:
            step()
            print(f"OK: {name}")
        except (ConfigError, TemplateError, SourceError, FeedConfigError, OSError) as e:
            failures.append(name)
            print(f"Error in {name}: {e}")
        except Exception as e:
            failures.append(name)
            print(f"Error in {name}: {type(e).__name__}: {e}")

    print()
    print('=' * 50)
    print(f"  Succeeded: {len(STEPS) - len(failures)}/{len(STEPS)}")
    print(f"  Failed:    {len(failures)}/{len(STEPS)}")
    print('=' * 50)

    if failures:
        sys.exit(1)

    print("\nGenerated files:")
    print("  podcast.xml           (RSS feed)")
    print("  episodes-list.json    (episode list)")
    print("  output/*.html         (one page per devotional)")
    print("  output/devocionales.json")


if __name__ == '__main__':
    main()
