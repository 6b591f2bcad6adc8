#!/usr/bin/env python3
"""
Generate the podcast RSS feed for the daily devotional audio.

Channel settings come from podcast.yaml (built-in defaults otherwise).
Episodes are one per day from `start_date` to today, each pointing to
{audio_base_url}{YYYY-MM-DD}.mp3, or, with --from-index, one per entry of
a devocionales.json catalog so titles match the published pages.

Usage:
    python generate_podcast_rss.py [--config PATH] [--output PATH]
                                   [--from-index PATH] [--end-date YYYY-MM-DD]

Produces:
    podcast.xml          - RSS 2.0 feed with iTunes tags
    episodes-list.json   - the same episodes as plain data
"""

import argparse
import json
import sys
import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timedelta, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import Any

import yaml

from text_utils import format_spanish_date, strip_html


ITUNES_NS = 'http://www.itunes.com/dtds/podcast-1.0.dtd'
ATOM_NS = 'http://www.w3.org/2005/Atom'

ET.register_namespace('itunes', ITUNES_NS)
ET.register_namespace('atom', ATOM_NS)

DEFAULT_SETTINGS: dict[str, Any] = {
    'title': 'Devocionales Diarios - Cenfolic',
    'description': (
        'Reflexiones bíblicas diarias para fortalecer tu fe y caminar con Dios '
        'cada día. Meditaciones inspiradoras basadas en la Palabra de Dios.'
    ),
    'link': 'https://cenfolic.com',
    'language': 'es-ES',
    'categories': [
        {'main': 'Religion & Spirituality', 'sub': 'Christianity'},
        {'main': 'Education', 'sub': 'Self-Improvement'},
    ],
    'image_url': 'https://cenfolic.com/images/podcast-cover.jpg',
    'author': 'Cenfolic',
    'owner': {'name': 'Cenfolic', 'email': 'podcast@cenfolic.com'},
    'explicit': 'no',
    'copyright': None,
    'audio_base_url': 'https://cenfolic.com/audio/devo/',
    'start_date': '2025-12-08',
    'episode_duration': '00:05:00',
}


class FeedConfigError(ValueError):
    """podcast.yaml is unreadable or malformed."""


@dataclass
class Episode:
    title: str
    description: str
    audio_file: str
    pub_date: str
    duration: str
    season: int
    explicit: str = 'no'
    episode_number: int | None = None


def _itunes(tag: str) -> str:
    return f'{{{ITUNES_NS}}}{tag}'


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def load_podcast_settings(path: Path | None) -> dict[str, Any]:
    """Defaults overlaid with the keys found in the YAML file."""
    settings = dict(DEFAULT_SETTINGS)
    if path is not None and path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding='utf-8')) or {}
        except yaml.YAMLError as e:
            raise FeedConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise FeedConfigError(f"{path} must hold a mapping of settings")
        settings.update({k: v for k, v in data.items() if v is not None})
    if not settings.get('copyright'):
        settings['copyright'] = (
            f"© {date.today().year} {settings['author']}. Todos los derechos reservados."
        )
    return settings


# ---------------------------------------------------------------------------
# Episodes
# ---------------------------------------------------------------------------

def _pub_date(day: date) -> str:
    return format_datetime(datetime.combine(day, time(0, 0), tzinfo=timezone.utc), usegmt=True)


def episodes_for_range(start: date, end: date, settings: dict[str, Any]) -> list[Episode]:
    """One episode per day, start to end inclusive, oldest first."""
    episodes = []
    day = start
    while day <= end:
        spoken = format_spanish_date(day)
        episodes.append(Episode(
            title=f"Devocional del {spoken}",
            description=(
                f"Reflexión bíblica para el día {spoken}. Únete a nosotros en esta "
                f"meditación diaria de la Palabra de Dios."
            ),
            audio_file=f"{day.isoformat()}.mp3",
            pub_date=_pub_date(day),
            duration=str(settings['episode_duration']),
            season=day.year,
            explicit=str(settings['explicit']),
        ))
        day += timedelta(days=1)
    return episodes


def episodes_from_catalog(entries: list[dict[str, Any]], settings: dict[str, Any]) -> list[Episode]:
    """One episode per catalog entry whose date is YYYY-MM-DD, oldest first."""
    episodes = []
    for entry in sorted(entries, key=lambda e: e.get('date', '')):
        try:
            day = _as_date(entry['date'])
        except (KeyError, ValueError):
            print(f"  Warning: skipping catalog entry without a valid date: {entry.get('date')}")
            continue
        title = strip_html(entry.get('title', '')) or f"Devocional del {format_spanish_date(day)}"
        verse = ' '.join(part for part in (entry.get('verse_text'), entry.get('verse_ref')) if part)
        episodes.append(Episode(
            title=title,
            description=verse or f"Reflexión bíblica para el día {format_spanish_date(day)}.",
            audio_file=f"{entry['date']}.mp3",
            pub_date=_pub_date(day),
            duration=str(settings['episode_duration']),
            season=day.year,
            explicit=str(settings['explicit']),
        ))
    return episodes


def number_episodes(episodes: list[Episode]) -> list[Episode]:
    """Newest first, numbered so the newest episode has the highest number."""
    ordered = list(reversed(episodes))
    for index, episode in enumerate(ordered):
        episode.episode_number = len(ordered) - index
    return ordered


# ---------------------------------------------------------------------------
# Feed XML
# ---------------------------------------------------------------------------

def build_feed(settings: dict[str, Any], episodes: list[Episode]) -> ET.Element:
    rss = ET.Element('rss', {'version': '2.0'})
    channel = ET.SubElement(rss, 'channel')

    for tag, key in (('title', 'title'), ('link', 'link'), ('language', 'language'),
                     ('copyright', 'copyright'), ('description', 'description')):
        ET.SubElement(channel, tag).text = str(settings.get(key) or '')

    ET.SubElement(channel, _itunes('author')).text = settings['author']
    ET.SubElement(channel, _itunes('summary')).text = settings['description']
    owner = ET.SubElement(channel, _itunes('owner'))
    ET.SubElement(owner, _itunes('name')).text = settings['owner']['name']
    ET.SubElement(owner, _itunes('email')).text = settings['owner']['email']
    ET.SubElement(channel, _itunes('explicit')).text = str(settings['explicit'])
    ET.SubElement(channel, _itunes('image'), {'href': settings['image_url']})

    for category in settings.get('categories') or []:
        main = ET.SubElement(channel, _itunes('category'), {'text': category['main']})
        if category.get('sub'):
            ET.SubElement(main, _itunes('category'), {'text': category['sub']})

    ET.SubElement(channel, f'{{{ATOM_NS}}}link', {
        'href': f"{settings['link'].rstrip('/')}/podcast.xml",
        'rel': 'self',
        'type': 'application/rss+xml',
    })

    for episode in episodes:
        audio_url = f"{settings['audio_base_url']}{episode.audio_file}"
        item = ET.SubElement(channel, 'item')
        ET.SubElement(item, 'title').text = episode.title
        ET.SubElement(item, 'description').text = episode.description
        ET.SubElement(item, 'pubDate').text = episode.pub_date
        ET.SubElement(item, 'enclosure', {'url': audio_url, 'type': 'audio/mpeg'})
        ET.SubElement(item, 'guid', {'isPermaLink': 'false'}).text = audio_url
        ET.SubElement(item, _itunes('duration')).text = episode.duration
        ET.SubElement(item, _itunes('explicit')).text = episode.explicit
        if episode.episode_number is not None:
            ET.SubElement(item, _itunes('episode')).text = str(episode.episode_number)
        ET.SubElement(item, _itunes('season')).text = str(episode.season)
        ET.SubElement(item, _itunes('episodeType')).text = 'full'

    return rss


def render_feed(settings: dict[str, Any], episodes: list[Episode]) -> str:
    rss = build_feed(settings, episodes)
    ET.indent(rss, space='  ')
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(rss, encoding='unicode') + '\n'


def generate_feed(
    settings: dict[str, Any],
    output: Path,
    episodes_output: Path,
    catalog_path: Path | None = None,
    end_date: date | None = None,
) -> list[Episode]:
    """Write podcast.xml and episodes-list.json; returns the episodes."""
    if catalog_path is not None:
        entries = json.loads(catalog_path.read_text(encoding='utf-8'))
        episodes = episodes_from_catalog(entries, settings)
    else:
        start = _as_date(settings['start_date'])
        episodes = episodes_for_range(start, end_date or date.today(), settings)
    episodes = number_episodes(episodes)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_feed(settings, episodes), encoding='utf-8')

    with open(episodes_output, 'w', encoding='utf-8') as f:
        json.dump([asdict(e) for e in episodes], f, indent=2, ensure_ascii=False)

    return episodes


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description='Generate the podcast RSS feed')
    parser.add_argument('--config', type=Path, default=Path('podcast.yaml'),
                        help='Podcast settings (default: podcast.yaml)')
    parser.add_argument('--output', type=Path, default=Path('podcast.xml'),
                        help='Feed output path')
    parser.add_argument('--episodes-output', type=Path, default=Path('episodes-list.json'),
                        help='Episode list output path')
    parser.add_argument('--from-index', type=Path, default=None,
                        help='Build episodes from a devocionales.json catalog')
    parser.add_argument('--end-date', type=date.fromisoformat, default=None,
                        help='Last episode date (default: today)')
    args = parser.parse_args(argv)

    try:
        settings = load_podcast_settings(args.config)
        episodes = generate_feed(settings, args.output, args.episodes_output,
                                 catalog_path=args.from_index, end_date=args.end_date)
    except (FeedConfigError, OSError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("RSS generated.")
    print(f"  File: {args.output}")
    print(f"  Episodes: {len(episodes)}")
    print(f"  Episode list: {args.episodes_output}")
    print()
    print("Make sure every MP3 exists under:", settings['audio_base_url'])


if __name__ == '__main__':
    main()
