#!/usr/bin/env python3
"""
Devotional Pages - Local Preview Server

Serves the generated output directory so pages, images and the
"download as image" button work as they would on the real host.

Usage:
    python server.py [--port PORT] [--output-dir PATH]

Then open http://localhost:3000 in your browser.
"""

import argparse
import html
from http.server import HTTPServer, BaseHTTPRequestHandler
from pathlib import Path
from urllib.parse import unquote, urlparse

from config import load_config


MIME_TYPES = {
    '.html': 'text/html; charset=utf-8',
    '.css': 'text/css',
    '.js': 'application/javascript',
    '.json': 'application/json; charset=utf-8',
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.gif': 'image/gif',
    '.svg': 'image/svg+xml',
    '.ico': 'image/x-icon',
    '.mp3': 'audio/mpeg',
    '.xml': 'application/rss+xml',
}

LISTING_TEMPLATE = '''<!DOCTYPE html>
<html lang="es">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Devocionales</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
               max-width: 800px; margin: 0 auto; padding: 2rem; background: #f8f9fa; }}
        h1 {{ color: #39A8DA; text-align: center; }}
        .list {{ background: white; border-radius: 12px; padding: 1.5rem;
                 box-shadow: 0 2px 8px rgba(0,0,0,0.1); }}
        .list a {{ display: block; padding: 1rem; margin: 0.5rem 0; color: #333;
                   text-decoration: none; border-radius: 8px; background: #f8f9fa; }}
        .list a:hover {{ background: #39A8DA; color: white; }}
        .count {{ color: #666; text-align: center; font-size: 0.875rem; }}
    </style>
</head>
<body>
    <h1>Devocionales Diarios</h1>
    <div class="list">
{links}
    </div>
    <p class="count">Total: {count} devocionales</p>
</body>
</html>
'''

# Global config
OUTPUT_DIR = Path('output')


def list_pages(output_dir: Path) -> list[str]:
    """Generated page names, newest first (index.html excluded)."""
    if not output_dir.is_dir():
        return []
    names = [p.name for p in output_dir.glob('*.html') if p.name != 'index.html']
    return sorted(names, reverse=True)


def render_listing(output_dir: Path) -> str:
    pages = list_pages(output_dir)
    links = '\n'.join(
        f'        <a href="/{html.escape(name)}">{html.escape(name[:-len(".html")])}</a>'
        for name in pages
    )
    return LISTING_TEMPLATE.format(links=links, count=len(pages))


def resolve_path(output_dir: Path, url_path: str) -> Path | None:
    """Map a request path into output_dir; None if it escapes the directory."""
    root = output_dir.resolve()
    try:
        candidate = (root / unquote(url_path).lstrip('/')).resolve()
    except (ValueError, OSError):
        # embedded null byte, or a name the filesystem rejects
        return None
    if candidate != root and root not in candidate.parents:
        return None
    return candidate


class RequestHandler(BaseHTTPRequestHandler):
    protocol_version = 'HTTP/1.0'

    def send_body(self, status: int, body: bytes, content_type: str):
        self.send_response(status)
        self.send_header('Content-Type', content_type)
        self.send_header('Content-Length', str(len(body)))
        self.send_header('Connection', 'close')
        self.end_headers()
        self.wfile.write(body)
        self.wfile.flush()

    def send_html(self, html_content: str):
        self.send_body(200, html_content.encode('utf-8'), MIME_TYPES['.html'])

    def send_not_found(self):
        self.send_body(404, '404 - Archivo no encontrado'.encode('utf-8'),
                       'text/plain; charset=utf-8')

    def do_GET(self):
        path = urlparse(self.path).path

        if path == '/':
            self.send_html(render_listing(OUTPUT_DIR))
            return

        file_path = resolve_path(OUTPUT_DIR, path)
        if file_path is None or not file_path.is_file():
            self.send_not_found()
            return

        try:
            data = file_path.read_bytes()
        except OSError as e:
            print(f"Error reading {file_path}: {e}", flush=True)
            self.send_body(500, b'Error al leer archivo', 'text/plain')
            return

        content_type = MIME_TYPES.get(file_path.suffix.lower(), 'application/octet-stream')
        self.send_body(200, data, content_type)

    def log_message(self, format, *args):
        print(f"[{self.command}] {self.path}", flush=True)


def main():
    global OUTPUT_DIR

    parser = argparse.ArgumentParser(description='Preview the generated devotional pages')
    parser.add_argument('--port', type=int, default=3000, help='Port to run server on')
    parser.add_argument('--output-dir', type=Path, default=None,
                        help='Directory to serve (default: DEVO_OUTPUT_DIR or ./output)')

    args = parser.parse_args()

    OUTPUT_DIR = args.output_dir or load_config().output_dir

    if not OUTPUT_DIR.exists():
        print(f"Warning: Output directory not found at {OUTPUT_DIR}")
        print("Run build_site.py first to generate it.")

    server = HTTPServer(('localhost', args.port), RequestHandler)
    print(f"\n{'='*50}")
    print("  Devocionales - Local Preview")
    print(f"{'='*50}")
    print(f"\n  Open in browser: http://localhost:{args.port}")
    print(f"  Serving: {OUTPUT_DIR.resolve()}")
    print(f"\n  Press Ctrl+C to stop the server")
    print(f"{'='*50}\n")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nServer stopped.")
        server.shutdown()


if __name__ == '__main__':
    main()
