"""Shared fixtures: WordPress-shaped posts and bodies."""

import json

import pytest


LABEL_BODY = '\n'.join([
    '<div class="wp-block-cover alignfull is-light"><img class="wp-block-cover__image-background" src="cover.jpg"/></div>',
    '<div class="wp-block-post-date"><time datetime="2025-12-08">8 diciembre, 2025</time></div>',
    '<figure class="wp-block-pullquote"><blockquote><p>Porque de tal manera amó Dios al mundo</p><cite>Juan 3:16 (NTV)</cite></blockquote></figure>',
    '<div class="wp-block-group is-layout-flow">',
    '<p class="is-style-text-subtitle">Tesoro Bíblico</p>',
    '<p>El amor de Dios es inmenso.</p>',
    '<p>Nos invita a confiar.</p>',
    '<hr class="wp-block-separator has-alpha-channel-opacity"/>',
    '<p class="is-style-text-subtitle has-small-font-size">Punto de Acción</p>',
    '<p>Hoy escribe una oración de gratitud.</p>',
    '</div>',
    '<div class="wp-block-query"><ul><li>Otro devocional</li></ul></div>',
    '<p>Pie de página sindicado</p>',
])

HEADING_BODY = '\n'.join([
    '<blockquote class="wp-block-quote"><p>El Señor es mi pastor; nada me faltará. Salmo 23:1 (RVR1960)</p></blockquote>',
    '<p>Dios cuida de nosotros.</p>',
    '<h2 class="wp-block-heading has-background" style="background-color:#eee">Pon tu <em>confianza</em> en Él</h2>',
    '<p>Hoy entrega tus preocupaciones.</p>',
])

DIVIDER_BODY = '\n'.join([
    '<p>Texto del tesoro.</p>',
    '<hr class="wp-block-separator has-alpha-channel-opacity is-style-wide"/>',
    '<p class="is-style-text-subtitle">Para practicar</p>',
    '<p>Hoy comparte tu fe.</p>',
])


def make_post(date_slug: str, slug: str, title: str = 'Título', body: str = LABEL_BODY, post_id=None):
    """A WordPress REST record whose permalink carries `date_slug`."""
    year, month, day = date_slug.split('-')
    return {
        'id': post_id if post_id is not None else int(f"{year}{month}{day}"),
        'date': f"{date_slug}T06:00:00",
        'link': f"https://cenfolic.com/{year}/{month}/{day}/{slug}/",
        'slug': slug,
        'title': {'rendered': title},
        'content': {'rendered': body, 'protected': False},
    }


@pytest.fixture
def label_body():
    return LABEL_BODY


@pytest.fixture
def heading_body():
    return HEADING_BODY


@pytest.fixture
def divider_body():
    return DIVIDER_BODY


@pytest.fixture
def site_dir(tmp_path):
    """Template, index template, images and a two-post source file."""
    template = (
        '<html><body class="variant-{{css_variant}}"><article class="devocional">'
        '<p>{{date}}</p><h1>{{devotional_title}}</h1>'
        '<blockquote>{{verse_text}}</blockquote><cite>{{verse_ref}}</cite>'
        '<section>{{biblical_treasure}}</section><section>{{call_to_action}}</section>'
        '<img src="{{cover_image}}"><audio src="{{audio_server_url}}{{audio_filename}}"></audio>'
        '<a href="{{png_filename}}">png</a></article>{{prev_next_navigation}}{{unknown_token}}'
        '</body></html>'
    )
    (tmp_path / 'page.html').write_text(template, encoding='utf-8')
    (tmp_path / 'index-template.html').write_text(
        '<html><body><div id="list"></div></body></html>', encoding='utf-8'
    )
    images = tmp_path / 'images'
    images.mkdir()
    (images / 'devo-01.jpg').write_bytes(b'jpg')

    posts = [
        make_post('2025-12-08', 'a', title='Primero <em>día</em>'),
        make_post('2025-12-09', 'b', title='Segundo día'),
    ]
    (tmp_path / 'posts.json').write_text(json.dumps(posts), encoding='utf-8')
    return tmp_path
