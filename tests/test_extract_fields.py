"""Tests for the devotional field extractor."""

import pytest

from extract_fields import (
    DEFAULT_CALL_TO_ACTION,
    DEFAULT_VERSE_REF,
    DEFAULT_VERSE_TEXT,
    extract_bible_ref,
    extract_biblical_treasure,
    extract_call_to_action,
    extract_fields,
    extract_verse,
    find_action_boundary,
    first_match,
    strip_citations,
)


class TestFirstMatch:
    def test_returns_first_non_empty_result(self):
        rules = [lambda t: None, lambda t: '', lambda t: 'second', lambda t: 'third']
        assert first_match(rules, 'x', 'default') == 'second'

    def test_falls_back_to_default(self):
        assert first_match([lambda t: None], 'x', 'default') == 'default'


class TestBibleRef:
    def test_cite_wins_over_inline_citation(self):
        body = '<p>Juan 1:1 (NVI)</p><blockquote>Texto<cite>Romanos 8:28 (NTV)</cite></blockquote>'
        assert extract_bible_ref(body) == 'Romanos 8:28 (NTV)'

    def test_citation_in_text(self):
        assert extract_bible_ref('<blockquote>Dios es amor. 1 Juan 4:8 (NTV)</blockquote>') == '1 Juan 4:8 (NTV)'

    def test_version_with_digits(self, heading_body):
        assert extract_bible_ref(heading_body) == 'Salmo 23:1 (RVR1960)'

    def test_ranges_and_lists(self):
        assert extract_bible_ref('<p>Lee Mateo 5:3-10, 12 (NVI)</p>') == 'Mateo 5:3-10, 12 (NVI)'
        assert extract_bible_ref('<p>Génesis 1:1 – 3 (LBLA)</p>') == 'Génesis 1:1 – 3 (LBLA)'

    def test_lowercase_version_is_not_a_citation(self):
        assert extract_bible_ref('<p>Juan 3:16 (ntv)</p>') == DEFAULT_VERSE_REF

    def test_default_without_reference(self):
        assert extract_bible_ref('<p>Solo texto.</p>') == DEFAULT_VERSE_REF
        assert extract_bible_ref('') == DEFAULT_VERSE_REF
        assert extract_bible_ref(None) == DEFAULT_VERSE_REF

    def test_empty_cite_falls_through(self):
        assert extract_bible_ref('<cite></cite><p>Juan 3:16 (NTV)</p>') == 'Juan 3:16 (NTV)'


class TestVerse:
    def test_blockquote_citation_removed(self):
        assert extract_verse('<blockquote>Dios es amor. 1 Juan 4:8 (NTV)</blockquote>') == 'Dios es amor.'

    def test_pullquote_cite_removed(self, label_body):
        assert extract_verse(label_body) == 'Porque de tal manera amó Dios al mundo'

    def test_pullquote_without_inner_blockquote(self):
        body = '<figure class="wp-block-pullquote"><p>Bienaventurados los mansos</p></figure>'
        assert extract_verse(body) == 'Bienaventurados los mansos'

    def test_entities_decoded(self):
        assert extract_verse('<blockquote><p>&laquo;Paz&raquo;&nbsp;a&nbsp;vosotros</p></blockquote>') == '«Paz» a vosotros'

    def test_blockquote_holding_only_a_citation_uses_default(self):
        assert extract_verse('<blockquote>Juan 3:16 (NTV)</blockquote>') == DEFAULT_VERSE_TEXT

    def test_default_without_quote(self):
        assert extract_verse('<p>Nada que citar.</p>') == DEFAULT_VERSE_TEXT


class TestStripCitations:
    @pytest.mark.parametrize('text', [
        'Amor eterno. Jeremías 31:3 – 4. (NVI)',
        'Salmo 1:1 (NTV) Salmo 2:2 (NTV) bendito',
        'sin cita',
        '',
    ])
    def test_idempotent(self, text):
        once = strip_citations(text)
        assert strip_citations(once) == once

    def test_removes_every_citation(self):
        assert strip_citations('Amor eterno. Jeremías 31:3 – 4. (NVI)') == 'Amor eterno.'
        assert strip_citations('A Salmo 1:1 (NTV) B 2 Corintios 5:17 (RVR1960) C') == 'A B C'


class TestActionBoundary:
    def test_label_takes_priority(self):
        content = (
            '<h2 class="has-background">Titular</h2>'
            '<hr class="wp-block-separator has-alpha-channel-opacity"/>'
            '<p class="is-style-text-subtitle">Otro</p>'
            '<p class="is-style-text-subtitle">Punto de Acción</p>'
        )
        assert find_action_boundary(content).kind == 'label'

    def test_divider_before_heading(self, divider_body):
        content = divider_body + '<h2 class="has-background">Titular</h2>'
        assert find_action_boundary(content).kind == 'divider'

    def test_heading(self, heading_body):
        boundary = find_action_boundary(heading_body)
        assert boundary.kind == 'heading'
        assert 'confianza' in boundary.heading

    def test_label_must_be_inside_one_paragraph(self):
        content = '<p class="is-style-text-subtitle">Tesoro</p><p>Punto de Acción</p>'
        assert find_action_boundary(content) is None

    def test_none_without_markers(self):
        assert find_action_boundary('<p>Texto</p>') is None


class TestBiblicalTreasure:
    def test_label_layout(self, label_body):
        treasure = extract_biblical_treasure(label_body)
        assert treasure == '<p>El amor de Dios es inmenso.</p>\n<p>Nos invita a confiar.</p>'

    def test_label_layout_drops_page_chrome(self, label_body):
        treasure = extract_biblical_treasure(label_body)
        for fragment in ('wp-block-cover', 'wp-block-post-date', 'pullquote',
                         'Tesoro Bíblico', 'Punto de Acción', 'Otro devocional', '<hr'):
            assert fragment not in treasure

    def test_divider_layout(self, divider_body):
        assert extract_biblical_treasure(divider_body) == '<p>Texto del tesoro.</p>'

    def test_heading_layout(self, heading_body):
        treasure = extract_biblical_treasure(heading_body)
        assert treasure.endswith('<p>Dios cuida de nosotros.</p>')
        assert 'has-background' not in treasure

    def test_without_boundary_keeps_whole_body(self):
        body = '<p>Uno.</p><p>Dos.</p><hr class="wp-block-separator"/>'
        assert extract_biblical_treasure(body) == '<p>Uno.</p><p>Dos.</p>'

    def test_empty_body(self):
        assert extract_biblical_treasure('') == ''


class TestCallToAction:
    def test_label_layout(self, label_body):
        assert extract_call_to_action(label_body) == '<p>Hoy escribe una oración de gratitud.</p>'

    def test_divider_layout(self, divider_body):
        assert extract_call_to_action(divider_body) == '<p>Hoy comparte tu fe.</p>'

    def test_heading_promoted_to_bold_paragraph(self, heading_body):
        assert extract_call_to_action(heading_body) == (
            '<p><strong>Pon tu confianza en Él</strong></p>'
            '<p>Hoy entrega tus preocupaciones.</p>'
        )

    def test_heading_lead_in_is_escaped(self):
        body = '<h2 class="has-background">&lt;script&gt;alert(1)&lt;/script&gt;</h2><p>Hoy ora.</p>'
        assert extract_call_to_action(body) == (
            '<p><strong>&lt;script&gt;alert(1)&lt;/script&gt;</strong></p><p>Hoy ora.</p>'
        )

    def test_action_phrase_fallback(self):
        body = '<p>Intro.</p><p>Hoy reflexiona en su bondad.</p><p>Amén.</p>'
        assert extract_call_to_action(body) == '<p>Hoy reflexiona en su bondad.</p><p>Amén.</p>'

    def test_empty_label_section_falls_through(self):
        body = '<p>Hoy puedes orar.</p><p class="is-style-text-subtitle">Punto de Acción</p>'
        assert extract_call_to_action(body).startswith('<p>Hoy puedes orar.</p>')

    def test_default(self):
        assert extract_call_to_action('<p>Nada.</p>') == DEFAULT_CALL_TO_ACTION


class TestExtractFields:
    def test_unstructured_body_uses_all_defaults_but_treasure(self):
        fields = extract_fields('<p>Solo texto.</p>')
        assert fields.verse_ref == DEFAULT_VERSE_REF
        assert fields.verse_text == DEFAULT_VERSE_TEXT
        assert fields.call_to_action == DEFAULT_CALL_TO_ACTION
        assert fields.biblical_treasure == '<p>Solo texto.</p>'

    @pytest.mark.parametrize('body', [
        None, '', '<', '<blockquote>', '<cite>', '</div></div>', '{{date}}',
        '<figure class="wp-block-pullquote">', '<h2 class="has-background">',
        '<hr class="has-alpha-channel"><p class="is-style-text-subtitle">',
    ])
    def test_never_raises(self, body):
        fields = extract_fields(body)
        assert fields.verse_ref
        assert fields.verse_text
        assert fields.call_to_action
