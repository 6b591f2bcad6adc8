from datetime import date, datetime

from text_utils import (
    decode_entities,
    format_display_date,
    format_spanish_date,
    normalize_ws,
    strip_html,
    strip_inline_styles,
)


def test_strip_html_removes_tags_and_decodes():
    assert strip_html('<p>Fe &amp; <strong>esperanza</strong></p>') == 'Fe & esperanza'


def test_strip_html_drops_style_and_script_blocks():
    markup = '<style>p { color: red; }</style><p>Hola</p><script>alert(1)</script>'
    assert strip_html(markup) == 'Hola'


def test_strip_html_empty():
    assert strip_html('') == ''
    assert strip_html(None) == ''


def test_decode_entities_nbsp_becomes_space():
    assert decode_entities('a&nbsp;b\xa0c') == 'a b c'


def test_strip_inline_styles_keeps_tags():
    title = '<span style="color: #39A8DA">Dios</span> <em style=\'font-weight:bold\'>es amor</em>'
    assert strip_inline_styles(title) == '<span>Dios</span> <em>es amor</em>'


def test_normalize_ws():
    assert normalize_ws('  uno \n\t dos  ') == 'uno dos'


class TestSpanishDates:
    def test_from_wordpress_timestamp(self):
        assert format_spanish_date('2025-12-08T06:00:00') == 'lunes 8 de diciembre de 2025'

    def test_from_date_and_datetime(self):
        assert format_spanish_date(date(2025, 12, 10)) == 'miércoles 10 de diciembre de 2025'
        assert format_spanish_date(datetime(2025, 12, 13, 23, 59)) == 'sábado 13 de diciembre de 2025'

    def test_display_date_is_upper_case(self):
        assert format_display_date('2025-12-10T06:00:00') == 'MIÉRCOLES 10 DE DICIEMBRE DE 2025'
