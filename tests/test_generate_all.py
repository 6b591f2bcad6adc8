import pytest

import generate_all
from fetch_source import SourceError


def test_all_steps_run_and_failure_exits(monkeypatch, capsys):
    calls = []

    def feed():
        calls.append('feed')

    def site():
        calls.append('site')
        raise SourceError('Could not fetch posts')

    monkeypatch.setattr(generate_all, 'STEPS', [('Podcast RSS', feed), ('HTML from JSON', site)])
    with pytest.raises(SystemExit) as exc:
        generate_all.main()

    assert exc.value.code == 1
    assert calls == ['feed', 'site']
    out = capsys.readouterr().out
    assert 'Succeeded: 1/2' in out
    assert 'Error in HTML from JSON: Could not fetch posts' in out


def test_success(monkeypatch, capsys):
    monkeypatch.setattr(generate_all, 'STEPS', [('Podcast RSS', lambda: None)])
    generate_all.main()
    assert 'Failed:    0/1' in capsys.readouterr().out


def test_bad_feed_settings_do_not_stop_the_site(tmp_path, monkeypatch, capsys):
    (tmp_path / 'podcast.yaml').write_text('start_date: mañana\n', encoding='utf-8')
    monkeypatch.chdir(tmp_path)
    calls = []

    monkeypatch.setattr(generate_all, 'STEPS', [
        ('Podcast RSS', generate_all.run_feed),
        ('HTML from JSON', lambda: calls.append('site')),
    ])
    with pytest.raises(SystemExit) as exc:
        generate_all.main()

    assert exc.value.code == 1
    assert calls == ['site']
    out = capsys.readouterr().out
    assert 'Error in Podcast RSS: ValueError' in out
    assert 'Succeeded: 1/2' in out
