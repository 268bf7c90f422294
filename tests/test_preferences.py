import json

from komikid.models.preferences import JsonPreferences
from komikid.models.preferences import MemoryPreferences


def test_memory_preferences():
    preferences = MemoryPreferences({'pref_auto_random_url': 'false'})

    assert preferences.get_boolean('pref_auto_random_url', True) is False
    assert preferences.get_boolean('unknown', True) is True
    assert preferences.get_string('unknown', 'default') == 'default'

    preferences.set_boolean('pref_auto_random_url', True)
    assert preferences.get_boolean('pref_auto_random_url') is True

    preferences.set_string('resize_service_url', 'https://wsrv.nl/?url=')
    assert preferences.contains('resize_service_url')

    preferences.set_string('resize_service_url', None)
    assert not preferences.contains('resize_service_url')


def test_json_preferences_survive_restart(tmp_path):
    path = str(tmp_path / 'kiryuu.json')

    preferences = JsonPreferences('kiryuu', path=path)
    preferences.set_string('url_map_cache', json.dumps({'abc': '1-abc'}))
    preferences.set_boolean('pref_auto_random_url', False)

    preferences = JsonPreferences('kiryuu', path=path)
    assert json.loads(preferences.get_string('url_map_cache')) == {'abc': '1-abc'}
    assert preferences.get_boolean('pref_auto_random_url', True) is False

    preferences.remove('url_map_cache')
    preferences = JsonPreferences('kiryuu', path=path)
    assert not preferences.contains('url_map_cache')


def test_json_preferences_default_location(tmp_path, monkeypatch):
    from komikid.utils import get_data_dir

    monkeypatch.setenv('KOMIKID_DATA_DIR', str(tmp_path / 'data'))
    get_data_dir.cache_clear()
    try:
        preferences = JsonPreferences('kiryuu')
        preferences.set_string('overrideBaseUrl', 'https://kiryuu.example')

        assert preferences.path == str(tmp_path / 'data' / 'preferences' / 'kiryuu.json')
        assert (tmp_path / 'data' / 'preferences' / 'kiryuu.json').exists()
    finally:
        get_data_dir.cache_clear()


def test_json_preferences_corrupt_file(tmp_path):
    path = tmp_path / 'kiryuu.json'
    path.write_text('{not json', encoding='utf-8')

    preferences = JsonPreferences('kiryuu', path=str(path))

    assert preferences.get_string('url_map_cache', '{}') == '{}'

    preferences.set_string('url_map_cache', '{}')
    assert json.loads(path.read_text(encoding='utf-8')) == {'url_map_cache': '{}'}
