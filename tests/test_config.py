import pytest

from batoto_scraper.config import (
    AUTOMATIC_MIRROR,
    INSTALL_SEED_KEY,
    MIRRORS_V2X,
    HttpConfig,
    PreferenceStore,
    Version,
    automatic_mirror,
    ensure_url_has_scheme,
    load_config_file,
)
from batoto_scraper.errors import ConfigError


def test_version_parse():
    assert Version.parse("V4X") is Version.V4
    assert Version.parse("V3X") is Version.V3
    assert Version.parse("bogus") is Version.V2
    assert Version.parse(None) is Version.V2


def test_new_store_gets_an_install_seed():
    store = PreferenceStore()
    assert isinstance(store.install_seed, int)
    assert store.dirty


def test_existing_seed_is_kept():
    store = PreferenceStore({INSTALL_SEED_KEY: 42})
    assert store.install_seed == 42
    assert not store.dirty


def test_automatic_mirror_is_stable_per_seed():
    first = PreferenceStore({INSTALL_SEED_KEY: 42}).mirror("en", Version.V2)
    second = PreferenceStore({INSTALL_SEED_KEY: 42}).mirror("en", Version.V2)
    assert first == second
    assert first in MIRRORS_V2X
    assert automatic_mirror(MIRRORS_V2X, 42) == first


def test_mirror_defaults_and_scheme():
    store = PreferenceStore({INSTALL_SEED_KEY: 1, "MIRROR_V2X_en": "bato.to"})
    assert store.mirror("en", Version.V2) == "https://bato.to"
    assert store.mirror("en", Version.V4) == "https://bato.si"
    assert store.mirror("en", Version.V3) == "https://bato.to"


def test_ensure_url_has_scheme():
    assert ensure_url_has_scheme("http://x.to") == "http://x.to"
    assert ensure_url_has_scheme("x.to") == "https://x.to"


def test_deprecated_mirror_is_migrated():
    store = PreferenceStore({INSTALL_SEED_KEY: 1, "MIRROR_V2X_en": "https://batocc.com"})
    store.migrate_mirrors("en")
    assert store.get_string("MIRROR_V2X_en") == AUTOMATIC_MIRROR
    assert store.dirty


def test_snapshot_reads_every_preference():
    store = PreferenceStore(
        {
            INSTALL_SEED_KEY: 1,
            "MIRROR_V2X_fr": "https://mto.to",
            "ALT_CHAPTER_LIST_fr": "true",
            "REMOVE_TITLE_VERSION_fr": True,
            "REMOVE_TITLE_CUSTOM_fr": r"\[raw\]",
        }
    )
    snap = store.snapshot("fr", "fr", Version.V2)
    assert snap.base_url == "https://mto.to"
    assert snap.alt_chapter_list is True
    assert snap.remove_title_version is True
    assert snap.custom_title_pattern == r"\[raw\]"
    assert snap.site_lang == "fr"


def test_preferences_are_namespaced_by_language():
    store = PreferenceStore({INSTALL_SEED_KEY: 1, "VERSION_en": "V4X"})
    assert store.version("en") is Version.V4
    assert store.version("fr") is Version.V2


def test_load_and_save_round_trip(tmp_path):
    path = tmp_path / "prefs" / "batoto.yaml"
    store = PreferenceStore.load(path)
    assert store.dirty
    store.put("VERSION_en", "V3X")
    store.save()
    assert not store.dirty

    again = PreferenceStore.load(path)
    assert again.install_seed == store.install_seed
    assert again.version("en") is Version.V3
    assert not again.dirty


def test_invalid_preference_file(tmp_path):
    path = tmp_path / "prefs.yaml"
    path.write_text("a: [", encoding="utf-8")
    with pytest.raises(ConfigError):
        PreferenceStore.load(path)


def test_preference_file_must_be_a_mapping(tmp_path):
    path = tmp_path / "prefs.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        PreferenceStore.load(path)


def test_load_config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("http:\n  timeout: 20\npreferences:\n  VERSION_en: V4X\n", encoding="utf-8")
    http, store = load_config_file(path)
    assert http.timeout == 20
    assert http.fallback_timeout == (5, 10)
    assert store.version("en") is Version.V4
    assert store.path is None


def test_load_config_file_rejects_unknown_http_keys(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("http:\n  timeuot: 20\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config_file(path)


def test_missing_config_file_gives_defaults(tmp_path):
    http, store = load_config_file(tmp_path / "absent.yaml")
    assert http == HttpConfig()
    assert store.version("en") is Version.V2
