"""
Persisted configuration and per-call snapshots.

Preferences live in a flat key/value YAML document; every key is suffixed
with the source language (``VERSION_en``, ``MIRROR_V2X_en`` ...) so several
language sources can share one file. Callers never read the store directly
while an operation runs: they take one :class:`SourceConfig` snapshot first.
"""

from __future__ import annotations

import enum
import pathlib
import random
import time
import zlib
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .errors import ConfigError
from .log import logger

PACKAGE_VERSION = "1.0.0"
USER_AGENT = f"batoto-scraper/{PACKAGE_VERSION} (+https://github.com/your/repo) Requests/urllib3"

DEFAULT_TIMEOUT = 30
DEFAULT_MAX_RETRIES = 2
FALLBACK_CONNECT_TIMEOUT = 5
FALLBACK_READ_TIMEOUT = 10


class Version(enum.Enum):
    V2 = "V2X"
    V3 = "V3X"
    V4 = "V4X"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Version":
        for member in cls:
            if value in (member.value, member.name):
                return member
        if value:
            logger.warning("Unknown site version %r, using %s", value, cls.V2.value)
        return cls.V2


VERSION_PREF_KEY = "VERSION"
MIRROR_PREF_KEY_V2X = "MIRROR_V2X"
MIRROR_PREF_KEY_V4X = "MIRROR_V4X"
ALT_CHAPTER_LIST_PREF_KEY = "ALT_CHAPTER_LIST"
REMOVE_TITLE_VERSION_PREF = "REMOVE_TITLE_VERSION"
REMOVE_TITLE_CUSTOM_PREF = "REMOVE_TITLE_CUSTOM"
INSTALL_SEED_KEY = "INSTALL_SEED"

AUTOMATIC_MIRROR = "automatic"

# https://batotomirrors.pages.dev/
MIRRORS_V2X: Tuple[str, ...] = tuple(
    "https://" + host
    for host in (
        "ato.to", "dto.to", "fto.to", "hto.to", "jto.to", "lto.to", "mto.to", "nto.to",
        "vto.to", "wto.to", "xto.to", "yto.to", "vba.to", "wba.to", "xba.to", "yba.to",
        "zba.to", "bato.ac", "bato.bz", "bato.cc", "bato.cx", "bato.id", "bato.pw",
        "bato.sh", "bato.to", "bato.vc", "bato.day", "bato.red", "bato.run", "batoto.in",
        "batoto.tv", "batotoo.com", "batotwo.com", "batpub.com", "batread.com",
        "battwo.com", "xbato.com", "xbato.net", "xbato.org", "zbato.com", "zbato.net",
        "zbato.org", "comiko.net", "comiko.org", "mangatoto.com", "mangatoto.net",
        "mangatoto.org", "batocomic.com", "batocomic.net", "batocomic.org",
        "readtoto.com", "readtoto.net", "readtoto.org", "kuku.to", "okok.to", "ruru.to",
        "xdxd.to",
    )
)
MIRROR_CHOICES_V2X: Tuple[str, ...] = (AUTOMATIC_MIRROR,) + MIRRORS_V2X

MIRRORS_V4X: Tuple[str, ...] = ("https://bato.si", "https://bato.ing")
MIRROR_DEFAULT_V4X = MIRRORS_V4X[0]

DEPRECATED_MIRRORS: Tuple[str, ...] = (
    "https://batocc.com",  # parked
)


def ensure_url_has_scheme(url: str) -> str:
    if url.lower().startswith(("http://", "https://")):
        return url
    return f"https://{url}"


def automatic_mirror(pool, seed: int) -> str:
    """Pick a pool member that stays the same for a given install seed."""
    return random.Random(seed).choice(list(pool))


@dataclass
class HttpConfig:
    timeout: int = DEFAULT_TIMEOUT
    fallback_connect_timeout: float = FALLBACK_CONNECT_TIMEOUT
    fallback_read_timeout: float = FALLBACK_READ_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay: float = 1.0
    user_agent: str = USER_AGENT
    session_headers: Dict[str, str] = field(default_factory=dict)

    @property
    def fallback_timeout(self) -> Tuple[float, float]:
        return (self.fallback_connect_timeout, self.fallback_read_timeout)

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]]) -> "HttpConfig":
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown http settings: {', '.join(sorted(unknown))}")
        return cls(**data)


@dataclass(frozen=True)
class SourceConfig:
    """Consistent view of the preferences for one logical operation."""

    lang: str
    site_lang: str
    version: Version
    base_url: str
    alt_chapter_list: bool = False
    remove_title_version: bool = False
    custom_title_pattern: str = ""

    @property
    def trimmed_base(self) -> str:
        return self.base_url.rstrip("/")


class PreferenceStore:
    def __init__(self, values: Optional[Dict[str, Any]] = None, path: Optional[pathlib.Path] = None):
        self._values: Dict[str, Any] = dict(values or {})
        self.path = path
        if INSTALL_SEED_KEY not in self._values:
            self._values[INSTALL_SEED_KEY] = int(time.time() * 1000)
            self._dirty = True
        else:
            self._dirty = False

    @classmethod
    def load(cls, path: Union[str, pathlib.Path]) -> "PreferenceStore":
        p = pathlib.Path(path)
        if not p.exists():
            return cls(path=p)
        try:
            data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid preference file {p}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Preference file {p} must contain a mapping")
        return cls(data, path=p)

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as fh:
            yaml.safe_dump(self._values, fh, sort_keys=True, allow_unicode=True)
        self._dirty = False

    def get_string(self, key: str, default: str = "") -> str:
        value = self._values.get(key, default)
        return default if value is None else str(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._values.get(key, default)
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    def put(self, key: str, value: Any) -> None:
        self._values[key] = value
        self._dirty = True

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def install_seed(self) -> int:
        raw = self._values.get(INSTALL_SEED_KEY)
        try:
            return int(raw)
        except (TypeError, ValueError):
            return zlib.crc32(PACKAGE_VERSION.encode("utf-8"))

    def migrate_mirrors(self, lang: str) -> None:
        for key, default in (
            (f"{MIRROR_PREF_KEY_V2X}_{lang}", AUTOMATIC_MIRROR),
            (f"{MIRROR_PREF_KEY_V4X}_{lang}", MIRROR_DEFAULT_V4X),
        ):
            if self._values.get(key) in DEPRECATED_MIRRORS:
                logger.info("Mirror %s is deprecated, resetting to %s", self._values[key], default)
                self.put(key, default)

    # ---------------------------
    # Typed accessors
    # ---------------------------
    def version(self, lang: str) -> Version:
        return Version.parse(self.get_string(f"{VERSION_PREF_KEY}_{lang}", Version.V2.value))

    def mirror(self, lang: str, version: Version) -> str:
        if version is Version.V4:
            raw = self.get_string(f"{MIRROR_PREF_KEY_V4X}_{lang}", MIRROR_DEFAULT_V4X)
            if raw == AUTOMATIC_MIRROR or not raw:
                raw = automatic_mirror(MIRRORS_V4X, self.install_seed)
        else:
            raw = self.get_string(f"{MIRROR_PREF_KEY_V2X}_{lang}", AUTOMATIC_MIRROR)
            if raw == AUTOMATIC_MIRROR or not raw:
                raw = automatic_mirror(MIRRORS_V2X, self.install_seed)
        return ensure_url_has_scheme(raw)

    def snapshot(self, lang: str, site_lang: str, version: Version) -> SourceConfig:
        return SourceConfig(
            lang=lang,
            site_lang=site_lang,
            version=version,
            base_url=self.mirror(lang, version),
            alt_chapter_list=self.get_bool(f"{ALT_CHAPTER_LIST_PREF_KEY}_{lang}", False),
            remove_title_version=self.get_bool(f"{REMOVE_TITLE_VERSION_PREF}_{lang}", False),
            custom_title_pattern=self.get_string(f"{REMOVE_TITLE_CUSTOM_PREF}_{lang}", ""),
        )


def load_config_file(path: Union[str, pathlib.Path]) -> Tuple[HttpConfig, PreferenceStore]:
    """
    Read a combined config file::

        http:
          timeout: 20
        preferences:
          VERSION_en: V4X

    The ``preferences`` section becomes an in-memory store that is not bound
    to the file. A missing file yields defaults.
    """
    p = pathlib.Path(path)
    if not p.exists():
        return HttpConfig(), PreferenceStore(path=None)
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config file {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {p} must contain a mapping")
    prefs = data.get("preferences") or {}
    if not isinstance(prefs, dict):
        raise ConfigError("'preferences' must be a mapping")
    return HttpConfig.from_mapping(data.get("http")), PreferenceStore(prefs)
