"""
Module: i18n.translator

Purpose:
    Locale catalog lookup with ``%{name}`` substitution. Missing keys fall
    back to the default locale, then to the key itself so a sheet can
    always be drawn.

Key Classes:
    - Translator: Catalog loader / lookup

Key Functions:
    - translate(): Lookup against the bundled catalogs
    - supported_locales(): Language tags of the bundled catalogs
"""

from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"
LOCALES_DIR = Path(__file__).parent / "locales"

_PLACEHOLDER = re.compile(r"%\{(\w+)\}")


class Translator:
    """
    JSON catalog lookup.

    Example:
        >>> t = Translator()
        >>> t.translate("fmc.scrambleXofY", "en", {"scrambleIndex": 1, "scrambleCount": 3})
        'Scramble 1 of 3'
    """

    def __init__(self, locales_dir: Path = LOCALES_DIR, default_locale: str = DEFAULT_LOCALE):
        self.locales_dir = locales_dir
        self.default_locale = default_locale
        self._catalogs: Dict[str, Dict[str, str]] = {}

    def supported_locales(self) -> List[str]:
        return sorted(path.stem for path in self.locales_dir.glob("*.json"))

    def _catalog(self, locale: str) -> Dict[str, str]:
        if locale not in self._catalogs:
            path = self.locales_dir / f"{locale}.json"
            if path.exists():
                try:
                    self._catalogs[locale] = json.loads(path.read_text(encoding="utf-8"))
                except (OSError, json.JSONDecodeError) as e:
                    logger.error(f"Failed to load locale catalog {path}: {e}")
                    self._catalogs[locale] = {}
            else:
                logger.warning(f"No catalog for locale {locale!r}, using {self.default_locale!r}")
                self._catalogs[locale] = {}
        return self._catalogs[locale]

    def translate(
        self,
        key: str,
        locale: Optional[str] = None,
        substitutions: Optional[Mapping[str, object]] = None,
    ) -> str:
        text = self._catalog(locale or self.default_locale).get(key)
        if text is None:
            text = self._catalog(self.default_locale).get(key)
        if text is None:
            logger.debug(f"Missing translation for {key!r}")
            text = key
        if substitutions:
            values = {name: str(value) for name, value in substitutions.items()}
            text = _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), text)
        return text


@lru_cache(maxsize=1)
def _default_translator() -> Translator:
    return Translator()


def translate(key: str, locale: Optional[str] = None, substitutions: Optional[Mapping[str, object]] = None) -> str:
    """Translate ``key`` with the bundled catalogs."""
    return _default_translator().translate(key, locale, substitutions)


def supported_locales() -> List[str]:
    """Language tags with a bundled catalog, sorted."""
    return _default_translator().supported_locales()
