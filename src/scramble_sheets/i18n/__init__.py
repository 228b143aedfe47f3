"""
Localized strings for the fewest-moves solution sheets.

Catalogs are flat JSON files under ``locales/`` named by language tag.
Values may contain ``%{name}`` placeholders filled from substitutions.
"""

from .translator import DEFAULT_LOCALE, Translator, supported_locales, translate

__all__ = [
    "DEFAULT_LOCALE",
    "Translator",
    "supported_locales",
    "translate",
]
