"""TranslationMap — the per-key ``language -> value`` unit of comparison."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from typing_extensions import TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterable

TranslationMap: TypeAlias = dict[str, str]


class _LanguageValue(Protocol):
    @property
    def language(self) -> str: ...

    @property
    def value(self) -> str: ...


def to_translation_map(translations: Iterable[_LanguageValue]) -> TranslationMap:
    """Project translation rows into a ``{language: value}`` mapping."""
    return {t.language: t.value for t in translations}


def translations_equal(a: TranslationMap, b: TranslationMap) -> bool:
    """Map-vs-map equality: same language set and same value per language.

    Two maps that agree on some languages but differ on any other are
    unequal; there is no per-language partial match.
    """
    if len(a) != len(b):
        return False
    return all(language in b and b[language] == value for language, value in a.items())
