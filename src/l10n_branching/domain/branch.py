"""Branch, TranslationKey and Translation entities as read from the store."""

from __future__ import annotations

from pydantic import Field

from .translation_map import TranslationMap, to_translation_map
from .value_object import ValueObject

#: ``(namespace, name)``: how the same logical key is matched across branches.
KeyIdentity = tuple[str | None, str]


def key_identity(name: str, namespace: str | None = None) -> KeyIdentity:
    """Normalise a key's cross-branch identity (an empty namespace is none)."""
    return (namespace or None, name)


def format_key(name: str, namespace: str | None = None) -> str:
    """Human-readable ``namespace:name`` label used in logs and messages."""
    return f"{namespace}:{name}" if namespace else name


class Branch(ValueObject):
    """An independent, complete copy of a project's translation keys.

    ``source_branch_id`` is the single declared parent the branch was forked
    from, or ``None`` for a root branch.
    """

    id: str
    name: str
    space_id: str
    source_branch_id: str | None = None

    def is_child_of(self, other: Branch) -> bool:
        """True when this branch was forked directly from *other*."""
        return self.source_branch_id is not None and self.source_branch_id == other.id


class TranslationKey(ValueObject):
    id: str
    branch_id: str
    name: str
    namespace: str | None = None
    description: str | None = None

    @property
    def identity(self) -> KeyIdentity:
        return key_identity(self.name, self.namespace)


class Translation(ValueObject):
    id: str
    key_id: str
    language: str
    value: str


class TranslationValue(ValueObject):
    """A ``(language, value)`` pair as returned by the bulk key listing."""

    language: str
    value: str


class KeyWithTranslations(ValueObject):
    """A key expanded with all of its translation rows."""

    id: str
    name: str
    namespace: str | None = None
    description: str | None = None
    translations: list[TranslationValue] = Field(default_factory=list)

    @property
    def identity(self) -> KeyIdentity:
        return key_identity(self.name, self.namespace)

    def translation_map(self) -> TranslationMap:
        return to_translation_map(self.translations)
