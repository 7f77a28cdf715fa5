"""SQLAlchemy models for branches, translation keys and translations."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all models of the translation store."""


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class BranchModel(TimestampMixin, Base):
    __tablename__ = "branches"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    space_id: Mapped[str] = mapped_column(String(36), index=True)
    name: Mapped[str] = mapped_column(String(255))
    source_branch_id: Mapped[str | None] = mapped_column(
        ForeignKey("branches.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (UniqueConstraint("space_id", "name", name="uq_branch_space_name"),)


class TranslationKeyModel(TimestampMixin, Base):
    """
    A translation key row.

    ``namespace`` is stored as ``""`` when absent: NULLs are distinct in a
    composite unique constraint on most backends, which would let the same
    un-namespaced key be inserted twice.
    """

    __tablename__ = "translation_keys"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    branch_id: Mapped[str] = mapped_column(
        ForeignKey("branches.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(512))
    namespace: Mapped[str] = mapped_column(String(255), default="")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    translations: Mapped[list[TranslationModel]] = relationship(
        back_populates="key",
        cascade="all",
        passive_deletes=True,
        lazy="selectin",
        order_by="TranslationModel.language",
    )

    __table_args__ = (
        UniqueConstraint(
            "branch_id", "namespace", "name", name="uq_key_branch_namespace_name"
        ),
    )


class TranslationModel(TimestampMixin, Base):
    __tablename__ = "translations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    key_id: Mapped[str] = mapped_column(
        ForeignKey("translation_keys.id", ondelete="CASCADE"), index=True
    )
    language: Mapped[str] = mapped_column(String(35))
    value: Mapped[str] = mapped_column(Text)

    key: Mapped[TranslationKeyModel] = relationship(back_populates="translations")

    __table_args__ = (
        UniqueConstraint("key_id", "language", name="uq_translation_key_language"),
    )
