"""SQLAlchemyTranslationStore — the Key/Translation Store on SQLAlchemy asyncio."""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, cast

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ...domain.branch import (
    Branch,
    KeyWithTranslations,
    Translation,
    TranslationKey,
    TranslationValue,
)
from ...ports.store import ITranslationStore
from ...primitives.exceptions import ConstraintViolationError
from ...primitives.id_generator import IIDGenerator, UUID4Generator
from .models import BranchModel, TranslationKeyModel, TranslationModel
from .uow import SQLAlchemyUnitOfWork

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from ...ports.unit_of_work import UnitOfWork


def _to_branch(model: BranchModel) -> Branch:
    return Branch(
        id=model.id,
        name=model.name,
        space_id=model.space_id,
        source_branch_id=model.source_branch_id,
    )


def _to_key(model: TranslationKeyModel) -> TranslationKey:
    return TranslationKey(
        id=model.id,
        branch_id=model.branch_id,
        name=model.name,
        namespace=model.namespace or None,
        description=model.description,
    )


def _to_translation(model: TranslationModel) -> Translation:
    return Translation(
        id=model.id, key_id=model.key_id, language=model.language, value=model.value
    )


class SQLAlchemyTranslationStore(ITranslationStore):
    """
    Implementation of :class:`ITranslationStore` using SQLAlchemy ``AsyncSession``.

    Reads without a ``uow`` run in a short-lived session of their own. Writes
    without a ``uow`` open (and commit) a unit of work for that single call;
    merges always pass the unit of work returned by :meth:`transaction`.

    Usage::

        engine = create_async_engine("postgresql+asyncpg://...")
        store = SQLAlchemyTranslationStore(async_sessionmaker(engine))
        async with store.transaction() as uow:
            await store.create_key(branch_id, "greet", uow=uow)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        id_generator: IIDGenerator | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._ids: IIDGenerator = id_generator or UUID4Generator()

    def transaction(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(self._session_factory)

    # -- session helpers ----------------------------------------------------

    @contextlib.asynccontextmanager
    async def _session(self, uow: UnitOfWork | None) -> AsyncIterator[AsyncSession]:
        if uow is not None:
            yield cast("SQLAlchemyUnitOfWork", uow).session
            return
        async with self._session_factory() as session:
            yield session

    async def _flush(self, session: AsyncSession, what: str) -> None:
        try:
            await session.flush()
        except IntegrityError as e:
            raise ConstraintViolationError(f"{what}: {e.orig}") from e

    # -- reads --------------------------------------------------------------

    async def get_branch(
        self, branch_id: str, uow: UnitOfWork | None = None
    ) -> Branch | None:
        async with self._session(uow) as session:
            model = await session.get(BranchModel, branch_id)
            return _to_branch(model) if model is not None else None

    async def find_branch_by_name(
        self, space_id: str, name: str, uow: UnitOfWork | None = None
    ) -> Branch | None:
        stmt = select(BranchModel).where(
            BranchModel.space_id == space_id, BranchModel.name == name
        )
        async with self._session(uow) as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
            return _to_branch(model) if model is not None else None

    async def list_keys_with_translations(
        self, branch_id: str, uow: UnitOfWork | None = None
    ) -> list[KeyWithTranslations]:
        stmt = (
            select(TranslationKeyModel)
            .where(TranslationKeyModel.branch_id == branch_id)
            .order_by(TranslationKeyModel.namespace, TranslationKeyModel.name)
            .execution_options(populate_existing=True)
        )
        async with self._session(uow) as session:
            models = (await session.execute(stmt)).scalars().all()
            return [
                KeyWithTranslations(
                    id=m.id,
                    name=m.name,
                    namespace=m.namespace or None,
                    description=m.description,
                    translations=[
                        TranslationValue(language=t.language, value=t.value)
                        for t in m.translations
                    ],
                )
                for m in models
            ]

    async def find_key(
        self,
        branch_id: str,
        name: str,
        namespace: str | None = None,
        uow: UnitOfWork | None = None,
    ) -> TranslationKey | None:
        stmt = select(TranslationKeyModel).where(
            TranslationKeyModel.branch_id == branch_id,
            TranslationKeyModel.namespace == (namespace or ""),
            TranslationKeyModel.name == name,
        )
        async with self._session(uow) as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
            return _to_key(model) if model is not None else None

    # -- writes -------------------------------------------------------------

    async def create_branch(
        self,
        space_id: str,
        name: str,
        source_branch_id: str | None = None,
        uow: UnitOfWork | None = None,
    ) -> Branch:
        if uow is None:
            async with self.transaction() as own:
                return await self.create_branch(
                    space_id, name, source_branch_id, uow=own
                )

        model = BranchModel(
            id=self._ids.next_id(),
            space_id=space_id,
            name=name,
            source_branch_id=source_branch_id,
        )
        async with self._session(uow) as session:
            session.add(model)
            await self._flush(session, f"Cannot create branch {name!r}")
        return _to_branch(model)

    async def create_key(
        self,
        branch_id: str,
        name: str,
        namespace: str | None = None,
        *,
        description: str | None = None,
        uow: UnitOfWork | None = None,
    ) -> TranslationKey:
        if uow is None:
            async with self.transaction() as own:
                return await self.create_key(
                    branch_id, name, namespace, description=description, uow=own
                )

        model = TranslationKeyModel(
            id=self._ids.next_id(),
            branch_id=branch_id,
            name=name,
            namespace=namespace or "",
            description=description,
        )
        async with self._session(uow) as session:
            session.add(model)
            await self._flush(session, f"Cannot create key {name!r}")
        return _to_key(model)

    async def upsert_translation(
        self,
        key_id: str,
        language: str,
        value: str,
        uow: UnitOfWork | None = None,
    ) -> Translation:
        if uow is None:
            async with self.transaction() as own:
                return await self.upsert_translation(key_id, language, value, uow=own)

        stmt = select(TranslationModel).where(
            TranslationModel.key_id == key_id, TranslationModel.language == language
        )
        async with self._session(uow) as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
            if model is None:
                model = TranslationModel(
                    id=self._ids.next_id(), key_id=key_id, language=language, value=value
                )
                session.add(model)
            else:
                model.value = value
            await self._flush(session, f"Cannot upsert {language!r} for key {key_id!r}")
        return _to_translation(model)

    async def copy_keys_and_translations(
        self,
        source_branch_id: str,
        target_branch_id: str,
        uow: UnitOfWork | None = None,
    ) -> int:
        if uow is None:
            async with self.transaction() as own:
                return await self.copy_keys_and_translations(
                    source_branch_id, target_branch_id, uow=own
                )

        source_keys = await self.list_keys_with_translations(source_branch_id, uow=uow)
        async with self._session(uow) as session:
            for source_key in source_keys:
                session.add(
                    TranslationKeyModel(
                        id=(key_id := self._ids.next_id()),
                        branch_id=target_branch_id,
                        name=source_key.name,
                        namespace=source_key.namespace or "",
                        description=source_key.description,
                    )
                )
                session.add_all(
                    TranslationModel(
                        id=self._ids.next_id(),
                        key_id=key_id,
                        language=t.language,
                        value=t.value,
                    )
                    for t in source_key.translations
                )
            await self._flush(
                session, f"Cannot copy keys into branch {target_branch_id!r}"
            )
        return len(source_keys)
