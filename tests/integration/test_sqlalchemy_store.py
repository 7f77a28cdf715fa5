"""End-to-end diff, merge and fork against SQLAlchemy on aiosqlite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from l10n_branching import (
    ConstraintViolationError,
    DiffCalculator,
    ForkBranchCommand,
    ForkBranchHandler,
    ITranslationStore,
    MergeExecutor,
    MergeRequest,
    MergeTransactionError,
    Resolution,
)
from l10n_branching.adapters.sqlalchemy import (
    Base,
    SQLAlchemyTranslationStore,
    TranslationModel,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

    from l10n_branching.domain import Branch, Translation
    from l10n_branching.ports import UnitOfWork


@pytest.fixture
async def session_factory(
    tmp_path: Path,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'l10n.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def sql_store(
    session_factory: async_sessionmaker[AsyncSession],
) -> SQLAlchemyTranslationStore:
    return SQLAlchemyTranslationStore(session_factory)


@pytest.fixture
async def sql_main(sql_store: SQLAlchemyTranslationStore) -> Branch:
    return await sql_store.create_branch("space-1", "main")


async def _count_translations(
    session_factory: async_sessionmaker[AsyncSession],
) -> int:
    async with session_factory() as session:
        return (
            await session.execute(select(func.count()).select_from(TranslationModel))
        ).scalar_one()


def test_sql_store_satisfies_protocol(sql_store) -> None:
    assert isinstance(sql_store, ITranslationStore)


@pytest.mark.asyncio()
async def test_branch_and_key_round_trip(sql_store, sql_main, seed_keys) -> None:
    await seed_keys(sql_store, sql_main, {"greet": {"en": "Hi", "de": "Hallo"}})
    await seed_keys(sql_store, sql_main, {"title": {"en": "Home"}}, namespace="web")

    assert await sql_store.get_branch(sql_main.id) == sql_main
    assert await sql_store.find_branch_by_name("space-1", "main") == sql_main
    keys = await sql_store.list_keys_with_translations(sql_main.id)
    assert [(k.namespace, k.name) for k in keys] == [(None, "greet"), ("web", "title")]
    assert keys[0].translation_map() == {"de": "Hallo", "en": "Hi"}
    key = await sql_store.find_key(sql_main.id, "title", "web")
    assert key is not None
    assert key.namespace == "web"


@pytest.mark.asyncio()
async def test_upsert_updates_existing_row(
    sql_store, sql_main, session_factory
) -> None:
    key = await sql_store.create_key(sql_main.id, "greet")
    first = await sql_store.upsert_translation(key.id, "en", "Hi")
    second = await sql_store.upsert_translation(key.id, "en", "Hello")

    assert first.id == second.id
    assert second.value == "Hello"
    assert await _count_translations(session_factory) == 1


@pytest.mark.asyncio()
async def test_unique_constraints(sql_store, sql_main) -> None:
    await sql_store.create_key(sql_main.id, "greet")

    with pytest.raises(ConstraintViolationError):
        await sql_store.create_key(sql_main.id, "greet")
    with pytest.raises(ConstraintViolationError):
        await sql_store.create_branch("space-1", "main")


@pytest.mark.asyncio()
async def test_end_to_end_merge(sql_store, sql_main, seed_keys, set_value, branch_values) -> None:
    await seed_keys(sql_store, sql_main, {"greet": {"en": "Hi"}})
    feature = await sql_store.create_branch("space-1", "feature", sql_main.id)
    await sql_store.copy_keys_and_translations(sql_main.id, feature.id)
    await set_value(sql_store, feature, "greet", "en", "Hey")
    await seed_keys(sql_store, feature, {"farewell": {"en": "Bye"}})
    await set_value(sql_store, sql_main, "greet", "en", "Hello")
    executor = MergeExecutor(sql_store, DiffCalculator(sql_store))

    blocked = await executor.merge(
        feature.id, MergeRequest(target_branch_id=sql_main.id)
    )
    assert not blocked.success
    assert [c.key for c in blocked.conflicts or []] == ["greet"]

    result = await executor.merge(
        feature.id,
        MergeRequest(
            target_branch_id=sql_main.id,
            resolutions=[Resolution(key="greet", resolution="source")],
        ),
    )

    assert result.success
    assert result.merged == 2
    assert await branch_values(sql_store, sql_main) == {
        (None, "farewell"): {"en": "Bye"},
        (None, "greet"): {"en": "Hey"},
    }
    assert (await executor.preview_merge(feature.id, sql_main.id)).is_empty


class FailingSQLStore(SQLAlchemyTranslationStore):
    armed = False

    async def upsert_translation(
        self, key_id: str, language: str, value: str, uow: UnitOfWork | None = None
    ) -> Translation:
        if self.armed and value == "Hey":
            raise RuntimeError("connection lost")
        return await super().upsert_translation(key_id, language, value, uow=uow)


@pytest.mark.asyncio()
async def test_failed_merge_is_rolled_back(
    session_factory, seed_keys, set_value, branch_values
) -> None:
    store = FailingSQLStore(session_factory)
    main = await store.create_branch("space-1", "main")
    await seed_keys(store, main, {"greet": {"en": "Hi"}})
    feature = await store.create_branch("space-1", "feature", main.id)
    await store.copy_keys_and_translations(main.id, feature.id)
    await set_value(store, feature, "greet", "en", "Hey")
    await seed_keys(store, feature, {"farewell": {"en": "Bye"}})
    before = await branch_values(store, main)
    store.armed = True

    with pytest.raises(MergeTransactionError):
        await MergeExecutor(store).merge(
            feature.id,
            MergeRequest(
                target_branch_id=main.id,
                resolutions=[Resolution(key="greet", resolution="source")],
            ),
        )

    assert await branch_values(store, main) == before
    assert await store.find_key(main.id, "farewell") is None


@pytest.mark.asyncio()
async def test_fork_copies_everything_in_one_transaction(
    sql_store, sql_main, seed_keys, branch_values
) -> None:
    await seed_keys(sql_store, sql_main, {"greet": {"en": "Hi"}, "bye": {"en": "Bye"}})

    response = await ForkBranchHandler(sql_store).handle(
        ForkBranchCommand(
            name="release", space_id="space-1", source_branch_id=sql_main.id
        )
    )

    fork = response.result
    assert fork.source_branch_id == sql_main.id
    assert await branch_values(sql_store, fork) == await branch_values(
        sql_store, sql_main
    )
    diff = await DiffCalculator(sql_store).compute_diff(fork.id, sql_main.id)
    assert diff.is_empty


def test_timestamp_columns_are_timezone_aware() -> None:
    for table in Base.metadata.sorted_tables:
        for column in ("created_at", "updated_at"):
            assert table.c[column].type.timezone is True


@pytest.mark.asyncio()
async def test_store_transaction_owns_its_session(sql_store, sql_main) -> None:
    async with sql_store.transaction() as uow:
        key = await sql_store.create_key(sql_main.id, "greet", uow=uow)
        assert await sql_store.find_key(sql_main.id, "greet", uow=uow) == key
        assert await sql_store.find_key(sql_main.id, "greet") is None

    assert await sql_store.find_key(sql_main.id, "greet") == key
