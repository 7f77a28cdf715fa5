"""Read side of the branch module: diff / merge preview."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..cqrs.handler import QueryHandler
from ..cqrs.query import Query
from ..cqrs.response import QueryResponse
from ..domain.diff import BranchDiffResult

if TYPE_CHECKING:
    from ..services.diff_calculator import DiffCalculator


class ComputeDiffQuery(Query[BranchDiffResult]):
    """Compare *source_branch_id* against *target_branch_id*."""

    source_branch_id: str
    target_branch_id: str


class ComputeDiffHandler(QueryHandler[BranchDiffResult]):
    def __init__(self, diff_calculator: DiffCalculator) -> None:
        self._diff_calculator = diff_calculator

    async def handle(
        self, query: ComputeDiffQuery
    ) -> QueryResponse[BranchDiffResult]:
        diff = await self._diff_calculator.compute_diff(
            query.source_branch_id, query.target_branch_id
        )
        return QueryResponse(result=diff, correlation_id=query.correlation_id)
