from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, TypeVar

from ..core.execute_function_call import execute_function_call
from ..core.options import FunctionCallOptions, FunctionOptions

QUERY = TypeVar("QUERY")
OBJECT = TypeVar("OBJECT")


class Retriever(ABC, Generic[QUERY, OBJECT]):
    """Looks up objects for a query (vector index, search API, ...)."""

    @abstractmethod
    async def retrieve(self, query: QUERY, options: FunctionCallOptions) -> List[OBJECT]:
        pass


async def retrieve(
    retriever: Retriever[QUERY, OBJECT],
    query: QUERY,
    options: Optional[FunctionOptions] = None,
) -> List[OBJECT]:
    """Run `retriever` as an instrumented "retrieve" call."""

    async def execute(call_options: FunctionCallOptions) -> List[Any]:
        return await retriever.retrieve(query, call_options)

    return await execute_function_call("retrieve", execute, input=query, options=options)
