from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, TypeVar

from .execute_function_call import execute_function_call
from .options import FunctionCallOptions, FunctionOptions

T = TypeVar("T")


async def execute_function(
    fn: Callable[..., Awaitable[T]],
    input: Any,
    options: Optional[FunctionOptions] = None,
    function_id: Optional[str] = None,
    pass_options: bool = False,
) -> T:
    """
    Run an arbitrary async function as an instrumented "execute-function" call.

    Args:
        fn: Called as `fn(input)`, or `fn(input, call_options)` with `pass_options`
        input: Input passed to `fn` and reported in events
        options: Per-call options
        function_id: Shortcut for options.function_id
        pass_options: Hand the call options to `fn` so nested calls become children
    """
    options = options or FunctionOptions()
    if function_id is not None:
        options = options.with_(function_id=function_id)

    async def execute(call_options: FunctionCallOptions) -> T:
        if pass_options:
            return await fn(input, call_options)
        return await fn(input)

    return await execute_function_call("execute-function", execute, input=input, options=options)
