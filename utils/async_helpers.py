"""Run orchestrator turns from Streamlit's synchronous script"""

import asyncio
from typing import Any, Coroutine, Optional, TypeVar

from config import get_settings

T = TypeVar('T')


class TurnRunner:
    """
    Drive one session turn to completion on a private event loop.

    Streamlit reruns the script on a worker thread with no running loop, so
    every turn gets a fresh loop that is closed once the turn ends. Streams
    left open by an interrupted turn are finalized before the loop closes.
    """

    def run(self, coro: Coroutine[Any, Any, T], timeout: Optional[float] = None) -> T:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            if timeout:
                return loop.run_until_complete(asyncio.wait_for(coro, timeout=timeout))
            return loop.run_until_complete(coro)
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"Turn did not finish within {timeout} seconds") from e
        finally:
            try:
                loop.run_until_complete(loop.shutdown_asyncgens())
            finally:
                asyncio.set_event_loop(None)
                loop.close()


_runner = TurnRunner()


def run_async_with_timeout(coro: Coroutine[Any, Any, T], timeout: Optional[float] = None) -> T:
    """
    Run a coroutine, cancelling it once ``timeout`` seconds have passed.

    Args:
        coro: Orchestrator coroutine to run
        timeout: Seconds to wait; defaults to the configured turn timeout

    Raises:
        TimeoutError: if the coroutine was cancelled for running too long
    """
    if timeout is None:
        timeout = get_settings().turn_timeout
    return _runner.run(coro, timeout=timeout)
