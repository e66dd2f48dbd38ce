"""Order-preserving batched fan-out over async work items."""

import asyncio
import logging
from typing import Awaitable, Callable, Sequence, TypeVar

from repolens.state.registry import CancellationToken


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Pacing policy tuned for reviewer rate limits
FILE_BATCH_SIZE = 5
FILE_BATCH_DELAY = 1.0
ISSUE_BATCH_SIZE = 3
ISSUE_BATCH_DELAY = 2.0


def chunked(items: Sequence[T], size: int) -> list[Sequence[T]]:
    """Split items into contiguous chunks of at most ``size`` elements."""
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    return [items[i:i + size] for i in range(0, len(items), size)]


async def run_in_batches(
    items: Sequence[T],
    processor: Callable[[T], Awaitable[R]],
    *,
    batch_size: int,
    delay: float,
    cancel_token: CancellationToken | None = None,
    on_error: Callable[[T, BaseException], R] | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "item",
) -> list[R]:
    """Run ``processor`` over ``items`` in concurrent batches.

    Each batch runs fully concurrently and is awaited until every item has
    settled before the next one starts; ``delay`` seconds separate batches.
    The result list always matches the input order.

    Args:
        items: Work items
        processor: Async callable producing one result per item
        batch_size: Maximum number of items in flight at once
        delay: Pause between consecutive batches, in seconds
        cancel_token: Checked before every batch
        on_error: Produces a substitute result when an item raises. Without
            it, the first failure is re-raised once its batch has settled.
        sleep: Awaitable used for the pause
        label: Name used in log lines

    Returns:
        One result per input item, in input order

    Raises:
        AnalysisCancelledError: If the token is cancelled before a batch
    """
    batches = chunked(items, batch_size)
    results: list[R] = []

    for index, batch in enumerate(batches, start=1):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        logger.info(f"Processing {label} batch {index}/{len(batches)}")
        settled = await asyncio.gather(
            *(processor(item) for item in batch),
            return_exceptions=True,
        )

        for item, outcome in zip(batch, settled):
            if isinstance(outcome, BaseException):
                if on_error is None or isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                logger.warning(f"{label.capitalize()} failed, substituting fallback: {outcome}")
                results.append(on_error(item, outcome))
            else:
                results.append(outcome)

        if index < len(batches):
            await sleep(delay)

    return results
