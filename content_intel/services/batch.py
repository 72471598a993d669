"""
Per-item batch execution with failure isolation
"""
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Sequence
from loguru import logger

from content_intel.models import BatchOutcome, ItemOutcome


def run_batch(
    items: Sequence[Any],
    worker: Callable[[Any], Any],
    key: Callable[[Any], str],
    max_workers: int = 1,
    label: str = "item",
) -> BatchOutcome:
    """
    Apply worker to every item, collecting one outcome per item in input order

    An exception from one item becomes a failed outcome for that item only.

    Args:
        items: Items to process
        worker: Function producing the value for one item
        key: Function naming an item in failure records (e.g. its URL)
        max_workers: Bounded parallelism (1 processes items one at a time)
        label: Name used in log lines

    Returns:
        BatchOutcome with len(items) outcomes
    """
    def _attempt(item: Any) -> ItemOutcome:
        try:
            return ItemOutcome.ok(worker(item))
        except Exception as e:
            logger.warning(f"Failed to process {label} {key(item)}: {e}")
            return ItemOutcome.failed(key(item), str(e))

    if max_workers <= 1 or len(items) <= 1:
        outcomes = [_attempt(item) for item in items]
    else:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=f"content-intel-{label}") as executor:
            outcomes = list(executor.map(_attempt, items))

    return BatchOutcome(outcomes=outcomes)
