from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

from app.schemas.parsing import BatchItem, BatchItemResult, BatchReport, ParseOutcome

logger = logging.getLogger(__name__)

MAX_BATCH_WORKERS = 5
MAX_BATCH_ITEMS = 50


class BatchTooLargeError(ValueError):
    def __init__(self, size: int, limit: int):
        super().__init__(f"Max {limit} files allowed (received {size})")
        self.size = size
        self.limit = limit


def _run_item(item: BatchItem, parse_one: Callable[[str, str], ParseOutcome]) -> BatchItemResult:
    try:
        outcome = parse_one(item.text, item.file_name)
    except Exception as exc:  # noqa: BLE001 - one bad document must not fail the batch
        logger.exception("batch_item_crashed file=%s", item.file_name)
        return BatchItemResult(file_name=item.file_name, status="error", error=str(exc) or "Unknown error")

    if outcome.status == "accepted":
        return BatchItemResult(file_name=item.file_name, status="success", outcome=outcome)
    if outcome.status == "needs_review":
        return BatchItemResult(file_name=item.file_name, status="needs_review", outcome=outcome)
    return BatchItemResult(
        file_name=item.file_name,
        status="error",
        outcome=outcome,
        error=outcome.error or "Parse failed",
    )


def parse_batch(
    items: Sequence[BatchItem],
    parse_one: Callable[[str, str], ParseOutcome],
    *,
    max_workers: int = MAX_BATCH_WORKERS,
    max_items: int = MAX_BATCH_ITEMS,
) -> BatchReport:
    """Parse every item with bounded concurrency.

    ``parse_one`` receives ``(text, file_name)``. Results keep input order and a
    failure in one item is reported on that item only.
    """
    if len(items) > max_items:
        raise BatchTooLargeError(len(items), max_items)
    if not items:
        return BatchReport(total=0, succeeded=0, needs_review=0, failed=0)

    workers = max(1, min(max_workers, MAX_BATCH_WORKERS, len(items)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="parse-batch") as pool:
        results = list(pool.map(lambda item: _run_item(item, parse_one), items))

    succeeded = sum(1 for result in results if result.status == "success")
    needs_review = sum(1 for result in results if result.status == "needs_review")
    failed = len(results) - succeeded - needs_review
    logger.info(
        "batch_parse_completed total=%s succeeded=%s needs_review=%s failed=%s workers=%s",
        len(results),
        succeeded,
        needs_review,
        failed,
        workers,
    )
    return BatchReport(
        total=len(results),
        succeeded=succeeded,
        needs_review=needs_review,
        failed=failed,
        results=results,
    )
