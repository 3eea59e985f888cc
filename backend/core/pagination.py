import logging
import time
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


def collect_pages(
    fetch_page: Callable[[Optional[str]], Dict[str, Any]],
    result_key: str,
    page_delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> List[Any]:
    """
    Follow Square cursors until a page comes back without one.

    Every page's `result_key` entries are appended in the order received.
    Nothing is streamed; an exception on any page propagates and the partial
    result is dropped.
    """
    results: List[Any] = []
    cursor: Optional[str] = None
    pages = 0
    while True:
        page = fetch_page(cursor) or {}
        results.extend(page.get(result_key) or [])
        pages += 1
        cursor = page.get("cursor") or None
        if not cursor:
            break
        if page_delay > 0:
            sleep(page_delay)

    logger.debug("Fetched %d %s over %d page(s)", len(results), result_key, pages)
    return results


def chunked(values: List[Any], size: int) -> List[List[Any]]:
    if size <= 0:
        return [list(values)] if values else []
    return [values[i:i + size] for i in range(0, len(values), size)]
