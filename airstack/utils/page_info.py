from collections import deque
from typing import Any, Optional, Tuple

from loguru import logger
from pydantic import ValidationError

from airstack.api.models import PageInfo

def find_page_info(data: Any) -> Optional[PageInfo]:
    """
    Returns the first ``pageInfo`` block found in a GraphQL ``data`` payload.

    Airstack nests it under the queried root field, e.g.
    ``{"TokenBalances": {"TokenBalance": [...], "pageInfo": {...}}}``,
    so the payload is searched breadth-first through mappings and lists.
    """
    if not isinstance(data, (dict, list)):
        return None

    queue = deque([data])
    while queue:
        node = queue.popleft()
        if isinstance(node, dict):
            raw = node.get("pageInfo")
            if isinstance(raw, dict):
                try:
                    return PageInfo.model_validate(raw)
                except ValidationError as e:
                    logger.warning(f"Ignoring malformed pageInfo {raw!r}: {e}")
                    return None
            queue.extend(v for v in node.values() if isinstance(v, (dict, list)))
        else:
            queue.extend(v for v in node if isinstance(v, (dict, list)))

    return None

def page_flags(page_info: Optional[PageInfo]) -> Tuple[bool, bool]:
    """
    Decides (has_next_page, has_prev_page).

    A page exists in a direction when its cursor is non-empty. An explicit
    ``hasNextPage: false`` / ``hasPrevPage: false`` overrides the cursor; a
    true flag without a cursor is ignored since there is nothing to replay.
    """
    if page_info is None:
        return False, False

    has_next = bool(page_info.next_cursor) and page_info.has_next_page is not False
    has_prev = bool(page_info.prev_cursor) and page_info.has_prev_page is not False
    return has_next, has_prev
