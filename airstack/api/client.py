import json
from typing import Any, Dict, List, Optional
from loguru import logger
from pydantic import ValidationError

from airstack.api.models import Outcome, QueryResponse, TokenBalance, TokenBalancePage
from airstack.api.queries import TOKEN_BALANCES_QUERY
from airstack.api.transport import SUCCESS_STATUS_CODE, Transport
from airstack.config import settings
from airstack.exceptions import APIError, DecodeError, QueryError, TransportError
from airstack.utils.page_info import find_page_info, page_flags

# Reserved: the API uses it for invalid queries, handled like any other non-200.
UNPROCESSABLE_ENTITY_STATUS = 422

class AirstackClient:
    DEFAULT_HEADERS = {
        "Content-Type": "application/json",
    }

    def __init__(
        self,
        api_key: str,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[Transport] = None,
    ):
        self._api_key = api_key
        self._url = url or settings.AIRSTACK_API_URL
        self._transport = transport or Transport(timeout=timeout)

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def url(self) -> str:
        return self._url

    @property
    def timeout(self) -> float:
        return self._transport.timeout

    async def __aenter__(self) -> "AirstackClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        await self._transport.close()

    def _headers(self) -> Dict[str, str]:
        headers = dict(self.DEFAULT_HEADERS)
        headers["Authorization"] = self._api_key
        return headers

    async def execute_query(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> QueryResponse:
        """
        Sends a GraphQL query and returns the response envelope.

        Non-200 statuses and GraphQL ``errors`` are reported inside the
        returned QueryResponse, not raised. Raises TransportError when the
        request could not be completed, QueryError when the variables cannot be
        serialised and DecodeError when a 200 body is not a JSON object.
        """
        variables = dict(variables or {})
        try:
            body = json.dumps({"query": query, "variables": variables}).encode()
        except (TypeError, ValueError) as e:
            raise QueryError(f"Variables are not JSON serialisable: {e}") from e

        logger.debug(f"POST {self._url} query={query.strip()[:50]!r} variables={variables}")
        raw = await self._transport.send("POST", self._url, self._headers(), body, timeout=timeout)

        if raw.error is not None or raw.status_code != SUCCESS_STATUS_CODE:
            error = f"HTTP error: {raw.error}, Status Code: {raw.status_code}"
            logger.warning(f"Airstack query failed: {error}")
            return QueryResponse(
                outcome=Outcome.HTTP_ERROR,
                status_code=raw.status_code,
                error=error,
            )

        try:
            payload = json.loads(raw.body)
        except ValueError as e:
            raise DecodeError(f"Response body is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise DecodeError(f"Expected a JSON object, got {type(payload).__name__}")

        if "errors" in payload:
            error = json.dumps(payload["errors"])
            logger.warning(f"Airstack returned errors: {error}")
            return QueryResponse(
                outcome=Outcome.API_ERROR,
                status_code=raw.status_code,
                error=error,
            )

        data = payload.get("data")
        page_info = find_page_info(data)
        has_next, has_prev = page_flags(page_info)

        next_page = None
        prev_page = None
        if has_next:
            next_page = self._page_func(query, variables, page_info.next_cursor, timeout)
        if has_prev:
            prev_page = self._page_func(query, variables, page_info.prev_cursor, timeout)

        return QueryResponse(
            outcome=Outcome.OK,
            status_code=raw.status_code,
            data=data,
            has_next_page=has_next,
            has_prev_page=has_prev,
            next_page=next_page,
            prev_page=prev_page,
        )

    def _page_func(self, query: str, variables: Dict[str, Any], cursor: str, timeout: Optional[float]):
        page_variables = {**variables, "cursor": cursor}

        async def fetch() -> QueryResponse:
            return await self.execute_query(query, page_variables, timeout=timeout)

        return fetch

    async def get_token_balances(
        self, variables: Dict[str, Any], timeout: Optional[float] = None
    ) -> List[TokenBalance]:
        """
        Fetches token balances held by ``variables["identity"]``.

        Expected variables: identity, tokenType, blockchain, limit (and
        optionally cursor). Missing ones are left for the API to reject.
        """
        page = await self.get_token_balances_page(variables, timeout=timeout)
        return page.balances

    async def get_token_balances_page(
        self, variables: Dict[str, Any], timeout: Optional[float] = None
    ) -> TokenBalancePage:
        try:
            response = await self.execute_query(TOKEN_BALANCES_QUERY, variables, timeout=timeout)
        except (TransportError, QueryError) as e:
            raise QueryError(f"Token balances query failed: {e}") from e

        if not response.ok:
            raise APIError(response.error or "unknown error", status_code=response.status_code)

        return TokenBalancePage(balances=self._decode_token_balances(response.data), response=response)

    @staticmethod
    def _decode_token_balances(data: Any) -> List[TokenBalance]:
        if not isinstance(data, dict) or "TokenBalances" not in data:
            raise DecodeError(f"Missing TokenBalances in response data: {data!r}")

        # The API answers null when the owner holds nothing
        container = data["TokenBalances"]
        if container is None:
            return []
        if not isinstance(container, dict):
            raise DecodeError(f"Unexpected TokenBalances value: {container!r}")

        records = container.get("TokenBalance")
        if records is None:
            return []
        if not isinstance(records, list):
            raise DecodeError(f"Unexpected TokenBalance value: {records!r}")

        try:
            return [TokenBalance.model_validate(record) for record in records]
        except ValidationError as e:
            raise DecodeError(f"Malformed token balance record: {e}") from e
