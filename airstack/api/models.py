import enum
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from airstack.exceptions import APIError

class TokenBalance(BaseModel):
    """One token holding of an owner on a given chain."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    amount: str
    formatted_amount: Optional[str] = Field(default=None, alias="formattedAmount")
    blockchain: str
    token_address: str = Field(alias="tokenAddress")
    # Only meaningful for ERC721/ERC1155 holdings
    token_id: Optional[str] = Field(default=None, alias="tokenId")

class PageInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    next_cursor: Optional[str] = Field(default=None, alias="nextCursor")
    prev_cursor: Optional[str] = Field(default=None, alias="prevCursor")
    has_next_page: Optional[bool] = Field(default=None, alias="hasNextPage")
    has_prev_page: Optional[bool] = Field(default=None, alias="hasPrevPage")

class Outcome(enum.Enum):
    OK = "ok"
    API_ERROR = "api_error"
    HTTP_ERROR = "http_error"

PageFunc = Callable[[], Awaitable["QueryResponse"]]

@dataclass(frozen=True)
class QueryResponse:
    """
    Result of a single GraphQL round trip.

    Either ``data`` is usable (outcome OK) or ``error`` describes why not.
    ``next_page``/``prev_page`` are only set when the matching flag is true.
    """

    outcome: Outcome
    status_code: int
    data: Any = None
    error: Optional[str] = None
    has_next_page: bool = False
    has_prev_page: bool = False
    next_page: Optional[PageFunc] = field(default=None, repr=False, compare=False)
    prev_page: Optional[PageFunc] = field(default=None, repr=False, compare=False)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    def raise_for_error(self) -> None:
        if not self.ok:
            raise APIError(self.error or "unknown error", status_code=self.status_code)

@dataclass(frozen=True)
class TokenBalancePage:
    balances: List[TokenBalance]
    response: QueryResponse
