import argparse
import asyncio
import sys
from typing import List, Optional
from loguru import logger

from airstack.api.client import AirstackClient
from airstack.config import settings
from airstack.exceptions import AirstackError

def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List token balances held by a wallet via Airstack")
    parser.add_argument("identity", help="Owner address or identity (ENS, Lens, Farcaster...)")
    parser.add_argument(
        "--token-type",
        dest="token_types",
        action="append",
        help="Token type filter, repeatable (default: ERC20 and ERC721)",
    )
    parser.add_argument("--blockchain", default="ethereum", help="Chain to query (default: ethereum)")
    parser.add_argument("--limit", type=int, default=10, help="Maximum number of balances (default: 10)")
    parser.add_argument("--api-key", help="Airstack API key (default: AIRSTACK_API_KEY)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)

async def run(args: argparse.Namespace, api_key: str) -> int:
    variables = {
        "identity": args.identity,
        "tokenType": args.token_types or ["ERC20", "ERC721"],
        "blockchain": args.blockchain,
        "limit": args.limit,
    }

    async with AirstackClient(api_key) as client:
        try:
            balances = await client.get_token_balances(variables)
        except AirstackError as e:
            logger.error(f"Error fetching token balances: {e}")
            return 1

    for balance in balances:
        print(f"Token Address: {balance.token_address}, Amount: {balance.amount}")
    return 0

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    api_key = args.api_key or settings.AIRSTACK_API_KEY
    if not api_key:
        logger.error("AIRSTACK_API_KEY not found in environment variables.")
        return 1

    return asyncio.run(run(args, api_key))

if __name__ == "__main__":
    sys.exit(main())
