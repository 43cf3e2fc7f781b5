TOKEN_BALANCES_QUERY = """
query GetTokensHeldByWalletAddress($identity: Identity, $tokenType: [TokenType!], $blockchain: TokenBlockchain!, $limit: Int, $cursor: String) {
  TokenBalances(
    input: {filter: {owner: {_eq: $identity}, tokenType: {_in: $tokenType}}, blockchain: $blockchain, limit: $limit, cursor: $cursor}
  ) {
    TokenBalance {
      amount
      formattedAmount
      blockchain
      tokenAddress
      tokenId
    }
    pageInfo {
      nextCursor
      prevCursor
    }
  }
}
"""
