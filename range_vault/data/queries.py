"""
GraphQL 쿼리 정의

볼트 상태를 오프체인에서 재구성하기 위한 Uniswap V3 Subgraph 쿼리.
수수료 추정에 필요한 fee growth 필드를 모두 포함합니다.
"""

# Pool 전역 상태 (slot0 + fee growth global)
POOL_QUERY = """
query Pool($id: ID!) {
  pool(id: $id) {
    id
    feeTier
    tick
    sqrtPrice
    liquidity
    feeGrowthGlobal0X128
    feeGrowthGlobal1X128
    token0 {
      id
      symbol
      decimals
    }
    token1 {
      id
      symbol
      decimals
    }
  }
}
"""

# 특정 틱들의 feeGrowthOutside
TICKS_BY_IDX_QUERY = """
query Ticks($pool: ID!, $tickIdxs: [BigInt!]!) {
  ticks(where: { pool: $pool, tickIdx_in: $tickIdxs }) {
    tickIdx
    liquidityGross
    liquidityNet
    feeGrowthOutside0X128
    feeGrowthOutside1X128
  }
}
"""

# 소유자 기준 포지션 조회 (범위는 클라이언트에서 필터)
POSITIONS_BY_OWNER_QUERY = """
query Positions($pool: String!, $owner: Bytes!) {
  positions(where: { pool: $pool, owner: $owner, liquidity_gt: 0 }, first: 100) {
    id
    owner
    liquidity
    tickLower {
      tickIdx
    }
    tickUpper {
      tickIdx
    }
    feeGrowthInside0LastX128
    feeGrowthInside1LastX128
  }
}
"""
