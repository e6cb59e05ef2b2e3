"""
The Graph API 클라이언트

Uniswap V3 Subgraph에서 볼트가 참조하는 풀 / 틱 / 포지션 상태를 조회합니다.
다중 체인 지원 (Ethereum, Polygon, Optimism, Arbitrum, Celo)
"""

import logging
import os
import time
from typing import Any, Dict, List, Optional

import requests

from ..constants import CHAIN_IDS, SUBGRAPH_IDS
from ..exceptions import GraphClientError
from . import queries
from .types import PoolState, PositionInfo, TickInfo

logger = logging.getLogger(__name__)

API_KEY_ENV = "RANGE_VAULT_GRAPH_API_KEY"


class GraphClient:
    """The Graph API 클라이언트

    사용법:
        client = GraphClient(api_key="your_api_key", chain="ethereum")
        pool = client.get_pool("0x...")
        ticks = client.get_ticks("0x...", [tick_lower, tick_upper])
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        chain: str = "ethereum",
        timeout: int = 30,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        session: Optional[requests.Session] = None
    ):
        """
        Args:
            api_key: The Graph API 키. None이면 환경변수에서 로드
            chain: 체인 이름 (ethereum, polygon, optimism, arbitrum, celo)
            timeout: 요청 타임아웃 (초)
            max_retries: 네트워크 오류 시 최대 시도 횟수
            retry_delay: 재시도 간격 기준값 (시도마다 선형 증가)
            session: 주입할 requests 세션 (테스트용)
        """
        self.api_key = api_key or os.getenv(API_KEY_ENV)
        if not self.api_key:
            raise GraphClientError(
                f"API 키가 필요합니다. {API_KEY_ENV} 환경변수를 설정하거나 "
                "api_key 파라미터로 전달하세요."
            )

        chain_lower = chain.lower()
        if chain_lower not in CHAIN_IDS:
            raise GraphClientError(
                f"지원하지 않는 체인: {chain}. "
                f"지원 체인: {', '.join(CHAIN_IDS.keys())}"
            )

        self.chain_id = CHAIN_IDS[chain_lower]
        self.subgraph_id = SUBGRAPH_IDS[self.chain_id]
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        """GraphQL 엔드포인트 URL"""
        return f"https://gateway.thegraph.com/api/{self.api_key}/subgraphs/id/{self.subgraph_id}"

    def _execute_query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GraphQL 쿼리 실행

        네트워크 오류와 타임아웃만 재시도합니다. GraphQL 오류 응답은 즉시 실패.

        Raises:
            GraphClientError: API 오류 또는 재시도 소진
        """
        payload = {"query": query}
        if variables:
            payload["variables"] = variables

        last_error = None
        for attempt in range(self.max_retries):
            try:
                response = self._session.post(
                    self.endpoint,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout
                )
                response.raise_for_status()
                data = response.json()
            except requests.exceptions.Timeout:
                last_error = GraphClientError(f"요청 타임아웃 ({self.timeout}초)")
            except requests.exceptions.RequestException as e:
                last_error = GraphClientError(f"네트워크 오류: {e}")
            except ValueError as e:
                last_error = GraphClientError(f"JSON 파싱 실패: {e}")
            else:
                if "errors" in data:
                    error_messages = [e.get("message", str(e)) for e in data["errors"]]
                    raise GraphClientError(f"GraphQL 오류: {'; '.join(error_messages)}")
                if "data" not in data:
                    raise GraphClientError("응답에 'data' 필드가 없습니다")
                return data["data"]

            logger.warning("Subgraph 요청 실패 (%d/%d): %s", attempt + 1, self.max_retries, last_error)
            if attempt < self.max_retries - 1:
                time.sleep(self.retry_delay * (attempt + 1))

        raise last_error

    def get_pool(self, pool_id: str) -> Optional[PoolState]:
        """Pool 전역 상태 조회. 없으면 None"""
        data = self._execute_query(queries.POOL_QUERY, {"id": pool_id.lower()})
        pool_data = data.get("pool")
        if not pool_data:
            return None
        return PoolState.from_dict(pool_data)

    def get_ticks(self, pool_id: str, tick_idxs: List[int]) -> Dict[int, TickInfo]:
        """틱 인덱스별 상태 조회

        초기화되지 않은 틱은 Subgraph에 없으므로 빈 TickInfo로 채웁니다.
        """
        data = self._execute_query(
            queries.TICKS_BY_IDX_QUERY,
            {
                "pool": pool_id.lower(),
                "tickIdxs": [str(idx) for idx in tick_idxs]
            }
        )
        ticks = {int(t["tickIdx"]): TickInfo.from_dict(t) for t in data.get("ticks", [])}
        for idx in tick_idxs:
            ticks.setdefault(idx, TickInfo())
        return ticks

    def get_position(self, pool_id: str, owner: str, tick_lower: int, tick_upper: int) -> PositionInfo:
        """소유자/범위 기준 포지션 조회

        같은 범위의 NFT 포지션이 여러 개면 유동성을 합산합니다.
        Subgraph는 tokensOwed를 제공하지 않으므로 0으로 둡니다.
        """
        data = self._execute_query(
            queries.POSITIONS_BY_OWNER_QUERY,
            {"pool": pool_id.lower(), "owner": owner.lower()}
        )
        matches = [
            p for p in data.get("positions", [])
            if int(p["tickLower"]["tickIdx"]) == tick_lower
            and int(p["tickUpper"]["tickIdx"]) == tick_upper
        ]
        if not matches:
            return PositionInfo()

        first = PositionInfo.from_dict(matches[0])
        return PositionInfo(
            liquidity=sum(int(p["liquidity"]) for p in matches),
            fee_growth_inside_0_last_x128=first.fee_growth_inside_0_last_x128,
            fee_growth_inside_1_last_x128=first.fee_growth_inside_1_last_x128,
        )
