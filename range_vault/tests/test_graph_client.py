"""
GraphClient / SubgraphPoolView 테스트

requests 세션을 MagicMock으로 주입해 네트워크 없이 응답 파싱과
재시도 정책을 검증합니다.
"""

from unittest.mock import MagicMock

import pytest
import requests

from ..data.graph_client import API_KEY_ENV, GraphClient
from ..data.pool import SubgraphPoolView
from ..data.types import TickInfo, TickRange
from ..exceptions import GraphClientError
from ..math.fee_math import estimate_uncollected_fees

POOL_ID = "0x8ad599c3A0ff1De082011EFDDc58f1908eb6e6D8"
OWNER = "0xVault"

POOL_DATA = {
    "id": POOL_ID.lower(),
    "feeTier": "3000",
    "tick": "-120",
    "sqrtPrice": "78749215441682412541095084032",
    "liquidity": "1000000000000000000",
    "feeGrowthGlobal0X128": "5000",
    "feeGrowthGlobal1X128": "7000",
    "token0": {"id": "0xA0b8", "symbol": "USDC", "decimals": "6"},
    "token1": {"id": "0xC02a", "symbol": "WETH", "decimals": "18"},
}


def _response(body):
    response = MagicMock()
    response.json.return_value = body
    response.raise_for_status.return_value = None
    return response


def _client(*bodies, **kwargs):
    session = MagicMock()
    session.post.side_effect = [_response(b) for b in bodies]
    params = {"api_key": "test-key", "retry_delay": 0, "session": session}
    params.update(kwargs)
    return GraphClient(**params), session


class TestGraphClient:

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv(API_KEY_ENV, raising=False)
        with pytest.raises(GraphClientError):
            GraphClient()

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV, "env-key")
        client = GraphClient(session=MagicMock())
        assert "env-key" in client.endpoint

    def test_unknown_chain(self):
        with pytest.raises(GraphClientError):
            GraphClient(api_key="test-key", chain="solana")

    def test_get_pool(self):
        client, session = _client({"data": {"pool": POOL_DATA}})

        pool = client.get_pool(POOL_ID)

        assert pool.fee_tier == 3000
        assert pool.tick == -120
        assert pool.token1.symbol == "WETH"
        assert pool.fee_growth_global_1_x128 == 7000
        _, kwargs = session.post.call_args
        assert kwargs["json"]["variables"] == {"id": POOL_ID.lower()}

    def test_missing_pool(self):
        client, _ = _client({"data": {"pool": None}})
        assert client.get_pool(POOL_ID) is None

    def test_graphql_error_not_retried(self):
        client, session = _client({"errors": [{"message": "bad query"}]})
        with pytest.raises(GraphClientError, match="bad query"):
            client.get_pool(POOL_ID)
        assert session.post.call_count == 1

    def test_missing_data_field(self):
        client, _ = _client({})
        with pytest.raises(GraphClientError):
            client.get_pool(POOL_ID)

    def test_network_errors_retried(self):
        session = MagicMock()
        session.post.side_effect = requests.exceptions.ConnectionError("down")
        client = GraphClient(api_key="test-key", retry_delay=0, max_retries=3, session=session)

        with pytest.raises(GraphClientError, match="네트워크"):
            client.get_pool(POOL_ID)
        assert session.post.call_count == 3

    def test_recovers_after_timeout(self):
        session = MagicMock()
        session.post.side_effect = [
            requests.exceptions.Timeout(),
            _response({"data": {"pool": POOL_DATA}}),
        ]
        client = GraphClient(api_key="test-key", retry_delay=0, session=session)

        assert client.get_pool(POOL_ID).tick == -120
        assert session.post.call_count == 2

    def test_get_ticks_fills_uninitialized(self):
        client, _ = _client({"data": {"ticks": [
            {"tickIdx": "-1020", "liquidityGross": "10", "liquidityNet": "10",
             "feeGrowthOutside0X128": "1", "feeGrowthOutside1X128": "2"},
        ]}})

        ticks = client.get_ticks(POOL_ID, [-1020, 960])

        assert ticks[-1020].liquidity_gross == 10
        assert ticks[-1020].fee_growth_outside_1_x128 == 2
        assert ticks[960] == TickInfo()
        assert not ticks[960].initialized

    def test_get_position_sums_matching_ranges(self):
        positions = [
            {"liquidity": "100", "tickLower": {"tickIdx": "-60"}, "tickUpper": {"tickIdx": "60"},
             "feeGrowthInside0LastX128": "3", "feeGrowthInside1LastX128": "4"},
            {"liquidity": "50", "tickLower": {"tickIdx": "-60"}, "tickUpper": {"tickIdx": "60"},
             "feeGrowthInside0LastX128": "3", "feeGrowthInside1LastX128": "4"},
            {"liquidity": "999", "tickLower": {"tickIdx": "-120"}, "tickUpper": {"tickIdx": "60"},
             "feeGrowthInside0LastX128": "0", "feeGrowthInside1LastX128": "0"},
        ]
        client, _ = _client({"data": {"positions": positions}})

        info = client.get_position(POOL_ID, OWNER, -60, 60)

        assert info.liquidity == 150
        assert info.fee_growth_inside_0_last_x128 == 3
        assert info.tokens_owed_0 == 0

    def test_get_position_no_match(self):
        client, _ = _client({"data": {"positions": []}})
        assert client.get_position(POOL_ID, OWNER, -60, 60).liquidity == 0


class TestSubgraphPoolView:

    def test_views(self):
        client, _ = _client({"data": {"pool": POOL_DATA}})
        view = SubgraphPoolView(client, POOL_ID)

        assert view.token0 == "0xa0b8"
        assert view.fee() == 3000
        assert view.tick_spacing() == 60
        assert view.slot0().tick == -120
        assert view.fee_growth_global0_x128() == 5000

    def test_missing_pool_raises(self):
        client, _ = _client({"data": {"pool": None}})
        with pytest.raises(ValueError):
            SubgraphPoolView(client, POOL_ID)

    def test_snapshot_fee_estimate(self):
        """글로벌 5000/7000, 바깥 0, 마지막 inside 0 → 유동성 Q128 배수만큼 수수료"""
        ticks = {"data": {"ticks": [
            {"tickIdx": "-1020", "liquidityGross": "1", "liquidityNet": "1"},
            {"tickIdx": "960", "liquidityGross": "1", "liquidityNet": "-1"},
        ]}}
        positions = {"data": {"positions": [
            {"liquidity": str(2**128), "tickLower": {"tickIdx": "-1020"}, "tickUpper": {"tickIdx": "960"},
             "feeGrowthInside0LastX128": "0", "feeGrowthInside1LastX128": "0"},
        ]}}
        client, session = _client({"data": {"pool": POOL_DATA}}, ticks, positions)
        view = SubgraphPoolView(client, POOL_ID)

        snapshot = view.snapshot(OWNER, TickRange(-1020, 960))
        fees = estimate_uncollected_fees(snapshot)

        assert snapshot.position.liquidity == 2**128
        assert (fees.fee0, fees.fee1) == (5000, 7000)
        # 틱 두 개는 한 번의 요청으로 조회
        assert session.post.call_count == 3

    def test_ticks_are_cached(self):
        ticks = {"data": {"ticks": []}}
        client, session = _client({"data": {"pool": POOL_DATA}}, ticks)
        view = SubgraphPoolView(client, POOL_ID)

        view.ticks(60)
        view.ticks(60)

        assert session.post.call_count == 2
