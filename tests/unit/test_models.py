"""
数据模型与基础组件测试
"""

import pandas as pd
import pytest

from src.core.instruments import (
    TRADING_PAIRS,
    AssetCategory,
    find_pair,
    normalize_symbol,
    to_provider_symbol,
)
from src.core.timeframes import MULTI_TIMEFRAMES, Timeframe
from src.data.errors import DataIntegrityError
from src.data.models import Candle, MultiTimeframeResult


class TestCandle:
    """Candle 测试"""

    def test_from_provider_strings(self):
        """测试字符串字段解析"""
        candle = Candle.from_provider(
            {"datetime": "2024-01-01", "open": "1.1", "high": "1.2", "low": "1.0", "close": "1.15", "volume": "42"},
            lambda: 0.0,
        )
        assert candle == Candle("2024-01-01", 1.1, 1.2, 1.0, 1.15, 42.0)

    def test_time_field_fallback(self):
        """测试 time 字段作为时间戳"""
        candle = Candle.from_provider(
            {"time": "2024-01-01 00:00", "open": 1, "high": 1, "low": 1, "close": 1},
            lambda: 7.0,
        )
        assert candle.datetime == "2024-01-01 00:00"
        assert candle.volume == 7.0

    def test_zero_volume_filled(self):
        """测试零成交量用填充值"""
        candle = Candle.from_provider(
            {"datetime": "t", "open": 1, "high": 1, "low": 1, "close": 1, "volume": "0"},
            lambda: 1234.0,
        )
        assert candle.volume == 1234.0

    @pytest.mark.parametrize("volume", ["NaN", "inf", "-inf", float("nan"), "abc", True])
    def test_non_finite_volume_filled(self, volume):
        """测试非有限成交量用填充值"""
        candle = Candle.from_provider(
            {"datetime": "t", "open": 1, "high": 1, "low": 1, "close": 1, "volume": volume},
            lambda: 1234.0,
        )
        assert candle.volume == 1234.0

    def test_missing_price_rejected(self):
        """测试缺失价格字段"""
        with pytest.raises(DataIntegrityError):
            Candle.from_provider({"datetime": "t", "open": 1, "high": 1, "low": 1}, lambda: 0.0)

    def test_bool_rejected(self):
        """测试布尔值不视为数字"""
        with pytest.raises(DataIntegrityError):
            Candle.from_provider(
                {"datetime": "t", "open": True, "high": 1, "low": 1, "close": 1}, lambda: 0.0
            )


class TestMultiTimeframeResult:
    """MultiTimeframeResult 测试"""

    def make_result(self) -> MultiTimeframeResult:
        candles = [
            Candle("2024-01-01T10:00:00+00:00", 1.0, 1.1, 0.9, 1.05, 10.0),
            Candle("2024-01-01T10:05:00+00:00", 1.05, 1.2, 1.0, 1.1, 20.0),
        ]
        return MultiTimeframeResult(
            symbol="EURUSD",
            timeframes={Timeframe.M5: candles, Timeframe.M15: list(candles)},
            errors={Timeframe.M15: "rate limited"},
            synthetic={Timeframe.M15},
        )

    def test_real_and_synthetic(self):
        """测试真实/模拟时间框架划分"""
        result = self.make_result()
        assert result.real_timeframes == [Timeframe.M5]
        assert result.synthetic_timeframes == [Timeframe.M15]

    def test_to_frame(self):
        """测试转换为 DataFrame"""
        df = self.make_result().to_frame("5min")

        assert list(df.columns) == ["timestamp", "open", "high", "low", "close", "volume"]
        assert len(df) == 2
        assert df["timestamp"].iloc[0] == pd.Timestamp("2024-01-01 10:00", tz="UTC")
        assert df["close"].tolist() == [1.05, 1.1]

    def test_to_frame_empty(self):
        """测试空时间框架"""
        df = self.make_result().to_frame(Timeframe.H4)
        assert df.empty
        assert "close" in df.columns

    def test_to_dict(self):
        """测试序列化"""
        data = self.make_result().to_dict()

        assert list(data["timeframes"]) == ["5min", "15min"]
        assert data["errors"] == {"15min": "rate limited"}
        assert data["synthetic"] == ["15min"]
        assert data["is_demo"] is False


class TestInstruments:
    """交易品种测试"""

    @pytest.mark.parametrize(
        "symbol,expected",
        [
            ("EURUSD", "EUR/USD"),
            ("eurusd", "EUR/USD"),
            ("XAUUSD", "XAU/USD"),
            ("BTCUSD", "BTC/USD"),
            ("SPX", "SPX"),
            ("AAPL", "AAPL"),
            ("EUR/USD", "EUR/USD"),
        ],
    )
    def test_to_provider_symbol(self, symbol, expected):
        """测试 Symbol 映射"""
        assert to_provider_symbol(symbol) == expected

    def test_normalize(self):
        assert normalize_symbol("  gbpusd ") == "GBPUSD"

    def test_catalog(self):
        """测试交易品种目录"""
        assert len(TRADING_PAIRS) == 13
        gold = find_pair("xauusd")
        assert gold is not None
        assert gold.category == AssetCategory.METALS
        assert gold.provider_symbol == "XAU/USD"
        assert find_pair("UNKNOWN") is None


class TestTimeframe:
    """时间框架测试"""

    def test_order(self):
        assert [tf.value for tf in MULTI_TIMEFRAMES] == ["5min", "15min", "1h", "4h"]

    @pytest.mark.parametrize(
        "value,expected",
        [("5min", Timeframe.M5), ("15m", Timeframe.M15), (" 1H ", Timeframe.H1), ("4h", Timeframe.H4)],
    )
    def test_from_string(self, value, expected):
        assert Timeframe.from_string(value) == expected

    def test_from_string_unknown(self):
        with pytest.raises(ValueError):
            Timeframe.from_string("1d")

    def test_seconds(self):
        assert Timeframe.H4.seconds == 14400
        assert Timeframe.M15.minutes == 15
        assert Timeframe.M5.to_twelvedata() == "5min"
