"""
Symbol 规范化模块

内部格式: 无分隔符的大写代码 (例如 EURUSD, XAUUSD, SPX)
Twelve Data 格式: BASE/QUOTE (例如 EUR/USD)，指数直接使用代码

职责:
- 交易品种目录
- 内部 Symbol -> 行情源 Symbol 映射
- Symbol 标准化
"""

from dataclasses import dataclass
from enum import Enum


class AssetCategory(str, Enum):
    """资产类别"""

    METALS = "Metals"
    FOREX = "Forex"
    INDICES = "Indices"
    CRYPTO = "Crypto"


@dataclass(frozen=True)
class TradingPair:
    """
    交易品种

    symbol 为内部格式，name 用于展示
    """

    symbol: str
    name: str
    category: AssetCategory

    @property
    def provider_symbol(self) -> str:
        """行情源格式"""
        return to_provider_symbol(self.symbol)


# 支持的交易品种
TRADING_PAIRS: tuple[TradingPair, ...] = (
    TradingPair("XAUUSD", "Gold (XAU/USD)", AssetCategory.METALS),
    TradingPair("EURUSD", "EUR/USD", AssetCategory.FOREX),
    TradingPair("GBPUSD", "GBP/USD", AssetCategory.FOREX),
    TradingPair("USDJPY", "USD/JPY", AssetCategory.FOREX),
    TradingPair("USDCHF", "USD/CHF", AssetCategory.FOREX),
    TradingPair("AUDUSD", "AUD/USD", AssetCategory.FOREX),
    TradingPair("USDCAD", "USD/CAD", AssetCategory.FOREX),
    TradingPair("NZDUSD", "NZD/USD", AssetCategory.FOREX),
    TradingPair("SPX", "S&P 500", AssetCategory.INDICES),
    TradingPair("NDX", "NASDAQ 100", AssetCategory.INDICES),
    TradingPair("DJI", "Dow Jones", AssetCategory.INDICES),
    TradingPair("BTCUSD", "Bitcoin", AssetCategory.CRYPTO),
    TradingPair("ETHUSD", "Ethereum", AssetCategory.CRYPTO),
)

# 内部 Symbol -> Twelve Data Symbol
PROVIDER_SYMBOLS: dict[str, str] = {
    "XAUUSD": "XAU/USD",
    "EURUSD": "EUR/USD",
    "GBPUSD": "GBP/USD",
    "USDJPY": "USD/JPY",
    "USDCHF": "USD/CHF",
    "AUDUSD": "AUD/USD",
    "USDCAD": "USD/CAD",
    "NZDUSD": "NZD/USD",
    "SPX": "SPX",
    "NDX": "NDX",
    "DJI": "DJI",
    "BTCUSD": "BTC/USD",
    "ETHUSD": "ETH/USD",
}


def normalize_symbol(symbol: str) -> str:
    """
    标准化内部 Symbol

    Args:
        symbol: 如 " eurusd "

    Returns:
        str: 如 "EURUSD"
    """
    return symbol.strip().upper()


def to_provider_symbol(symbol: str) -> str:
    """
    转换为行情源格式

    无法映射的 Symbol 原样返回 (已是 BASE/QUOTE 或行情源原生代码)

    Args:
        symbol: 内部格式，如 "EURUSD"

    Returns:
        str: 如 "EUR/USD"
    """
    return PROVIDER_SYMBOLS.get(normalize_symbol(symbol), symbol.strip())


def find_pair(symbol: str) -> TradingPair | None:
    """按内部 Symbol 查找交易品种"""
    key = normalize_symbol(symbol)
    for pair in TRADING_PAIRS:
        if pair.symbol == key:
            return pair
    return None


# 导出
__all__ = [
    "AssetCategory",
    "TradingPair",
    "TRADING_PAIRS",
    "PROVIDER_SYMBOLS",
    "normalize_symbol",
    "to_provider_symbol",
    "find_pair",
]
