"""Stock portfolio valuation.

Current prices are supplied by the caller as a ``{symbol: price}`` mapping;
holdings without a quote are valued at their buy price.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping

import pandas as pd


@dataclass
class Holding:
    symbol: str
    quantity: float
    buy_price: float
    name: str = ''

    @property
    def buy_value(self) -> float:
        return self.quantity * self.buy_price


def stock_value(holding: Holding, current_price: float) -> float:
    return holding.quantity * current_price


def profit(holding: Holding, current_price: float) -> float:
    return stock_value(holding, current_price) - holding.buy_value


def profit_rate(holding: Holding, current_price: float) -> float:
    """Return on the purchase value in percent; 0 for a zero-cost holding."""
    if holding.buy_value == 0:
        return 0.0
    return profit(holding, current_price) / holding.buy_value * 100


def _price_for(holding: Holding, current_prices: Mapping[str, float]) -> float:
    price = current_prices.get(holding.symbol)
    return holding.buy_price if not price else price


def portfolio_stats(holdings: Iterable[Holding], current_prices: Mapping[str, float]) -> Dict[str, float]:
    total_buy_value = 0.0
    total_current_value = 0.0
    for holding in holdings:
        total_buy_value += holding.buy_value
        total_current_value += stock_value(holding, _price_for(holding, current_prices))

    total_profit = total_current_value - total_buy_value
    total_profit_rate = (total_profit / total_buy_value * 100) if total_buy_value > 0 else 0.0
    return {
        'total_buy_value': total_buy_value,
        'total_current_value': total_current_value,
        'total_profit': total_profit,
        'total_profit_rate': total_profit_rate,
    }


def portfolio_frame(holdings: Iterable[Holding], current_prices: Mapping[str, float]) -> pd.DataFrame:
    """One row per holding with valuation columns, largest position first."""
    rows = []
    for holding in holdings:
        price = _price_for(holding, current_prices)
        rows.append({
            'Symbol': holding.symbol,
            'Name': holding.name or holding.symbol,
            'Quantity': holding.quantity,
            'Buy Price': holding.buy_price,
            'Current Price': price,
            'Buy Value': holding.buy_value,
            'Current Value': stock_value(holding, price),
            'Profit': profit(holding, price),
            'Profit Rate': profit_rate(holding, price),
        })
    columns = [
        'Symbol', 'Name', 'Quantity', 'Buy Price', 'Current Price',
        'Buy Value', 'Current Value', 'Profit', 'Profit Rate',
    ]
    frame = pd.DataFrame(rows, columns=columns)
    if frame.empty:
        return frame
    total_value = frame['Current Value'].sum()
    frame['Weight'] = (frame['Current Value'] / total_value * 100) if total_value else 0.0
    return frame.sort_values('Current Value', ascending=False).reset_index(drop=True)
