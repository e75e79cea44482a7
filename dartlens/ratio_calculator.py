from typing import Any, Dict, Optional, Sequence


TOTAL_ASSETS = ("자산총계", "총자산")
TOTAL_LIABILITIES = ("부채총계",)
TOTAL_EQUITY = ("자본총계",)
REVENUE = ("매출액",)
OPERATING_INCOME = ("영업이익",)
NET_INCOME = ("당기순이익",)


class FinancialRatioCalculator:
    """Profitability and stability ratios (in percent) from a normalized report.

    Accounts are matched by exact label; anything missing yields ``None``.
    """

    def __init__(self, report: Dict[str, Any]) -> None:
        statements = report.get("statements", {}) or {}
        self.balance_sheet = (statements.get("BS") or {}).get("accounts")
        self.income_statement = (statements.get("IS") or {}).get("accounts")

    @staticmethod
    def _current_amount(accounts: Optional[Sequence[Dict[str, Any]]], names: Sequence[str]) -> Optional[float]:
        if not accounts:
            return None
        for name in names:
            for account in accounts:
                if account.get("name") == name:
                    return account.get("currentAmount")
        return None

    @staticmethod
    def _percent(numerator: Optional[float], denominator: Optional[float]) -> Optional[float]:
        if numerator is None or not denominator:
            return None
        return numerator * 100 / denominator

    def calculate_profitability_ratios(self) -> Dict[str, Optional[float]]:
        net_income = self._current_amount(self.income_statement, NET_INCOME)
        operating_income = self._current_amount(self.income_statement, OPERATING_INCOME)
        revenue = self._current_amount(self.income_statement, REVENUE)
        equity = self._current_amount(self.balance_sheet, TOTAL_EQUITY)
        assets = self._current_amount(self.balance_sheet, TOTAL_ASSETS)
        return {
            "roe": self._percent(net_income, equity),
            "roa": self._percent(net_income, assets),
            "operatingMargin": self._percent(operating_income, revenue),
            "netMargin": self._percent(net_income, revenue),
        }

    def calculate_stability_ratios(self) -> Dict[str, Optional[float]]:
        liabilities = self._current_amount(self.balance_sheet, TOTAL_LIABILITIES)
        equity = self._current_amount(self.balance_sheet, TOTAL_EQUITY)
        assets = self._current_amount(self.balance_sheet, TOTAL_ASSETS)
        return {
            "debtRatio": self._percent(liabilities, assets),
            "debtToEquity": self._percent(liabilities, equity),
        }

    def calculate_all_ratios(self) -> Dict[str, Any]:
        return {
            "profitability": self.calculate_profitability_ratios(),
            "stability": self.calculate_stability_ratios(),
        }
