import copy
import logging
import math
import re
from typing import Any, Dict, List, Optional, Sequence, Union

from .dart_client import DartClient
from .ratio_calculator import FinancialRatioCalculator
from .reports import (
    ANNUAL_REPORT_CODE,
    STATEMENT_DIVISIONS,
    report_code_for_quarter,
    report_name_by_code,
)


logger = logging.getLogger(__name__)

AMOUNT_FIELDS = {
    "currentAmount": "thstrm_amount",
    "currentAddAmount": "thstrm_add_amount",
    "previousAmount": "frmtrm_amount",
    "previousAddAmount": "frmtrm_add_amount",
    "previousPreviousAmount": "bfefrmtrm_amount",
}

COMPANY_INFO_FIELDS = {
    "corporationCode": "corp_code",
    "stockCode": "stock_code",
    "businessYear": "bsns_year",
    "reportCode": "reprt_code",
    "currentTermName": "thstrm_nm",
    "currentTermDate": "thstrm_dt",
    "previousTermName": "frmtrm_nm",
    "previousTermDate": "frmtrm_dt",
    "previousPreviousTermName": "bfefrmtrm_nm",
    "previousPreviousTermDate": "bfefrmtrm_dt",
}

# (derived account, total account, current account)
DERIVED_ACCOUNTS = [
    ("비유동자산", "자산총계", "유동자산"),
    ("비유동부채", "부채총계", "유동부채"),
]


AMOUNT_PATTERN = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")


def parse_amount(value: Any) -> Optional[float]:
    """Parse an OpenDART amount such as ``"1,234,567"``; missing data is ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    clean = str(value).replace(",", "").strip()
    if not AMOUNT_PATTERN.match(clean):
        return None
    return float(clean)


def _parse_order(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _sort_accounts(accounts: List[Dict[str, Any]]) -> None:
    # list.sort is stable, ties keep encounter order
    accounts.sort(key=lambda account: account.get("order") or 0)


def empty_report() -> Dict[str, Any]:
    return {"companyInfo": {}, "statements": {}}


def normalize_financial_data(data: Union[Dict[str, Any], Sequence[Dict[str, Any]], None]) -> Dict[str, Any]:
    if isinstance(data, dict):
        items = data.get("list")
    else:
        items = data
    if not items or not isinstance(items, (list, tuple)):
        return empty_report()

    cfs_items = [item for item in items if item.get("fs_div") == "CFS"]
    ofs_items = [item for item in items if item.get("fs_div") == "OFS"]
    division = "CFS" if cfs_items else "OFS"
    selected = cfs_items if cfs_items else ofs_items
    statement_type, statement_name = STATEMENT_DIVISIONS[division]

    first_item = selected[0] if selected else items[0]
    company_info: Dict[str, Any] = {key: first_item.get(field) for key, field in COMPANY_INFO_FIELDS.items()}
    company_info["reportName"] = report_name_by_code(first_item.get("reprt_code"))
    company_info["statementType"] = statement_type
    company_info["statementName"] = statement_name
    if not selected:
        logger.warning("no CFS/OFS line items in response for %s", first_item.get("corp_code"))

    statements: Dict[str, Dict[str, Any]] = {}
    for item in selected:
        statement_key = item.get("sj_div")
        statement = statements.setdefault(statement_key, {"title": item.get("sj_nm"), "accounts": []})
        account: Dict[str, Any] = {
            "name": item.get("account_nm"),
            "order": _parse_order(item.get("ord")),
        }
        for key, field in AMOUNT_FIELDS.items():
            account[key] = parse_amount(item.get(field))
        account["currency"] = item.get("currency")
        statement["accounts"].append(account)

    for statement in statements.values():
        _sort_accounts(statement["accounts"])

    return {"companyInfo": company_info, "statements": statements}


def find_account(accounts: Sequence[Dict[str, Any]], name: str) -> Optional[Dict[str, Any]]:
    for account in accounts:
        if account.get("name") == name:
            return account
    return None


def synthesize_derived_accounts(report: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in non-current assets/liabilities as ``total - current`` when omitted."""
    result = copy.deepcopy(report)
    balance_sheet = (result.get("statements") or {}).get("BS")
    if not balance_sheet:
        return result
    accounts = balance_sheet.setdefault("accounts", [])

    added = False
    for derived_name, total_name, current_name in DERIVED_ACCOUNTS:
        if find_account(accounts, derived_name) is not None:
            continue
        total = find_account(accounts, total_name)
        if total is None or total.get("currentAmount") is None:
            continue
        current = find_account(accounts, current_name)
        anchor = current if current is not None else total

        derived: Dict[str, Any] = {"name": derived_name, "order": anchor.get("order")}
        for key in AMOUNT_FIELDS:
            total_value = total.get(key)
            current_value = (current or {}).get(key) or 0
            derived[key] = None if total_value is None else total_value - current_value
        derived["currency"] = total.get("currency")
        derived["derived"] = True
        accounts.append(derived)
        added = True

    if added:
        _sort_accounts(accounts)
    return result


def empty_ratios() -> Dict[str, Dict[str, Optional[float]]]:
    return {
        "profitability": {"roe": None, "roa": None, "operatingMargin": None, "netMargin": None},
        "stability": {"debtRatio": None, "debtToEquity": None},
    }


def build_report(data: Union[Dict[str, Any], Sequence[Dict[str, Any]], None]) -> Dict[str, Any]:
    """Normalize, fill derived accounts and attach ratios."""
    report = synthesize_derived_accounts(normalize_financial_data(data))
    statements = report.get("statements", {})
    if "BS" in statements and "IS" in statements:
        report["ratios"] = FinancialRatioCalculator(report).calculate_all_ratios()
    else:
        report["ratios"] = empty_ratios()
    return report


class FinancialService:
    def __init__(self, client: DartClient) -> None:
        self.client = client

    def get_annual_report(self, corp_code: str, year: int) -> Dict[str, Any]:
        return self._fetch_report(corp_code, year, ANNUAL_REPORT_CODE)

    def get_quarterly_report(self, corp_code: str, year: int, quarter: int) -> Dict[str, Any]:
        report_code = report_code_for_quarter(quarter)
        return self._fetch_report(corp_code, year, report_code)

    def _fetch_report(self, corp_code: str, year: int, report_code: str) -> Dict[str, Any]:
        data = self.client.get_single_account(corp_code, str(year), report_code)
        report = build_report(data)
        logger.info(
            "report %s/%s/%s: %d statements (%s)",
            corp_code,
            year,
            report_code,
            len(report["statements"]),
            report["companyInfo"].get("statementType", "empty"),
        )
        return report
