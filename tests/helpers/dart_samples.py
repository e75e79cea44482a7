from typing import Any, Dict, List, Optional
import requests


def line_item(
    account_nm: str,
    amount: Optional[str],
    sj_div: str = "BS",
    fs_div: str = "CFS",
    ord: str = "1",
    previous: Optional[str] = None,
    **overrides: Any,
) -> Dict[str, Any]:
    item = {
        "rcept_no": "20240312000736",
        "bsns_year": "2023",
        "corp_code": "00126380",
        "stock_code": "005930",
        "reprt_code": "11011",
        "account_nm": account_nm,
        "fs_div": fs_div,
        "fs_nm": "연결재무제표" if fs_div == "CFS" else "재무제표",
        "sj_div": sj_div,
        "sj_nm": "재무상태표" if sj_div == "BS" else "손익계산서",
        "thstrm_nm": "제 55 기",
        "thstrm_dt": "2023.12.31 현재",
        "thstrm_amount": amount,
        "frmtrm_nm": "제 54 기",
        "frmtrm_dt": "2022.12.31 현재",
        "frmtrm_amount": previous,
        "bfefrmtrm_nm": "제 53 기",
        "bfefrmtrm_dt": "2021.12.31 현재",
        "bfefrmtrm_amount": None,
        "ord": ord,
        "currency": "KRW",
    }
    item.update(overrides)
    return item


def payload(items: List[Dict[str, Any]], status: str = "000", message: str = "정상") -> Dict[str, Any]:
    return {"status": status, "message": message, "list": items}


class FakeResponse:
    def __init__(self, data: Any = None, content: bytes = b"", headers: Optional[Dict[str, str]] = None, status_code: int = 200) -> None:
        self._data = data
        self.content = content
        self.headers = headers or {"content-type": "application/json"}
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        if self._data is None:
            raise ValueError("no json body")
        return self._data


class RecordingGet:
    def __init__(self, *responses: FakeResponse) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, url: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[int] = None) -> FakeResponse:
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        return self._responses.pop(0)
