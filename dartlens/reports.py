import re
from datetime import date
from typing import Any, Dict, Optional, Tuple

from .config import MIN_REPORT_YEAR
from .errors import ValidationError


ANNUAL_REPORT_CODE = "11011"

REPORT_NAMES = {
    "11011": "사업보고서",
    "11012": "반기보고서",
    "11013": "1분기보고서",
    "11014": "3분기보고서",
}
UNKNOWN_REPORT_NAME = "알 수 없는 보고서"

QUARTER_REPORT_CODES = {
    1: "11013",
    2: "11012",
    3: "11014",
    4: "11011",
}

STATEMENT_DIVISIONS: Dict[str, Tuple[str, str]] = {
    "CFS": ("consolidated", "연결재무제표"),
    "OFS": ("separate", "개별재무제표"),
}

# ASCII digits only (no underscores, no full-width digits).
INTEGER_PATTERN = re.compile(r"^-?[0-9]+$")


def report_name_by_code(report_code: Any) -> str:
    return REPORT_NAMES.get(str(report_code or ""), UNKNOWN_REPORT_NAME)


def report_code_for_quarter(quarter: Any) -> str:
    code = None
    if isinstance(quarter, int) and not isinstance(quarter, bool):
        code = QUARTER_REPORT_CODES.get(quarter)
    if code is None:
        raise ValidationError(f"유효하지 않은 분기입니다: {quarter}. 1, 2, 3, 4 중 하나여야 합니다.")
    return code


def quarter_for_report_code(report_code: str) -> Optional[int]:
    """Quarter segment for explanation URLs; the annual report needs none."""
    if report_code == ANNUAL_REPORT_CODE:
        return None
    for quarter, code in QUARTER_REPORT_CODES.items():
        if code == report_code:
            return quarter
    return None


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not INTEGER_PATTERN.match(text):
        return None
    return int(text)


def parse_year(value: Any, today: Optional[date] = None, min_year: int = MIN_REPORT_YEAR) -> int:
    year = _to_int(value)
    max_year = (today or date.today()).year
    if year is None or year < min_year or year > max_year:
        raise ValidationError(f"유효한 연도({min_year}년 이후)를 입력해주세요.")
    return year


def parse_quarter(value: Any) -> int:
    quarter = _to_int(value)
    if quarter not in QUARTER_REPORT_CODES:
        raise ValidationError("유효한 분기(1-4)를 입력해주세요.")
    return quarter
