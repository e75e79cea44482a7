import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from requests import RequestException

from .errors import AIServiceError, MissingAPIKeyError
from .run_logger import log_step


logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "당신은 일반 투자자에게 재무제표를 쉽게 설명하는 재무 분석가입니다."

KEY_ACCOUNTS = [
    "자산총계", "부채총계", "자본총계", "유동자산", "비유동자산",
    "유동부채", "비유동부채", "자본금", "이익잉여금",
    "매출액", "영업이익", "법인세비용차감전순이익", "당기순이익",
    "매출총이익", "영업비용", "영업외수익", "영업외비용",
]

ANALYSIS_REQUEST = """다음 내용을 포함해 재무제표를 쉽게 설명해 주세요:
1. 회사의 전반적인 재무 건전성
2. 주요 재무 지표 분석 (수익성, 안정성, 성장성)
3. 투자자 입장에서 알아야 할 중요 포인트
4. 전기 대비 변화된 점
5. 향후 전망에 대한 의견

가능한 전문 용어를 피하고, 일반인도 이해하기 쉽게 설명해 주세요. 필요한 경우 비유를 사용하셔도 좋습니다."""

MISSING = "정보 없음"
INVALID_DATA_MESSAGE = "유효한 재무제표 데이터가 아닙니다."
MISSING_KEY_MESSAGE = "설정된 API 키가 없습니다. .env 파일에 LLM_API_KEY를 설정해주세요."


def is_key_account(account_name: Optional[str]) -> bool:
    if not account_name:
        return False
    return any(name in account_name for name in KEY_ACCOUNTS)


def format_amount(amount: Optional[float]) -> str:
    if amount is None:
        return MISSING

    trillion = 1_000_000_000_000
    hundred_million = 100_000_000
    ten_thousand = 10_000

    if abs(amount) >= trillion:
        return f"{amount / trillion:.2f}조원"
    if abs(amount) >= hundred_million:
        return f"{amount / hundred_million:.2f}억원"
    if abs(amount) >= ten_thousand:
        return f"{amount / ten_thousand:.2f}만원"
    if float(amount).is_integer():
        return f"{int(amount):,}원"
    return f"{amount:,}원"


def _key_account_lines(statement: Optional[Dict[str, Any]]) -> List[str]:
    accounts = (statement or {}).get("accounts") or []
    return [
        f"- {account['name']}: {format_amount(account.get('currentAmount'))}"
        for account in accounts
        if is_key_account(account.get("name"))
    ]


def build_prompt(report: Dict[str, Any], company_name: Optional[str] = None) -> str:
    company_info = report.get("companyInfo") or {}
    statements = report.get("statements") or {}

    lines = ["다음 회사의 재무제표를 분석하고 쉽게 설명해 주세요:", ""]
    lines.append(f"회사명: {company_name or company_info.get('stockCode') or MISSING}")
    lines.append(
        f"기간: {company_info.get('currentTermName') or MISSING} "
        f"({company_info.get('currentTermDate') or MISSING})"
    )
    if company_info.get("reportName"):
        lines.append(f"보고서: {company_info['reportName']} ({company_info.get('statementName') or MISSING})")
    lines.append("")

    for key, heading in (("BS", "재무상태표 주요 계정:"), ("IS", "손익계산서 주요 계정:")):
        if key in statements:
            lines.append(heading)
            lines.extend(_key_account_lines(statements[key]))
            lines.append("")

    lines.append(ANALYSIS_REQUEST)
    return "\n".join(lines)


def explain_financial_statements(
    report: Optional[Dict[str, Any]],
    llm,
    log_dir: Optional[Union[str, Path]] = None,
    company_name: Optional[str] = None,
) -> str:
    """Ask the LLM for a plain-language explanation; failures become a readable message."""
    if not report or not report.get("statements"):
        return f"재무제표 설명을 생성하는 중 오류가 발생했습니다: {INVALID_DATA_MESSAGE}"

    if not llm.enabled:
        logger.warning("AI explanation skipped: LLM API key is not configured")
        return MISSING_KEY_MESSAGE

    prompt = build_prompt(report, company_name=company_name)
    log_step(log_dir, "explain_prompt", {"prompt": prompt})
    try:
        explanation = llm.generate_text(prompt, system_prompt=SYSTEM_PROMPT)
    except MissingAPIKeyError:
        logger.warning("AI explanation skipped: LLM API key is not configured")
        return MISSING_KEY_MESSAGE
    except AIServiceError as exc:
        logger.error("AI explanation failed: %s (%s)", exc.message, exc.detail)
        return f"재무제표 설명을 생성하는 중 오류가 발생했습니다: {exc.message}"
    except (RequestException, ValueError) as exc:
        logger.error("AI explanation failed: %s", exc)
        return f"재무제표 설명을 생성하는 중 오류가 발생했습니다: {exc}"

    log_step(log_dir, "explanation", {"explanation": explanation})
    return explanation
