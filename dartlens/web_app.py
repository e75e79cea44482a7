import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from .config import AppConfig, load_config
from .errors import NotFoundError, ServiceError, UpstreamError, ValidationError
from .explainer import explain_financial_statements
from .reports import REPORT_NAMES, parse_quarter, parse_year, quarter_for_report_code
from .run_logger import configure_logging
from .services import Services, build_services


logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[1]
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

MIN_QUERY_LENGTH = 2
GENERIC_ERROR_MESSAGE = "요청을 처리하는 중 오류가 발생했습니다."


class CompanyRecord(BaseModel):
    corp_code: str
    corp_name: str
    corp_eng_name: Optional[str] = None
    stock_code: Optional[str] = None
    modify_date: Optional[str] = None


class ExplanationResponse(BaseModel):
    explanation: str
    financialData: Dict[str, Any]


def create_app(
    services: Optional[Services] = None,
    config: Optional[AppConfig] = None,
) -> FastAPI:
    if services is None:
        config = config or load_config()
        configure_logging(config.log_level)
        services = build_services(config)

    app = FastAPI(title="dartlens")
    app.state.services = services

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        if exc.kind.status_code >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.detail)
        return JSONResponse(
            status_code=exc.kind.status_code,
            content={"error": exc.message, "kind": exc.kind.value},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("%s %s crashed", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request):
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "min_year": services.min_year,
                "max_year": date.today().year,
                "quarter_by_report": _quarter_by_report(),
            },
        )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/api/companies/search", response_model=List[CompanyRecord])
    def search_companies(query: Optional[str] = None):
        term = (query or "").strip()
        if len(term) < MIN_QUERY_LENGTH:
            raise ValidationError("검색어는 최소 2글자 이상 입력해주세요.")
        return services.company_store.search_by_name(term)

    @app.get("/api/companies/stock/{stock_code}", response_model=CompanyRecord)
    def get_company_by_stock_code(stock_code: str):
        company = services.company_store.get_by_stock_code(stock_code)
        if not company:
            raise NotFoundError("해당 종목코드의 회사를 찾을 수 없습니다.")
        return company

    @app.get("/api/companies/{corp_code}", response_model=CompanyRecord)
    def get_company(corp_code: str):
        company = services.company_store.get_by_corp_code(corp_code)
        if not company:
            raise NotFoundError("해당 고유번호의 회사를 찾을 수 없습니다.")
        return company

    @app.get("/api/financial/{corp_code}/annual/{year}")
    def get_annual_report(corp_code: str, year: str):
        year_num = parse_year(year, min_year=services.min_year)
        return services.financial_service.get_annual_report(corp_code, year_num)

    @app.get("/api/financial/{corp_code}/quarterly/{year}/{quarter}")
    def get_quarterly_report(corp_code: str, year: str, quarter: str):
        year_num = parse_year(year, min_year=services.min_year)
        quarter_num = parse_quarter(quarter)
        return services.financial_service.get_quarterly_report(corp_code, year_num, quarter_num)

    @app.get("/api/financial/{corp_code}/explain/{year}", response_model=ExplanationResponse)
    def explain_annual_report(corp_code: str, year: str):
        return _explain(corp_code, year, None)

    @app.get("/api/financial/{corp_code}/explain/{year}/{quarter}", response_model=ExplanationResponse)
    def explain_quarterly_report(corp_code: str, year: str, quarter: str):
        return _explain(corp_code, year, quarter)

    def _explain(corp_code: str, year: str, quarter: Optional[str]) -> Dict[str, Any]:
        year_num = parse_year(year, min_year=services.min_year)
        if quarter is None:
            financial_data = services.financial_service.get_annual_report(corp_code, year_num)
        else:
            quarter_num = parse_quarter(quarter)
            financial_data = services.financial_service.get_quarterly_report(corp_code, year_num, quarter_num)

        explanation = explain_financial_statements(
            financial_data,
            services.llm,
            log_dir=services.log_dir or None,
            company_name=_company_name(corp_code),
        )
        return {"explanation": explanation, "financialData": financial_data}

    def _company_name(corp_code: str) -> Optional[str]:
        company = services.company_store.get_by_corp_code(corp_code)
        if company:
            return company["corp_name"]
        try:
            info = services.financial_service.client.get_company_info(corp_code)
        except UpstreamError as exc:
            logger.warning("company name lookup for %s failed: %s", corp_code, exc.message)
            return None
        return info.get("corp_name") or None

    return app


def _quarter_by_report() -> Dict[str, int]:
    """Report code -> quarter path segment for explanation links; annual reports have none."""
    mapping = {}
    for code in REPORT_NAMES:
        quarter = quarter_for_report_code(code)
        if quarter is not None:
            mapping[code] = quarter
    return mapping
