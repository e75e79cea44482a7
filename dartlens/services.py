from dataclasses import dataclass
from typing import Optional

from .company_store import CompanyStore
from .config import MIN_REPORT_YEAR, AppConfig, load_config
from .dart_client import DartClient
from .financials import FinancialService
from .llm_client import LLMClient


@dataclass
class Services:
    financial_service: FinancialService
    company_store: CompanyStore
    llm: LLMClient
    log_dir: str = ""
    min_year: int = MIN_REPORT_YEAR


def build_services(config: Optional[AppConfig] = None) -> Services:
    config = config or load_config()
    client = DartClient(
        api_key=config.dart_api_key,
        base_url=config.dart_base_url,
        timeout=config.dart_timeout_seconds,
    )
    store = CompanyStore(config.database_url)
    store.create_tables()
    llm = LLMClient(
        provider=config.llm_provider,
        model=config.llm_model_name,
        api_key=config.llm_api_key,
        base_url=config.llm_base_url,
        timeout=config.llm_timeout_seconds,
    )
    return Services(
        financial_service=FinancialService(client),
        company_store=store,
        llm=llm,
        log_dir=config.log_dir,
        min_year=config.min_year,
    )
