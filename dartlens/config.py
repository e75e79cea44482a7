import os
from dataclasses import dataclass
from dotenv import load_dotenv


MIN_REPORT_YEAR = 2015
DEFAULT_DART_BASE_URL = "https://opendart.fss.or.kr/api"
LLM_DEFAULTS = {
    "gemini": ("gemini-1.5-pro", "https://generativelanguage.googleapis.com"),
    "deepseek": ("deepseek-chat", "https://api.deepseek.com"),
}


@dataclass
class AppConfig:
    dart_api_key: str
    dart_base_url: str
    dart_timeout_seconds: int
    llm_provider: str
    llm_model_name: str
    llm_api_key: str
    llm_base_url: str
    llm_timeout_seconds: int
    database_url: str
    data_dir: str
    log_dir: str
    log_level: str
    min_year: int = MIN_REPORT_YEAR


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_config() -> AppConfig:
    load_dotenv()
    provider = os.getenv("LLM_PROVIDER", "gemini").strip().lower()
    if provider not in LLM_DEFAULTS:
        provider = "gemini"
    default_model, default_base_url = LLM_DEFAULTS[provider]

    data_dir = os.getenv("DATA_DIR", "data")
    database_url = os.getenv("COMPANY_DB_URL", "").strip()
    if not database_url:
        database_url = f"sqlite:///{os.path.join(data_dir, 'companies.db')}"

    return AppConfig(
        dart_api_key=os.getenv("OPEN_DART_API_KEY", ""),
        dart_base_url=os.getenv("OPEN_DART_BASE_URL", DEFAULT_DART_BASE_URL),
        dart_timeout_seconds=_int_env("OPEN_DART_TIMEOUT_SECONDS", 30),
        llm_provider=provider,
        llm_model_name=os.getenv("LLM_MODEL_NAME", default_model),
        llm_api_key=os.getenv("LLM_API_KEY", "") or os.getenv("GEMINI_API_KEY", ""),
        llm_base_url=os.getenv("LLM_BASE_URL", default_base_url),
        llm_timeout_seconds=_int_env("LLM_TIMEOUT_SECONDS", 90),
        database_url=database_url,
        data_dir=data_dir,
        log_dir=os.getenv("LOG_DIR", ""),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        min_year=_int_env("MIN_REPORT_YEAR", MIN_REPORT_YEAR),
    )
