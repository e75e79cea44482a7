"""dartlens CLI: one-time data import and ad hoc report lookups.

Commands:
    download-corp-codes   Download the OpenDART corp code ZIP and convert it to JSON.
    init-db               Import corpCodes.json into the company lookup table (full replace).
    report                Fetch one normalized report and print it as JSON.
"""

import json
from pathlib import Path
from typing import Optional

import typer

from .company_store import CompanyStore
from .config import load_config
from .corp_codes import extract_corp_codes, load_corp_codes_json, save_corp_codes_json
from .dart_client import DartClient
from .errors import ServiceError
from .financials import FinancialService
from .reports import parse_quarter, parse_year
from .run_logger import configure_logging


app = typer.Typer(add_completion=False, no_args_is_help=True)

CORP_CODE_ZIP = "corpCode.zip"
CORP_CODE_JSON = "corpCodes.json"


def _dart_client() -> DartClient:
    config = load_config()
    return DartClient(
        api_key=config.dart_api_key,
        base_url=config.dart_base_url,
        timeout=config.dart_timeout_seconds,
    )


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")) -> None:
    configure_logging("DEBUG" if verbose else "WARNING")


@app.command("download-corp-codes")
def download_corp_codes(
    data_dir: Optional[Path] = typer.Option(None, help="Directory for corpCode.zip / corpCodes.json."),
) -> None:
    """Download the corp code file and convert it to JSON."""
    target = data_dir or Path(load_config().data_dir)
    target.mkdir(parents=True, exist_ok=True)
    try:
        content = _dart_client().download_corp_codes()
    except ServiceError as exc:
        typer.echo(f"다운로드 실패: {exc.message}", err=True)
        raise typer.Exit(code=1)

    zip_path = target / CORP_CODE_ZIP
    zip_path.write_bytes(content)
    try:
        corps = extract_corp_codes(content)
    except ValueError as exc:
        typer.echo(f"회사코드 추출 실패: {exc}", err=True)
        raise typer.Exit(code=1)
    json_path = save_corp_codes_json(corps, target / CORP_CODE_JSON)
    typer.echo(f"{len(corps)}개 회사 정보를 저장했습니다: {json_path}")


@app.command("init-db")
def init_db(
    json_path: Optional[Path] = typer.Option(None, help="Path to corpCodes.json."),
    database_url: Optional[str] = typer.Option(None, help="SQLAlchemy URL of the lookup table."),
) -> None:
    """Replace the company lookup table with the contents of corpCodes.json."""
    config = load_config()
    source = json_path or Path(config.data_dir) / CORP_CODE_JSON
    if not source.exists():
        typer.echo(f"오류: corpCodes.json 파일이 존재하지 않습니다: {source}", err=True)
        typer.echo("먼저 download-corp-codes 명령을 실행하여 회사코드 파일을 다운로드하세요.", err=True)
        raise typer.Exit(code=1)

    store = CompanyStore(database_url or config.database_url)
    try:
        count = store.import_companies(load_corp_codes_json(source))
    finally:
        store.close()
    typer.echo(f"데이터베이스 초기화 완료: {count}개 회사 정보 임포트됨.")


@app.command("report")
def report(
    corp_code: str,
    year: str,
    quarter: Optional[str] = typer.Option(None, help="Quarter 1-4; omit for the annual report."),
) -> None:
    """Print a normalized financial report as JSON."""
    service = FinancialService(_dart_client())
    try:
        year_num = parse_year(year, min_year=load_config().min_year)
        if quarter is None:
            data = service.get_annual_report(corp_code, year_num)
        else:
            data = service.get_quarterly_report(corp_code, year_num, parse_quarter(quarter))
    except ServiceError as exc:
        typer.echo(f"오류: {exc.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    app()
