import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Column, String, case, create_engine, delete, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


logger = logging.getLogger(__name__)

Base = declarative_base()

SEARCH_LIMIT = 30
IMPORT_PROGRESS_EVERY = 10000


class Company(Base):
    __tablename__ = "companies"

    corp_code = Column(String, primary_key=True)
    corp_name = Column(String, nullable=False, index=True)
    corp_eng_name = Column(String)
    stock_code = Column(String, index=True)
    modify_date = Column(String)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "corp_code": self.corp_code,
            "corp_name": self.corp_name,
            "corp_eng_name": self.corp_eng_name,
            "stock_code": self.stock_code,
            "modify_date": self.modify_date,
        }


def _create_engine(database_url: str):
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url)
    if url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


class CompanyStore:
    """Company code lookup table (OpenDART corp codes)."""

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self.engine = _create_engine(database_url)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    def import_companies(self, records: Iterable[Dict[str, Any]]) -> int:
        """Replace the whole table with ``records`` in one transaction."""
        self.create_tables()
        count = 0
        with self._session_factory.begin() as session:
            session.execute(delete(Company))
            for record in records:
                session.add(
                    Company(
                        corp_code=record["corp_code"],
                        corp_name=record["corp_name"],
                        corp_eng_name=record.get("corp_eng_name") or "",
                        stock_code=(record.get("stock_code") or "").strip(),
                        modify_date=record.get("modify_date") or "",
                    )
                )
                count += 1
                if count % IMPORT_PROGRESS_EVERY == 0:
                    session.flush()
                    logger.info("%d companies imported...", count)
        logger.info("imported %d companies", count)
        return count

    def search_by_name(self, name: str, limit: int = SEARCH_LIMIT) -> List[Dict[str, Any]]:
        rank = case(
            (Company.corp_name == name, 0),
            (Company.corp_name.like(f"{name}%"), 1),
            else_=2,
        )
        stmt = (
            select(Company)
            .where(Company.corp_name.like(f"%{name}%"))
            .order_by(rank, func.length(Company.corp_name), Company.corp_name)
            .limit(limit)
        )
        with self._session_factory() as session:
            return [company.to_dict() for company in session.scalars(stmt)]

    def get_by_stock_code(self, stock_code: str) -> Optional[Dict[str, Any]]:
        if not stock_code:
            return None
        return self._first(select(Company).where(Company.stock_code == stock_code).limit(1))

    def get_by_corp_code(self, corp_code: str) -> Optional[Dict[str, Any]]:
        return self._first(select(Company).where(Company.corp_code == corp_code).limit(1))

    def count(self) -> int:
        with self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(Company)) or 0

    def _first(self, stmt) -> Optional[Dict[str, Any]]:
        with self._session_factory() as session:
            company = session.scalars(stmt).first()
            return company.to_dict() if company else None
