import logging
from typing import Any, Callable, Dict, Optional

import requests
from defusedxml import DefusedXmlException
from defusedxml import ElementTree as ET
from requests import RequestException

from .config import DEFAULT_DART_BASE_URL
from .errors import UpstreamError


logger = logging.getLogger(__name__)

SUCCESS_STATUS = "000"
PLACEHOLDER_API_KEY = "your_api_key_here"


class DartClient:
    """Thin wrapper over the OpenDART REST endpoints used by the dashboard."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_DART_BASE_URL,
        timeout: int = 30,
        get_fn: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = (base_url or DEFAULT_DART_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._get = get_fn or requests.get
        if not api_key or api_key == PLACEHOLDER_API_KEY:
            logger.warning("OPEN_DART_API_KEY is not configured; OpenDART calls will be rejected")

    def get_single_account(self, corp_code: str, bsns_year: str, reprt_code: str) -> Dict[str, Any]:
        return self._get_json(
            "fnlttSinglAcnt.json",
            {"corp_code": corp_code, "bsns_year": str(bsns_year), "reprt_code": reprt_code},
        )

    def get_company_info(self, corp_code: str) -> Dict[str, Any]:
        return self._get_json("company.json", {"corp_code": corp_code})

    def download_corp_codes(self) -> bytes:
        resp = self._request("corpCode.xml", {})
        content_type = resp.headers.get("content-type", "")
        if "xml" in content_type:
            _raise_for_xml_status(resp.content)
        return resp.content

    def _get_json(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        resp = self._request(endpoint, params)
        try:
            data = resp.json()
        except ValueError:
            raise UpstreamError("invalid", "응답을 해석할 수 없습니다")
        status = str(data.get("status", ""))
        if status != SUCCESS_STATUS:
            message = data.get("message") or "알 수 없는 오류"
            logger.error("OpenDART %s returned [%s] %s", endpoint, status, message)
            raise UpstreamError(status, message)
        return data

    def _request(self, endpoint: str, params: Dict[str, Any]):
        url = f"{self.base_url}/{endpoint}"
        query = {"crtfc_key": self.api_key, **params}
        try:
            resp = self._get(url, params=query, timeout=self.timeout)
            resp.raise_for_status()
        except RequestException as exc:
            logger.error("OpenDART %s request failed: %s", endpoint, exc)
            raise UpstreamError("network", str(exc) or exc.__class__.__name__)
        return resp


def _raise_for_xml_status(content: bytes) -> None:
    """OpenDART answers a rejected corpCode.xml request with ``<result><status>..``."""
    try:
        root = ET.fromstring(content, forbid_dtd=True)
    except (ET.ParseError, DefusedXmlException):
        raise UpstreamError("invalid", "응답을 해석할 수 없습니다")
    status = (root.findtext("status") or "").strip()
    if status and status != SUCCESS_STATUS:
        message = (root.findtext("message") or "").strip() or "알 수 없는 오류"
        logger.error("corpCode download rejected: [%s] %s", status, message)
        raise UpstreamError(status, message)
