import io
import json
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Union

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as ET


CORP_CODE_XML = "corpcode.xml"
CORP_FIELDS = ("corp_code", "corp_name", "corp_eng_name", "stock_code", "modify_date")


def extract_corp_codes(content: bytes) -> List[Dict[str, str]]:
    """Parse the OpenDART ``corpCode.xml`` ZIP into a list of company records.

    DTDs and entity declarations are rejected rather than expanded.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as zf:
            entry = next((name for name in zf.namelist() if name.lower() == CORP_CODE_XML), None)
            if entry is None:
                raise ValueError("ZIP 파일 내에 CORPCODE.xml 파일이 없습니다.")
            raw_xml = zf.read(entry)
    except zipfile.BadZipFile:
        raise ValueError("회사코드 ZIP 파일 형식이 올바르지 않습니다.")

    try:
        root = ET.fromstring(raw_xml, forbid_dtd=True)
    except (ET.ParseError, DefusedXmlException) as exc:
        raise ValueError(f"CORPCODE.xml 파싱 실패: {exc}")

    corps: List[Dict[str, str]] = []
    for node in root.iter("list"):
        record = {field: (node.findtext(field) or "").strip() for field in CORP_FIELDS}
        if record["corp_code"] and record["corp_name"]:
            corps.append(record)
    return corps


def save_corp_codes_json(corps: List[Dict[str, Any]], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(corps, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def load_corp_codes_json(path: Union[str, Path]) -> List[Dict[str, Any]]:
    return json.loads(Path(path).read_text(encoding="utf-8"))
