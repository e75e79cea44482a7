import requests
import pytest

from dartlens.dart_client import DartClient
from dartlens.errors import ErrorKind, UpstreamError
from tests.helpers.dart_samples import FakeResponse, RecordingGet, line_item, payload


def test_get_single_account_sends_key_and_params():
    data = payload([line_item("자산총계", "1,000")])
    fake_get = RecordingGet(FakeResponse(data))
    client = DartClient(api_key="key", base_url="https://dart.example/api/", timeout=5, get_fn=fake_get)

    result = client.get_single_account("00126380", 2023, "11011")

    assert result == data
    call = fake_get.calls[0]
    assert call["url"] == "https://dart.example/api/fnlttSinglAcnt.json"
    assert call["params"] == {
        "crtfc_key": "key",
        "corp_code": "00126380",
        "bsns_year": "2023",
        "reprt_code": "11011",
    }
    assert call["timeout"] == 5


def test_non_success_status_raises_upstream_error():
    fake_get = RecordingGet(FakeResponse({"status": "013", "message": "조회된 데이타가 없습니다."}))
    client = DartClient(api_key="key", get_fn=fake_get)

    with pytest.raises(UpstreamError) as excinfo:
        client.get_single_account("00126380", "2023", "11011")

    err = excinfo.value
    assert err.status == "013"
    assert err.kind is ErrorKind.UPSTREAM
    assert err.kind.status_code == 500
    assert "013" in err.message


def test_network_failure_raises_upstream_error():
    def failing_get(*_args, **_kwargs):
        raise requests.exceptions.ConnectionError("connection refused")

    client = DartClient(api_key="key", get_fn=failing_get)
    with pytest.raises(UpstreamError) as excinfo:
        client.get_company_info("00126380")
    assert excinfo.value.status == "network"


def test_http_error_status_raises_upstream_error():
    client = DartClient(api_key="key", get_fn=RecordingGet(FakeResponse({}, status_code=503)))
    with pytest.raises(UpstreamError):
        client.get_company_info("00126380")


def test_download_corp_codes_returns_zip_bytes():
    fake_get = RecordingGet(FakeResponse(content=b"PK\x03\x04zip", headers={"content-type": "application/x-msdownload"}))
    client = DartClient(api_key="key", get_fn=fake_get)
    assert client.download_corp_codes() == b"PK\x03\x04zip"
    assert fake_get.calls[0]["url"].endswith("/corpCode.xml")


def test_download_corp_codes_detects_xml_error():
    body = "<result><status>010</status><message>등록되지 않은 키입니다.</message></result>".encode("utf-8")
    client = DartClient(
        api_key="bad",
        get_fn=RecordingGet(FakeResponse(content=body, headers={"content-type": "text/xml;charset=UTF-8"})),
    )
    with pytest.raises(UpstreamError) as excinfo:
        client.download_corp_codes()
    assert excinfo.value.status == "010"
    assert excinfo.value.upstream_message == "등록되지 않은 키입니다."


def test_get_company_info_returns_payload():
    data = {"status": "000", "message": "정상", "corp_code": "00126380", "corp_name": "삼성전자"}
    fake_get = RecordingGet(FakeResponse(data))
    client = DartClient(api_key="key", get_fn=fake_get)

    assert client.get_company_info("00126380")["corp_name"] == "삼성전자"
    assert fake_get.calls[0]["url"].endswith("/company.json")
    assert fake_get.calls[0]["params"]["corp_code"] == "00126380"


def test_download_corp_codes_rejects_xml_error_with_dtd():
    body = (
        '<?xml version="1.0"?>'
        '<!DOCTYPE result [<!ENTITY a "AAAAAAAAAA"><!ENTITY b "&a;&a;&a;&a;&a;&a;&a;&a;&a;&a;">]>'
        "<result><status>010</status><message>&b;</message></result>"
    ).encode("utf-8")
    client = DartClient(
        api_key="bad",
        get_fn=RecordingGet(FakeResponse(content=body, headers={"content-type": "text/xml"})),
    )
    with pytest.raises(UpstreamError) as excinfo:
        client.download_corp_codes()
    assert excinfo.value.status == "invalid"
    assert "AAAA" not in excinfo.value.message


def test_download_corp_codes_passes_successful_xml_through():
    body = b"<result><status>000</status><message>ok</message></result>"
    client = DartClient(
        api_key="key",
        get_fn=RecordingGet(FakeResponse(content=body, headers={"content-type": "text/xml"})),
    )
    assert client.download_corp_codes() == body
