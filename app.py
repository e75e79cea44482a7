from datetime import date

import streamlit as st

from dartlens.config import load_config
from dartlens.errors import ServiceError
from dartlens.explainer import explain_financial_statements
from dartlens.services import build_services


BS_MAIN = ["자산총계", "유동자산", "비유동자산", "부채총계", "유동부채", "비유동부채", "자본총계"]
IS_MAIN = ["매출액", "영업이익", "법인세비용차감전순이익", "당기순이익"]
REPORT_CHOICES = {"사업보고서": None, "1분기보고서": 1, "반기보고서": 2, "3분기보고서": 3}


@st.cache_resource
def get_services():
    return build_services(load_config())


def account_rows(statement, names):
    rows = []
    for account in (statement or {}).get("accounts", []):
        if account["name"] in names:
            rows.append(
                {
                    "계정": account["name"] + (" (계산)" if account.get("derived") else ""),
                    "당기": account.get("currentAmount"),
                    "전기": account.get("previousAmount"),
                }
            )
    return rows


st.set_page_config(page_title="dartlens", layout="wide")

st.title("재무제표 대시보드")

services = get_services()

with st.sidebar:
    st.header("회사 검색")
    query = st.text_input("회사명", value="")
    companies = []
    if len(query.strip()) >= 2:
        companies = services.company_store.search_by_name(query.strip())
    elif query:
        st.warning("검색어는 최소 2글자 이상 입력해주세요.")

    company = None
    if companies:
        company = st.selectbox(
            "검색 결과",
            companies,
            format_func=lambda c: f"{c['corp_name']} ({c['stock_code'] or '비상장'})",
        )
    st.divider()
    year = st.selectbox("사업연도", list(range(date.today().year, services.min_year - 1, -1)))
    report_label = st.selectbox("보고서", list(REPORT_CHOICES))

run_btn = st.button("재무제표 조회", disabled=company is None)

if run_btn and company:
    quarter = REPORT_CHOICES[report_label]
    try:
        with st.spinner("재무제표를 불러오는 중..."):
            if quarter is None:
                report = services.financial_service.get_annual_report(company["corp_code"], year)
            else:
                report = services.financial_service.get_quarterly_report(company["corp_code"], year, quarter)
    except ServiceError as exc:
        st.error(exc.message)
    else:
        st.session_state["report"] = report
        st.session_state["company"] = company
        st.session_state.pop("explanation", None)

report = st.session_state.get("report")
if report:
    info = report["companyInfo"]
    statements = report["statements"]
    if not statements:
        st.info("해당 기간의 재무제표 데이터가 없습니다.")
    else:
        st.subheader(f"{st.session_state['company']['corp_name']} · {info['reportName']} ({info['statementName']})")
        st.caption(f"{info.get('currentTermName') or ''} {info.get('currentTermDate') or ''}")

        left, right = st.columns(2)
        with left:
            st.markdown("**재무상태표**")
            st.dataframe(account_rows(statements.get("BS"), BS_MAIN), use_container_width=True)
        with right:
            st.markdown("**손익계산서**")
            st.dataframe(account_rows(statements.get("IS"), IS_MAIN), use_container_width=True)

        profitability = report["ratios"]["profitability"]
        stability = report["ratios"]["stability"]
        st.subheader("재무비율 (%)")
        cols = st.columns(6)
        labels = [
            ("ROE", profitability["roe"]),
            ("ROA", profitability["roa"]),
            ("영업이익률", profitability["operatingMargin"]),
            ("순이익률", profitability["netMargin"]),
            ("부채비율(총자산)", stability["debtRatio"]),
            ("부채비율(자본)", stability["debtToEquity"]),
        ]
        for col, (label, value) in zip(cols, labels):
            col.metric(label, "-" if value is None else f"{value:.2f}")

        if not services.llm.enabled:
            st.caption("LLM_API_KEY 가 설정되지 않아 AI 설명을 사용할 수 없습니다.")
        if st.button("AI 재무제표 설명 생성", disabled=not services.llm.enabled):
            with st.spinner("설명 생성 중..."):
                st.session_state["explanation"] = explain_financial_statements(
                    report,
                    services.llm,
                    log_dir=services.log_dir or None,
                    company_name=st.session_state["company"]["corp_name"],
                )
        if st.session_state.get("explanation"):
            st.markdown("**AI 재무제표 분석**")
            st.write(st.session_state["explanation"])
