from dartlens.ratio_calculator import FinancialRatioCalculator


def _report(bs=None, is_=None):
    statements = {}
    if bs is not None:
        statements["BS"] = {"title": "재무상태표", "accounts": [{"name": k, "currentAmount": v} for k, v in bs.items()]}
    if is_ is not None:
        statements["IS"] = {"title": "손익계산서", "accounts": [{"name": k, "currentAmount": v} for k, v in is_.items()]}
    return {"companyInfo": {}, "statements": statements}


def test_ratios_are_percentages():
    report = _report(
        bs={"자산총계": 2000.0, "부채총계": 800.0, "자본총계": 1000.0},
        is_={"매출액": 500.0, "영업이익": 50.0, "당기순이익": 100.0},
    )
    ratios = FinancialRatioCalculator(report).calculate_all_ratios()

    assert ratios["profitability"] == {
        "roe": 10.0,
        "roa": 5.0,
        "operatingMargin": 10.0,
        "netMargin": 20.0,
    }
    assert ratios["stability"] == {"debtRatio": 40.0, "debtToEquity": 80.0}


def test_missing_equity_gives_null_not_zero():
    report = _report(bs={"자산총계": 2000.0, "자본총계": None}, is_={"당기순이익": 100.0})
    ratios = FinancialRatioCalculator(report).calculate_profitability_ratios()
    assert ratios["roe"] is None
    assert ratios["roa"] == 5.0


def test_zero_denominator_gives_null():
    report = _report(bs={"자산총계": 0.0, "자본총계": 0.0, "부채총계": 10.0}, is_={"매출액": 0.0, "당기순이익": 1.0})
    ratios = FinancialRatioCalculator(report).calculate_all_ratios()
    assert all(value is None for value in ratios["profitability"].values())
    assert all(value is None for value in ratios["stability"].values())


def test_missing_statements_and_accounts_give_null():
    ratios = FinancialRatioCalculator({"companyInfo": {}, "statements": {}}).calculate_all_ratios()
    assert set(ratios["profitability"]) == {"roe", "roa", "operatingMargin", "netMargin"}
    assert all(value is None for value in ratios["profitability"].values())
    assert all(value is None for value in ratios["stability"].values())


def test_total_assets_label_alias():
    report = _report(bs={"총자산": 1000.0}, is_={"당기순이익": 50.0})
    assert FinancialRatioCalculator(report).calculate_profitability_ratios()["roa"] == 5.0


def test_labels_match_exactly():
    report = _report(bs={"자본총계 합계": 1000.0}, is_={"당기순이익(손실)": 50.0})
    assert FinancialRatioCalculator(report).calculate_profitability_ratios()["roe"] is None
