import logging

import pytest

from budget_deriver import UNKNOWN as PACING_UNKNOWN
from campaign_metrics import build_budget_pacing, build_campaign_detail, build_campaign_list, build_daily_metrics
from errors import AggregationError, NotFound, ValidationError


def test_campaign_detail_aggregates_metric_rows(metadata_response, metrics_response):
    detail = build_campaign_detail("123", metadata_response, metrics_response)
    assert detail.metadata.campaign_id == "123"
    assert detail.metadata.bidding_strategy_type == "MAXIMIZE_CONVERSION_VALUE"
    assert detail.metadata.budget_amount_micros == 50_000_000
    assert detail.metadata.end_date == ""
    m = detail.metrics
    assert m.entity_id == "123"
    assert m.row_count == 2
    assert m.impressions == 1000
    assert m.clicks == 55
    assert m.cost_micros == 11_500_000
    assert m.ctr == pytest.approx(5.5)
    assert m.conversions == pytest.approx(3.5)
    assert m.interaction_rate == pytest.approx(1.2)
    assert (m.first_date, m.last_date) == ("2026-02-01", "2026-02-02")


def test_campaign_detail_without_metrics_is_zero_rollup(metadata_response):
    detail = build_campaign_detail("123", metadata_response, {"rows": []})
    assert detail.metrics.row_count == 0
    assert detail.metrics.entity_id == "123"
    assert detail.metrics.ctr == 0.0


def test_campaign_detail_not_found(metrics_response):
    with pytest.raises(NotFound, match="123"):
        build_campaign_detail("123", {"rows": []}, metrics_response)


def test_campaign_detail_is_strict(metadata_response):
    with pytest.raises(ValidationError) as exc:
        build_campaign_detail("123", metadata_response, {"rows": [{"segments.date": "2026-02-01"}]})
    assert "getCampaignDetail(123)" in str(exc.value)
    assert exc.value.paths == ["rows[0].campaign.id"]


def test_campaign_detail_missing_rows_key(metadata_response):
    with pytest.raises(ValidationError, match=r"getCampaignDetail\(123\)"):
        build_campaign_detail("123", metadata_response, {})


def test_campaign_detail_rejects_other_campaign_rows(metadata_response, metrics_response):
    metrics_response["rows"].append({"campaign.id": "999", "segments.date": "2026-02-03"})
    with pytest.raises(AggregationError):
        build_campaign_detail("123", metadata_response, metrics_response)


def test_campaign_detail_rejects_duplicate_days(metadata_response, metrics_response):
    metrics_response["rows"].append({"campaign.id": "123", "segments.date": "2026-02-01"})
    with pytest.raises(AggregationError, match="2026-02-01"):
        build_campaign_detail("123", metadata_response, metrics_response)


def test_daily_metrics_sorted_and_typed(daily_response):
    rows = build_daily_metrics("123", daily_response)
    assert [r.date for r in rows] == ["2026-02-01", "2026-02-02", "2026-02-03"]
    assert rows[0].ctr == 0.0
    assert rows[2].ctr == pytest.approx(0.02)
    assert rows[2].average_cpc == 10_000_000


def test_daily_metrics_safe_fallback(caplog):
    with caplog.at_level(logging.WARNING):
        rows = build_daily_metrics("123", {"error": "quota"})
    assert rows == []
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert warnings[0].context == "getDailyMetrics(123)"


def test_campaign_list_groups_by_campaign(campaign_list_response):
    campaigns = build_campaign_list(campaign_list_response)
    assert [c.campaign_id for c in campaigns] == ["1", "2"]
    first = campaigns[0]
    assert first.campaign_name == "Search | Generic"
    assert first.advertising_channel_type == "SEARCH"
    assert first.metrics.impressions == 4000
    assert first.metrics.clicks == 60
    assert first.metrics.ctr == pytest.approx(1.5)
    assert first.metrics.average_cpc == pytest.approx(500_000)
    assert campaigns[1].status == "PAUSED"
    assert campaigns[1].metrics.cost_micros == 0


def test_campaign_list_is_strict():
    with pytest.raises(ValidationError, match="getCampaigns"):
        build_campaign_list({"rows": [{"campaign.id": "1"}]})


def test_budget_pacing_from_daily_response(daily_response):
    pacing = build_budget_pacing("123", daily_response, 50_000_000, window_days=7)
    assert pacing.days_of_data == 3
    assert pacing.avg_daily_spend_micros == pytest.approx(50_000_000)
    assert pacing.pacing_percentage == pytest.approx(1.0)


def test_budget_pacing_with_bad_response_degrades_to_zero():
    pacing = build_budget_pacing("123", None, 50_000_000)
    assert pacing.days_of_data == 0
    assert pacing.pacing_percentage == 0.0
    assert pacing.pacing_status == PACING_UNKNOWN
