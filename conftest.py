import pytest


@pytest.fixture
def metadata_response():
    return {
        "rows": [
            {
                "campaign.id": 123,
                "campaign.name": "PMax | Brand",
                "campaign.status": "ENABLED",
                "campaign.bidding_strategy_type": "MAXIMIZE_CONVERSION_VALUE",
                "campaign.optimization_score": "0.82",
                "campaign.start_date": "2025-06-01",
                "campaign_budget.amount_micros": "50000000",
            }
        ]
    }


@pytest.fixture
def metrics_response():
    return {
        "rows": [
            {"campaign.id": "123", "segments.date": "2026-02-02", "metrics.impressions": "900",
             "metrics.clicks": "45", "metrics.cost_micros": "9000000", "metrics.conversions": "2",
             "metrics.conversions_value": "60.5"},
            {"campaign.id": "123", "segments.date": "2026-02-01", "metrics.impressions": 100,
             "metrics.clicks": 10, "metrics.cost_micros": 2500000, "metrics.conversions": 1.5,
             "metrics.conversions_value": 30.25, "metrics.interactions": 12},
        ]
    }


@pytest.fixture
def daily_response():
    return {
        "rows": [
            {"segments.date": "2026-02-03", "metrics.impressions": "300", "metrics.clicks": "6",
             "metrics.cost_micros": "60000000", "metrics.ctr": "0.02", "metrics.average_cpc": "10000000"},
            {"segments.date": "2026-02-01", "metrics.impressions": "100", "metrics.clicks": "10",
             "metrics.cost_micros": "40000000"},
            {"segments.date": "2026-02-02", "metrics.impressions": "200", "metrics.clicks": "4",
             "metrics.cost_micros": "50000000"},
        ]
    }


@pytest.fixture
def campaign_list_response():
    return {
        "rows": [
            {"campaign.id": "1", "campaign.name": "Search | Generic", "campaign.status": "ENABLED",
             "campaign.advertising_channel_type": "SEARCH", "segments.date": "2026-02-01",
             "metrics.impressions": "1000", "metrics.clicks": "20", "metrics.cost_micros": "10000000"},
            {"campaign.id": "2", "campaign.name": "PMax | All", "campaign.status": "PAUSED",
             "campaign.advertising_channel_type": "PERFORMANCE_MAX", "segments.date": "2026-02-01",
             "metrics.impressions": "50", "metrics.clicks": "1"},
            {"campaign.id": "1", "campaign.name": "Search | Generic", "campaign.status": "ENABLED",
             "campaign.advertising_channel_type": "SEARCH", "segments.date": "2026-02-02",
             "metrics.impressions": "3000", "metrics.clicks": "40", "metrics.cost_micros": "20000000"},
        ]
    }
