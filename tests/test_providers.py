"""Tests for the BOM and Open-Meteo clients (HTTP mocked)."""
from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from weather_intel.data.weather.base import GeoCoordinate, ProviderResult, as_float
from weather_intel.data.weather.bom import BOMClient, compass_to_degrees
from weather_intel.data.weather.aggregator import merge_forecasts
from weather_intel.data.weather.open_meteo import OpenMeteoClient

from conftest import make_forecast


def _session_returning(payload):
    session = MagicMock()
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    session.get.return_value = response
    return session


def _failing_session(exc):
    session = MagicMock()
    session.get.side_effect = exc
    return session


def _routed_session(routes):
    """Fake session answering by URL suffix; unknown URLs are a 404."""
    session = MagicMock()

    def get(url, params=None, timeout=None):
        for suffix, payload in routes.items():
            if url.endswith(suffix):
                response = MagicMock()
                response.json.return_value = payload
                return response
        raise requests.HTTPError(f"404 {url}")

    session.get.side_effect = get
    return session


def _location(zone):
    return {"data": {"geohash": "qd66hr", "name": "Site", "timezone": zone}}


BOM_DAILY = {
    "data": [
        {"date": "2026-10-17T16:00:00Z", "temp_max": 31, "temp_min": 15,
         "rain": {"amount": {"min": 2, "max": 6, "units": "mm"}, "chance": 60}},
        {"date": "2026-10-18T16:00:00Z", "temp_max": None, "temp_min": 14,
         "rain": {"amount": {"min": 0, "max": None, "units": "mm"}}},
        {"date": "2026-10-19T16:00:00Z", "temp_max": 29, "temp_min": None,
         "rain": {"amount": {"min": None, "max": 10, "units": "mm"}}},
    ]
}

BOM_HOURLY = {
    "data": [
        {"time": "2026-10-18T01:00:00Z", "temp": 20,
         "rain": {"amount": {"min": 0, "max": 1}}, "wind": {"speed_kilometre": 12, "direction": "SW"}},
        {"time": "2026-10-18T02:00:00Z", "temp": 22,
         "rain": {"amount": {"min": 0, "max": 0}}, "wind": {"speed_kilometre": 30, "direction": "SW"}},
        {"time": "2026-10-18T03:00:00Z", "temp": None,
         "rain": {"amount": {"min": None, "max": None}}, "wind": {"speed_kilometre": None, "direction": "W"}},
    ]
}


# ── Helpers ───────────────────────────────────────────────────────────────────

def test_as_float_defaults_missing_values():
    assert as_float(None) == 0.0
    assert as_float("3.5") == 3.5
    assert as_float("n/a") == 0.0


def test_compass_to_degrees():
    assert compass_to_degrees("N") == 0.0
    assert compass_to_degrees("SW") == 225.0
    assert compass_to_degrees("nw") == 315.0
    assert compass_to_degrees(None) == 0.0
    assert compass_to_degrees("CALM") == 0.0


# ── BOM ───────────────────────────────────────────────────────────────────────

def test_bom_coverage_box():
    client = BOMClient(session=MagicMock())
    assert client.covers(-31.95, 115.86)
    assert client.covers(-42.88, 147.33)
    assert not client.covers(51.5, -0.12)
    assert not client.covers(-41.29, 174.78)   # Wellington


def test_bom_daily_parsing_defaults_and_local_dates():
    client = BOMClient(session=_session_returning(BOM_DAILY))
    result = client.fetch_daily("qd66hrh")

    assert result.ok
    days = result.value
    assert [d.date for d in days] == [date(2026, 10, 18), date(2026, 10, 19), date(2026, 10, 20)]
    assert days[0].rain_sum == 4.0            # midpoint of 2–6
    assert days[1].temp_max == 0.0            # null defaulted
    assert days[1].rain_sum == 0.0            # only min known
    assert days[2].rain_sum == 10.0           # only max known
    assert days[2].temp_min == 0.0


def test_bom_requests_use_six_character_geohash():
    session = _session_returning(BOM_DAILY)
    client = BOMClient(base_url="https://bom.test/v1", session=session)
    client.fetch_daily("qd66hrh")

    url = session.get.call_args.args[0]
    assert url == "https://bom.test/v1/locations/qd66hr/forecasts/daily"
    assert session.get.call_args.kwargs["timeout"] == 15.0


def test_bom_hourly_parsing():
    client = BOMClient(session=_routed_session({
        "/locations/qd66hr": _location("Australia/Perth"),
        "/forecasts/hourly": BOM_HOURLY,
    }))
    hours = client.fetch_hourly("qd66hrh").value

    assert len(hours) == 3
    assert hours[0].timestamp.hour == 9       # 01Z → 09:00 AWST
    assert hours[0].rain == 0.5
    assert hours[1].wind_speed == 30.0
    assert hours[1].wind_direction == 225.0
    assert hours[2].temp == 0.0


def test_bom_build_forecast_derives_daily_wind_from_hourly():
    client = BOMClient(session=MagicMock())
    daily = client._parse_daily(BOM_DAILY)
    hourly = client._parse_hourly(BOM_HOURLY)

    forecast = client.build_forecast(GeoCoordinate(-31.95, 115.86), daily, hourly)

    assert forecast.source == "bom"
    assert forecast.daily[0].wind_speed_max == 30.0
    assert forecast.daily[0].wind_direction_dominant == 225.0
    assert forecast.daily[1].wind_speed_max == 0.0   # no hourly data that day


@pytest.mark.parametrize("local_midnight", [
    "2026-10-17T16:00:00Z",   # AWST, UTC+8
    "2026-10-17T14:00:00Z",   # AEST, UTC+10
    "2026-10-17T13:30:00Z",   # ACDT, UTC+10:30
    "2026-10-17T13:00:00Z",   # AEDT, UTC+11
])
def test_bom_daily_date_is_the_sites_local_day(local_midnight):
    client = BOMClient(session=_session_returning({"data": [
        {"date": local_midnight, "temp_max": 30, "temp_min": 18},
    ]}))
    assert client.fetch_daily("r7hgdpz").value[0].date == date(2026, 10, 18)


BRISBANE_DAILY = {"data": [
    {"date": f"2026-10-{day:02d}T14:00:00Z", "temp_max": 28, "temp_min": 17,
     "rain": {"amount": {"min": 0, "max": 2}}}
    for day in range(17, 24)
]}

BRISBANE_HOURLY = {"data": [
    # 09:00 AEST on the 18th
    {"time": "2026-10-17T23:00:00Z", "temp": 24,
     "wind": {"speed_kilometre": 40, "direction": "E"}},
    # 00:30 AEST on the 19th, still the 18th in Perth
    {"time": "2026-10-18T14:30:00Z", "temp": 19,
     "wind": {"speed_kilometre": 70, "direction": "SE"}},
]}


def _brisbane_client():
    return BOMClient(session=_routed_session({
        "/locations/r7hgdp": _location("Australia/Brisbane"),
        "/forecasts/daily": BRISBANE_DAILY,
        "/forecasts/hourly": BRISBANE_HOURLY,
    }))


def test_bom_eastern_site_buckets_hours_in_its_own_timezone():
    client = _brisbane_client()
    daily = client.fetch_daily("r7hgdpz").value
    hourly = client.fetch_hourly("r7hgdpz").value

    forecast = client.build_forecast(GeoCoordinate(-27.47, 153.03), daily, hourly, "r7hgdpz")

    assert forecast.timezone == "Australia/Brisbane"
    assert forecast.daily[0].date == date(2026, 10, 18)
    assert forecast.daily[0].wind_speed_max == 40.0
    assert forecast.daily[1].wind_speed_max == 70.0
    assert hourly[1].timestamp.hour == 0


def test_bom_eastern_site_merges_without_gaps():
    client = _brisbane_client()
    primary = client.build_forecast(
        GeoCoordinate(-27.47, 153.03), client.fetch_daily("r7hgdpz").value, [], "r7hgdpz",
    )
    secondary = make_forecast(rain=[0.0] * 16, start=date(2026, 10, 18))

    merged = merge_forecasts(primary, secondary)

    dates = [d.date for d in merged.daily]
    assert len(dates) == 16
    assert all((b - a).days == 1 for a, b in zip(dates, dates[1:]))


def test_bom_site_timezone_is_cached_per_geohash():
    session = _routed_session({"/locations/r7hgdp": _location("Australia/Brisbane")})
    client = BOMClient(session=session)

    assert client.site_timezone("r7hgdpz").key == "Australia/Brisbane"
    assert client.site_timezone("r7hgdpq").key == "Australia/Brisbane"
    assert session.get.call_count == 1


def test_bom_site_timezone_falls_back_and_retries():
    response = MagicMock()
    response.json.return_value = _location("Australia/Sydney")
    session = MagicMock()
    session.get.side_effect = [requests.ConnectionError("down"), response]
    client = BOMClient(session=session)

    assert client.site_timezone("r3gx2f").key == "Australia/Perth"
    assert client.site_timezone("r3gx2f").key == "Australia/Sydney"
    assert client.site_timezone("r3gx2f").key == "Australia/Sydney"
    assert session.get.call_count == 2


def test_bom_hourly_uses_configured_zone_when_metadata_missing():
    client = BOMClient(session=_routed_session({"/forecasts/hourly": BOM_HOURLY}))
    hours = client.fetch_hourly("qd66hrh").value
    assert hours[0].timestamp.utcoffset().total_seconds() == 8 * 3600
    assert hours[0].timestamp == datetime(2026, 10, 18, 1, tzinfo=timezone.utc)


def test_bom_http_error_becomes_unavailable_result():
    client = BOMClient(session=_failing_session(requests.ConnectionError("down")))
    result = client.fetch_daily("qd66hrh")

    assert isinstance(result, ProviderResult)
    assert not result.ok
    assert "daily forecast" in result.error


def test_bom_malformed_payload_becomes_unavailable_result():
    client = BOMClient(session=_session_returning({"unexpected": True}))
    assert not client.fetch_hourly("qd66hrh").ok


def test_bom_empty_daily_is_unavailable():
    client = BOMClient(session=_session_returning({"data": []}))
    assert not client.fetch_daily("qd66hrh").ok


def test_bom_observations():
    payload = {
        "metadata": {"observation_time": "2026-10-18T03:30:00Z"},
        "data": {
            "temp": 24.3, "temp_feels_like": 21.9, "humidity": 38,
            "rain_since_9am": None,
            "wind": {"speed_kilometre": 19, "direction": "SW"},
            "gust": {"speed_kilometre": 28},
            "station": {"name": "Perth Metro"},
        },
    }
    client = BOMClient(session=_session_returning(payload))
    obs = client.fetch_observations("qd66hrh").value

    assert obs.temp == 24.3
    assert obs.rain_since_9am == 0.0
    assert obs.gust_speed_kmh == 28.0
    assert obs.station_name == "Perth Metro"
    assert obs.observed_at.year == 2026


def test_bom_search():
    payload = {"data": [
        {"geohash": "qd66hr", "name": "Perth", "state": "WA"},
        {"geohash": None, "name": "Broken"},
    ]}
    session = _session_returning(payload)
    client = BOMClient(session=session)

    matches = client.search("Perth").value

    assert len(matches) == 1
    assert matches[0].geokey == "qd66hr"
    assert session.get.call_args.kwargs["params"] == {"search": "Perth"}


# ── Open-Meteo ────────────────────────────────────────────────────────────────

OPEN_METEO = {
    "timezone": "Australia/Perth",
    "daily": {
        "time": ["2026-10-18", "2026-10-19"],
        "temperature_2m_max": [31.2, None],
        "temperature_2m_min": [14.0, 15.5],
        "precipitation_sum": [0.0, 12.4],
        "rain_sum": [0.0, 11.9],
        "windspeed_10m_max": [22.0, 48.0],
        "winddirection_10m_dominant": [200, 270],
    },
    "hourly": {
        "time": ["2026-10-18T00:00", "2026-10-18T01:00"],
        "temperature_2m": [15.0, 14.5],
        "precipitation": [0.0, None],
        "rain": [0.0, 0.2],
        "windspeed_10m": [8.0, 9.0],
        "winddirection_10m": [190, 195],
        "soil_moisture_0_to_1cm": [0.21, 0.22],
    },
}


def test_open_meteo_parsing():
    client = OpenMeteoClient(session=_session_returning(OPEN_METEO))
    forecast = client.fetch_forecast(-31.95, 115.86, 2).value

    assert forecast.source == "open-meteo"
    assert [d.date for d in forecast.daily] == [date(2026, 10, 18), date(2026, 10, 19)]
    assert forecast.daily[1].temp_max == 0.0
    assert forecast.daily[1].rain_sum == 11.9
    assert forecast.daily[1].wind_speed_max == 48.0
    assert len(forecast.hourly) == 2
    assert forecast.hourly[1].precipitation == 0.0
    assert forecast.soil_moisture == {"soil_moisture_0_to_1cm": [0.21, 0.22]}


def test_open_meteo_caps_forecast_days():
    session = _session_returning(OPEN_METEO)
    client = OpenMeteoClient(session=session)
    client.fetch_forecast(-31.95, 115.86, 30)

    params = session.get.call_args.kwargs["params"]
    assert params["forecast_days"] == 16
    assert "rain_sum" in params["daily"]
    assert params["timezone"] == "auto"


def test_open_meteo_uses_the_timezone_it_resolved():
    payload = dict(OPEN_METEO, timezone="Europe/London")
    client = OpenMeteoClient(session=_session_returning(payload))
    forecast = client.fetch_forecast(51.5, -0.12, 2).value

    assert forecast.timezone == "Europe/London"
    assert forecast.hourly[0].timestamp.tzinfo.key == "Europe/London"


def test_open_meteo_falls_back_to_configured_timezone():
    payload = {k: v for k, v in OPEN_METEO.items() if k != "timezone"}
    client = OpenMeteoClient(tz_name="Australia/Darwin", session=_session_returning(payload))
    forecast = client.fetch_forecast(-12.46, 130.84, 2).value
    assert forecast.timezone == "Australia/Darwin"


def test_open_meteo_missing_hourly_block_gives_empty_hourly():
    payload = {"daily": OPEN_METEO["daily"]}
    client = OpenMeteoClient(session=_session_returning(payload))
    forecast = client.fetch_forecast(-31.95, 115.86, 2).value
    assert forecast.hourly == []


@pytest.mark.parametrize("exc", [requests.Timeout("slow"), requests.HTTPError("500")])
def test_open_meteo_errors_become_unavailable(exc):
    client = OpenMeteoClient(session=_failing_session(exc))
    assert not client.fetch_forecast(-31.95, 115.86, 16).ok
