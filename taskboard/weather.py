"""
Weather proxy: Open-Meteo forecast + Nominatim reverse geocoding, reshaped
into the compact document the dashboard's weather widget renders.

The forecast call must succeed (UpstreamError otherwise). A failed reverse
geocode only costs the city name, which falls back to "Your Location".
"""
import math
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import requests

from .config import Config
from .errors import UpstreamError

logger = logging.getLogger(__name__)

PLACEHOLDER_CITY = "Your Location"

# WMO weather interpretation codes -> (condition, day icon, night icon)
WEATHER_CODES: Dict[int, Tuple[str, str, str]] = {
    0: ("Clear", "sun", "moon"),
    1: ("Mainly Clear", "sun", "moon"),
    2: ("Partly Cloudy", "cloud-sun", "cloud-moon"),
    3: ("Overcast", "cloud", "cloud"),
    45: ("Foggy", "cloud-fog", "cloud-fog"),
    48: ("Rime Fog", "cloud-fog", "cloud-fog"),
    51: ("Light Drizzle", "cloud-drizzle", "cloud-drizzle"),
    53: ("Moderate Drizzle", "cloud-drizzle", "cloud-drizzle"),
    55: ("Dense Drizzle", "cloud-drizzle", "cloud-drizzle"),
    61: ("Slight Rain", "cloud-rain", "cloud-rain"),
    63: ("Moderate Rain", "cloud-rain", "cloud-rain"),
    65: ("Heavy Rain", "cloud-rain", "cloud-rain"),
    71: ("Slight Snow", "cloud-snow", "cloud-snow"),
    73: ("Moderate Snow", "cloud-snow", "cloud-snow"),
    75: ("Heavy Snow", "cloud-snow", "cloud-snow"),
    80: ("Slight Showers", "cloud-rain", "cloud-rain"),
    81: ("Moderate Showers", "cloud-rain", "cloud-rain"),
    82: ("Violent Showers", "cloud-rain", "cloud-rain"),
    95: ("Thunderstorm", "cloud-lightning", "cloud-lightning"),
    96: ("Thunderstorm with Hail", "cloud-lightning", "cloud-lightning"),
    99: ("Severe Thunderstorm", "cloud-lightning", "cloud-lightning"),
}

CURRENT_FIELDS = [
    "temperature_2m", "relative_humidity_2m", "apparent_temperature", "precipitation",
    "weather_code", "wind_speed_10m", "is_day", "uv_index", "visibility", "surface_pressure",
]

# Geocoder address fields, most specific first
CITY_FIELDS = ("city", "town", "village", "municipality", "county", "state")

# Used when the forecast omits a reading
DEFAULT_UV_INDEX = 0
DEFAULT_VISIBILITY_KM = 10
DEFAULT_PRESSURE_HPA = 1013


def _round(value: Any) -> int:
    """Round half up; missing or non-numeric readings become 0."""
    try:
        return int(math.floor(float(value) + 0.5))
    except (TypeError, ValueError):
        return 0


def _at(values: List[Any], index: int) -> Any:
    return values[index] if 0 <= index < len(values) else None


def weather_condition(code: Any, is_day: bool = True) -> Dict[str, str]:
    """Label and icon for a WMO code; unknown codes read as clear sky."""
    try:
        key = int(code)
    except (TypeError, ValueError):
        key = 0
    condition, day_icon, night_icon = WEATHER_CODES.get(key, WEATHER_CODES[0])
    return {"condition": condition, "icon": day_icon if is_day else night_icon}


def day_name(day: date, today: date) -> str:
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    return day.strftime("%a")


def hour_label(timestamp: str) -> str:
    """``2026-01-20T15:00`` -> ``3 PM``."""
    hour = datetime.fromisoformat(timestamp).hour
    return f"{hour % 12 or 12} {'AM' if hour < 12 else 'PM'}"


def fetch_forecast(lat: float, lng: float, config: Config) -> Dict[str, Any]:
    params = {
        "latitude": lat,
        "longitude": lng,
        "current": ",".join(CURRENT_FIELDS),
        "hourly": "temperature_2m",
        "daily": "weather_code,temperature_2m_max,temperature_2m_min",
        "timezone": "auto",
        "forecast_days": config.forecast_days,
    }
    try:
        r = requests.get(config.forecast_url, params=params,
                         headers={"Accept": "application/json"},
                         timeout=config.upstream_timeout)
    except requests.RequestException as e:
        raise UpstreamError(f"Weather API unreachable: {e}") from e
    if not r.ok:
        logger.error("Open-Meteo error %s: %s", r.status_code, r.text[:200])
        raise UpstreamError(f"Weather API error: {r.status_code}", status_code=r.status_code)
    try:
        return r.json()
    except ValueError as e:
        raise UpstreamError(f"Weather API returned invalid JSON: {e}") from e


def reverse_geocode(lat: float, lng: float, config: Config) -> str:
    """City name for a coordinate; the placeholder on any failure."""
    params = {"format": "json", "lat": lat, "lon": lng, "zoom": 10, "addressdetails": 1}
    try:
        r = requests.get(config.geocode_url, params=params,
                         headers={"User-Agent": config.geocode_user_agent,
                                  "Accept": "application/json"},
                         timeout=config.upstream_timeout)
        if not r.ok:
            logger.warning("Geocoding returned %s", r.status_code)
            return PLACEHOLDER_CITY
        address = (r.json() or {}).get("address") or {}
    except (requests.RequestException, ValueError, AttributeError) as e:
        logger.warning("Geocoding error: %s", e)
        return PLACEHOLDER_CITY
    for key in CITY_FIELDS:
        if address.get(key):
            return address[key]
    return PLACEHOLDER_CITY


def reshape(forecast: Dict[str, Any], city: str, now: datetime, config: Config) -> Dict[str, Any]:
    """Build the widget document from a raw forecast response."""
    current = forecast.get("current") or {}
    hourly = forecast.get("hourly") or {}
    daily = forecast.get("daily") or {}

    is_day = current.get("is_day") == 1
    condition = weather_condition(current.get("weather_code", 0), is_day)

    # Upstream times are local to the location; match the current local hour
    offset = timedelta(seconds=forecast.get("utc_offset_seconds") or 0)
    local_now = now.astimezone(timezone.utc).replace(tzinfo=None) + offset
    hour_prefix = local_now.strftime("%Y-%m-%dT%H")

    times = hourly.get("time") or []
    temps = hourly.get("temperature_2m") or []
    start = next((i for i, t in enumerate(times) if t.startswith(hour_prefix)), 0)
    hourly_points = [
        {"time": hour_label(t), "temp": _round(_at(temps, start + i))}
        for i, t in enumerate(times[start:start + config.hourly_points])
    ]

    days = daily.get("time") or []
    highs = daily.get("temperature_2m_max") or []
    lows = daily.get("temperature_2m_min") or []
    codes = daily.get("weather_code") or []
    daily_points = []
    for i, day in enumerate(days[:config.forecast_days]):
        cond = weather_condition(_at(codes, i) or 0, True)
        daily_points.append({
            "date": day,
            "day": day_name(date.fromisoformat(day), local_now.date()),
            "tempMax": _round(_at(highs, i)),
            "tempMin": _round(_at(lows, i)),
            "condition": cond["condition"],
            "icon": cond["icon"],
        })

    visibility = current.get("visibility")
    uv_index = current.get("uv_index")
    pressure = current.get("surface_pressure")
    return {
        "current": {
            "temp": _round(current.get("temperature_2m")),
            "condition": condition["condition"],
            "icon": condition["icon"],
            "humidity": current.get("relative_humidity_2m") or 0,
            "windSpeed": _round(current.get("wind_speed_10m")),
            "precipitation": _round(current.get("precipitation")),
            "feelsLike": _round(current.get("apparent_temperature")),
            "uvIndex": _round(uv_index) if uv_index is not None else DEFAULT_UV_INDEX,
            "visibility": _round(visibility / 1000) if visibility is not None else DEFAULT_VISIBILITY_KM,
            "pressure": _round(pressure) if pressure is not None else DEFAULT_PRESSURE_HPA,
            "isDay": is_day,
        },
        "hourly": hourly_points,
        "daily": daily_points,
        "location": {
            "city": city,
            "timezone": forecast.get("timezone") or "UTC",
        },
    }


def fetch_weather(lat: float, lng: float, config: Optional[Config] = None,
                  now: Optional[datetime] = None) -> Dict[str, Any]:
    """Forecast + city name for a coordinate. Raises UpstreamError."""
    config = config or Config()
    now = now or datetime.now(timezone.utc)
    forecast = fetch_forecast(lat, lng, config)
    logger.info("Weather data received, timezone: %s", forecast.get("timezone"))
    city = reverse_geocode(lat, lng, config)
    return reshape(forecast, city, now, config)
