# ABOUTME: Derives the figures shown on a forecast card and its hourly charts.
# ABOUTME: Averages, maxima, date labels and SVG polyline points from a day's hourly data.

from dataclasses import dataclass
from datetime import date

from bike_weather.models import DailyForecast, HourlyData


@dataclass(frozen=True)
class DaySummary:
    """Header figures of one forecast card. Figures are None for a day without samples."""

    weekday: str
    short_date: str
    avg_temperature: int | None
    avg_wind_speed: int | None
    max_uv_index: int | None
    max_rain_probability: int | None


@dataclass(frozen=True)
class ChartSpec:
    field: str
    title: str
    unit: str
    color: str
    area: bool = False


CHARTS = (
    ChartSpec("temperature", "Temperature (°F)", "°F", "#fb923c"),
    ChartSpec("wind_speed", "Wind Speed (mph)", "mph", "#38bdf8"),
    ChartSpec("uv_index", "UV Index", "", "#fcd34d"),
    ChartSpec("rain_probability", "Rain Probability (%)", "%", "#5eead4", area=True),
)


def summarize_day(day: DailyForecast) -> DaySummary:
    weekday, short_date = _date_labels(day.date)
    hours = day.hourly_data
    if not hours:
        return DaySummary(weekday, short_date, None, None, None, None)
    return DaySummary(
        weekday=weekday,
        short_date=short_date,
        avg_temperature=round(sum(h.temperature for h in hours) / len(hours)),
        avg_wind_speed=round(sum(h.wind_speed for h in hours) / len(hours)),
        max_uv_index=max(h.uv_index for h in hours),
        max_rain_probability=round(max(h.rain_probability for h in hours)),
    )


def _date_labels(raw: str) -> tuple[str, str]:
    """Weekday and "Jan 5" style labels; an unparseable date is shown as given."""
    try:
        parsed = date.fromisoformat(raw)
    except ValueError:
        return raw, ""
    return parsed.strftime("%A"), f"{parsed.strftime('%b')} {parsed.day}"


def chart_points(hours: list[HourlyData], field: str, width: int = 300, height: int = 120) -> str:
    """SVG polyline points for one hourly field, scaled to fill the given box."""
    if not hours:
        return ""
    values = [float(getattr(h, field)) for h in hours]
    low, high = min(values), max(values)
    span = (high - low) or 1.0
    step = width / (len(values) - 1) if len(values) > 1 else 0.0
    points = []
    for i, value in enumerate(values):
        x = i * step
        y = height - (value - low) / span * height
        points.append(f"{x:.1f},{y:.1f}")
    return " ".join(points)


def hour_label(time: str) -> str:
    """Normalize "7:30" or "07:00:00" style times to "07:00"."""
    head = time.split(":")[0]
    return f"{head.zfill(2)}:00" if head.isdigit() else time
