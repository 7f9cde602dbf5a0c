# ABOUTME: ASGI web entry point for the bike weather UI.
# ABOUTME: Starlette routes drive the weather and trail flows; AI calls run as background tasks.

import logging
from functools import partial
from pathlib import Path

import uvicorn
from google import genai
from starlette.applications import Starlette
from starlette.background import BackgroundTask
from starlette.datastructures import UploadFile
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse
from starlette.routing import Route
from starlette.templating import Jinja2Templates

from bike_weather.config import Settings
from bike_weather.errors import InvalidImageError
from bike_weather.flows import AppSession, PendingForecast, PendingTrails, TrailFlow, WeatherFlow
from bike_weather.gemini_service import create_client, fetch_bike_trails, fetch_weather_forecast
from bike_weather.geolocation import SubmittedPosition
from bike_weather.preferences import PreferenceStore
from bike_weather.storage import JsonFileStore, KeyValueStore
from bike_weather.summary import CHARTS, chart_points, hour_label, summarize_day

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND_URL = (
    "https://images.unsplash.com/photo-1511994293814-3a0a1f05561a?q=80&w=2940&auto=format&fit=crop"
)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.globals.update(
    summarize_day=summarize_day,
    chart_points=chart_points,
    hour_label=hour_label,
    charts=CHARTS,
)


def _session(request: Request) -> AppSession:
    return request.app.state.session


def _home(background: BackgroundTask | None = None) -> RedirectResponse:
    return RedirectResponse("/", status_code=303, background=background)


def _run(flow: WeatherFlow | TrailFlow, pending: PendingForecast | PendingTrails | None) -> BackgroundTask | None:
    """Resolve a pending request after the redirect has been sent."""
    if pending is None:
        return None
    return BackgroundTask(flow.resolve, pending)


def _text(form, name: str) -> str:
    value = form.get(name, "")
    return value if isinstance(value, str) else ""


async def index(request: Request):
    session = _session(request)
    background = None
    if session.view == "weather" and session.weather.should_replay():
        background = _run(session.weather, session.weather.begin_replay())
    context = {
        "session": session,
        "weather": session.weather.state,
        "trails": session.trails.state,
        "saved_location": session.preferences.saved_location,
        "background_url": session.preferences.background_image or DEFAULT_BACKGROUND_URL,
        "custom_background": session.preferences.background_image is not None,
    }
    return templates.TemplateResponse(request, "index.html", context, background=background)


async def health(request: Request):
    return JSONResponse({"status": "ok"})


async def weather_search(request: Request):
    session = _session(request)
    form = await request.form()
    return _home(_run(session.weather, session.weather.begin_search(_text(form, "location"))))


async def weather_locate(request: Request):
    session = _session(request)
    form = await request.form()
    pending = session.weather.begin_locate(SubmittedPosition.from_form(form))
    return _home(_run(session.weather, pending))


async def weather_dismiss(request: Request):
    _session(request).weather.dismiss_error()
    return _home()


async def clear_saved_location(request: Request):
    _session(request).weather.clear_saved_location()
    return _home()


async def trails_search(request: Request):
    session = _session(request)
    form = await request.form()
    pending = session.search_trails(_text(form, "location"), SubmittedPosition.from_form(form))
    return _home(_run(session.trails, pending))


async def trails_dismiss(request: Request):
    _session(request).trails.dismiss_error()
    return _home()


async def switch_view(request: Request):
    session = _session(request)
    if request.path_params["view"] == "trails":
        session.show_trails()
    else:
        session.show_weather()
    return _home()


async def change_background(request: Request):
    session = _session(request)
    form = await request.form()
    upload = form.get("image")
    if isinstance(upload, UploadFile):
        await session.change_background(upload)
    else:
        session.notice = InvalidImageError().message
    return _home()


async def reset_background(request: Request):
    _session(request).reset_background()
    return _home()


async def dismiss_notice(request: Request):
    _session(request).dismiss_notice()
    return _home()


routes = [
    Route("/", index),
    Route("/health", health),
    Route("/weather/search", weather_search, methods=["POST"]),
    Route("/weather/locate", weather_locate, methods=["POST"]),
    Route("/weather/dismiss", weather_dismiss, methods=["POST"]),
    Route("/weather/saved/clear", clear_saved_location, methods=["POST"]),
    Route("/trails/search", trails_search, methods=["POST"]),
    Route("/trails/dismiss", trails_dismiss, methods=["POST"]),
    Route("/view/{view:str}", switch_view, methods=["POST"]),
    Route("/background", change_background, methods=["POST"]),
    Route("/background/reset", reset_background, methods=["POST"]),
    Route("/notice/dismiss", dismiss_notice, methods=["POST"]),
]


def create_app(
    settings: Settings | None = None,
    client: genai.Client | None = None,
    store: KeyValueStore | None = None,
) -> Starlette:
    """Build the app for one local user.

    ``client`` and ``store`` default to the real Gemini client and the JSON
    preference file named in ``settings``.
    """
    settings = settings or Settings.from_env()
    if client is None:
        client = create_client(settings)
    if store is None:
        store = JsonFileStore(settings.store_path, capacity=settings.storage_capacity)

    app = Starlette(routes=routes)
    app.state.session = AppSession(
        fetch_forecast=partial(fetch_weather_forecast, client, model=settings.model),
        fetch_trails=partial(fetch_bike_trails, client, model=settings.model),
        preferences=PreferenceStore(store),
    )
    logger.info("Bike weather app ready (model %s, preferences in %s)", settings.model, settings.store_path)
    return app


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
