import inspect
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request

from routes.relay_route import router as relay_router
from services.openai.chat_completion import build_chat_client
from utils.settings import RelaySettings, get_settings

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

logger = logging.getLogger(__name__)


async def _close_quietly(client) -> None:
    """Close a client exposing a sync or async close/aclose method."""
    if client is None:
        return
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        if inspect.iscoroutinefunction(aclose):
            await aclose()
        else:
            result = aclose()
            if inspect.isawaitable(result):
                await result
    except Exception:
        logger.warning("Ignoring error while closing %s", type(client).__name__, exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the relay settings (unless supplied to `create_app`)
      - the Azure OpenAI async client for chat, translation and explanation
      - the shared httpx client used for realtime session issuance
    and attach them to `app.state`.
    """
    settings: RelaySettings = app.state.settings

    # Missing credentials are not fatal; the affected routes fail per request.
    if getattr(app.state, "openai_client", None) is None:
        try:
            app.state.openai_client = build_chat_client(settings)
        except Exception as exc:
            raise RuntimeError("Failed to initialize OpenAI Async client") from exc
        if app.state.openai_client is None:
            logger.warning("Chat deployment is not configured; /api/chat, /api/translate and /api/explanation will fail")

    if getattr(app.state, "http_client", None) is None:
        app.state.http_client = httpx.AsyncClient()
    if not settings.realtime_configured:
        logger.warning("Realtime deployment is not configured; /api/token will fail")

    try:
        yield
    finally:
        await _close_quietly(getattr(app.state, "openai_client", None))
        await _close_quietly(getattr(app.state, "http_client", None))


def create_app(settings: Optional[RelaySettings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings or get_settings()
    app.state.openai_client = None
    app.state.http_client = None

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that reports which upstream clients are available.
        """
        state = request.app.state
        return {
            "ok": True,
            "chat_available": getattr(state, "openai_client", None) is not None,
            "realtime_available": state.settings.realtime_configured,
        }

    # Register application routers
    app.include_router(relay_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
