"""FastAPI application exposing the TTS relay and the live event relay.

Endpoints:
    GET  /                   Liveness banner
    GET  /health             Cache and connection counters
    GET  /tts, /tts.mp3      Cached synthesis with range support
    POST /tts                Same, fields from a JSON body
    GET  /tts/stream         Uncached streaming synthesis
    GET  /voices             Upstream voice list
    POST /vital/link-token   Vital link token for a user
    POST /vital/webhook      Vital webhook receiver
    WS   /ws?userId=...      Live metric feed for one user
"""

import logging
from collections.abc import AsyncIterator, Mapping
from typing import Any

from fastapi import APIRouter, FastAPI, Request, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse

from .. import __version__
from ..cache.manager import AudioCache
from ..config import RelayConfig
from ..providers.base import TTSProvider
from ..relay.events import EventRelay
from ..relay.registry import ConnectionRegistry
from ..relay.vital import VitalAPIError, VitalClient, VitalTimeoutError
from ..tts.errors import InputValidationError, TTSAPIError, TTSError, TTSTimeoutError
from ..tts.models import SynthesisRequest
from ..tts.pipeline import TTSPipeline
from .ranges import byte_range_response

logger = logging.getLogger(__name__)

AUDIO_MEDIA_TYPE = "audio/mpeg"

router = APIRouter()


# =============================================================================
# Exception handlers
# =============================================================================


async def _input_error(request: Request, exc: InputValidationError) -> Response:
    return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)


async def _tts_timeout(request: Request, exc: TTSTimeoutError) -> Response:
    logger.error(f"ElevenLabs timeout: {exc}")
    return PlainTextResponse(
        f"ElevenLabs timeout: {exc}", status_code=status.HTTP_504_GATEWAY_TIMEOUT
    )


async def _tts_error(request: Request, exc: TTSError) -> Response:
    detail = exc.detail if isinstance(exc, TTSAPIError) else str(exc)
    logger.error(f"ElevenLabs error: {detail}")
    return PlainTextResponse(
        f"ElevenLabs error: {detail}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def _vital_timeout(request: Request, exc: VitalTimeoutError) -> Response:
    logger.error(str(exc))
    return JSONResponse(
        {"error": str(exc)}, status_code=status.HTTP_504_GATEWAY_TIMEOUT
    )


async def _vital_error(request: Request, exc: VitalAPIError) -> Response:
    logger.error(str(exc))
    return JSONResponse(
        {"error": str(exc), "upstream": exc.response_body},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def _internal_error(request: Request, exc: Exception) -> Response:
    logger.exception(f"Unhandled error on {request.url.path}", exc_info=exc)
    return PlainTextResponse(
        str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


# =============================================================================
# Helpers
# =============================================================================


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise InputValidationError("Invalid JSON body") from None


async def _serve_synthesis(request: Request, params: Mapping[str, Any]) -> Response:
    state = request.app.state
    synthesis = SynthesisRequest.from_params(params, state.config.elevenlabs)

    result = await state.pipeline.synthesize(synthesis)
    response = byte_range_response(
        result.audio, request.headers.get("range"), AUDIO_MEDIA_TYPE
    )
    response.headers["X-Cache"] = "HIT" if result.cached else "MISS"
    return response


async def _relay_chunks(first: bytes, chunks: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    if first:
        yield first
    try:
        async for chunk in chunks:
            yield chunk
    except TTSError as e:
        # Headers are already sent; the client sees a truncated body
        logger.error(f"Upstream stream failed mid-response: {e}")


# =============================================================================
# Routes
# =============================================================================


@router.get("/", response_class=PlainTextResponse)
async def index() -> str:
    return "TTS server is running!"


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    state = request.app.state
    return {
        "status": "ok",
        "version": __version__,
        "cache": state.cache.stats(),
        "connections": len(state.registry),
        "vital_configured": state.vital is not None,
    }


@router.get("/tts")
@router.get("/tts.mp3")
async def tts_get(request: Request) -> Response:
    """Synthesize (or replay from cache) the text in the query string."""
    return await _serve_synthesis(request, request.query_params)


@router.post("/tts")
async def tts_post(request: Request) -> Response:
    """Synthesize (or replay from cache) the text in a JSON body."""
    body = await _json_body(request)
    if not isinstance(body, dict):
        raise InputValidationError("Request body must be a JSON object")
    return await _serve_synthesis(request, body)


@router.get("/tts/stream")
async def tts_stream(request: Request) -> Response:
    """Proxy the upstream streaming endpoint without touching the cache."""
    state = request.app.state
    synthesis = SynthesisRequest.from_params(
        request.query_params, state.config.elevenlabs
    )
    chunks = state.pipeline.stream(synthesis)

    # Pull the first chunk so upstream failures still map to an error status
    try:
        first = await anext(chunks)
    except StopAsyncIteration:
        first = b""

    return StreamingResponse(_relay_chunks(first, chunks), media_type=AUDIO_MEDIA_TYPE)


@router.get("/voices")
async def voices(request: Request, simple: bool = False) -> dict[str, Any]:
    """List upstream voices, optionally projected to id and name."""
    voice_list = await request.app.state.provider.list_voices()
    return {"voices": [voice.to_dict(simple=simple) for voice in voice_list]}


@router.post("/vital/link-token")
async def vital_link_token(request: Request) -> Response:
    vital: VitalClient | None = request.app.state.vital
    if vital is None:
        return JSONResponse(
            {"error": "Vital is not configured"},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    body = await _json_body(request)
    if not isinstance(body, dict):
        raise InputValidationError("Request body must be a JSON object")
    user_id = str(body.get("userId") or "").strip()
    if not user_id:
        raise InputValidationError("userId is required")

    token = await vital.create_link_token(
        user_id,
        provider=body.get("provider"),
        redirect_url=body.get("redirectUrl"),
    )
    return JSONResponse(token)


@router.post("/vital/webhook")
async def vital_webhook(request: Request) -> Response:
    """Relay workout and activity events to the addressed live connection."""
    envelope = await _json_body(request)
    try:
        result = await request.app.state.relay.dispatch(envelope)
    except Exception as e:
        logger.exception("Webhook processing failed")
        return JSONResponse(
            {"ok": False, "error": str(e)},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return JSONResponse({"ok": True, **result.to_dict()})


@router.websocket("/ws")
async def live_events(websocket: WebSocket) -> None:
    """Hold a live connection open for the user named in ``userId``."""
    user_id = (websocket.query_params.get("userId") or "").strip()
    if not user_id:
        logger.warning("Rejecting live connection without userId")
        await websocket.close(
            code=status.WS_1008_POLICY_VIOLATION,
            reason="userId query parameter is required",
        )
        return

    registry: ConnectionRegistry = websocket.app.state.registry
    await websocket.accept()
    await registry.register(user_id, websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            # Binary frames carry no commands
            if message.get("text") == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        registry.unregister(user_id, websocket)


# =============================================================================
# Application factory
# =============================================================================


def create_app(
    config: RelayConfig,
    provider: TTSProvider,
    cache: AudioCache | None = None,
    registry: ConnectionRegistry | None = None,
    vital: VitalClient | None = None,
) -> FastAPI:
    """Build the relay application around explicitly owned collaborators.

    Args:
        config: Resolved configuration
        provider: Synthesis provider
        cache: Audio cache, sized from config when omitted
        registry: Live connection registry, empty when omitted
        vital: Vital client, link token route answers 503 when omitted

    Returns:
        Configured FastAPI application
    """
    if cache is None:
        cache = AudioCache(
            capacity=config.cache.max_entries, coalesce=config.cache.coalesce
        )
    if registry is None:
        registry = ConnectionRegistry()

    app = FastAPI(title="voicerelay", version=__version__)
    app.state.config = config
    app.state.provider = provider
    app.state.cache = cache
    app.state.registry = registry
    app.state.relay = EventRelay(registry)
    app.state.pipeline = TTSPipeline(provider=provider, cache=cache)
    app.state.vital = vital

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "xi-api-key"],
        expose_headers=["Content-Range", "Accept-Ranges", "Content-Length", "X-Cache"],
    )

    app.add_exception_handler(InputValidationError, _input_error)
    app.add_exception_handler(TTSTimeoutError, _tts_timeout)
    app.add_exception_handler(TTSError, _tts_error)
    app.add_exception_handler(VitalTimeoutError, _vital_timeout)
    app.add_exception_handler(VitalAPIError, _vital_error)
    app.add_exception_handler(Exception, _internal_error)

    app.include_router(router)
    logger.info(
        f"voicerelay app ready (cache capacity {cache.capacity}, "
        f"vital {'enabled' if vital else 'disabled'})"
    )
    return app
