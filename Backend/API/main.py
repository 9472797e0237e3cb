import logging
from fastapi import Depends, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse

from deps.config import LOG_LEVEL, PLAYBACK_STEP_MS
from deps.store import get_round_book
from routers import plinko, rounds
from services import playback
from services.errors import EngineError
from services.rounds import RoundBook, RoundState

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Plinko API (Provably Fair)")

# Routers
app.include_router(rounds.router)
app.include_router(plinko.router)


@app.exception_handler(EngineError)
async def engine_error(request: Request, exc: EngineError):
    logger.info("%s %s rejected: %s: %s", request.method, request.url.path, exc.kind, exc.reason)
    return JSONResponse(status_code=exc.status_code, content={"kind": exc.kind, "detail": exc.reason})


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    reason = "; ".join(
        f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in exc.errors()
    )
    return JSONResponse(status_code=400, content={"kind": "InvalidParameter", "detail": reason})


@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/docs")

@app.get("/healthz")
def healthz():
    return {"ok": True}


# Replays a started round's stored path, one frame per row.
@app.websocket("/ws/rounds/{round_id}")
async def ws_playback(round_id: str, ws: WebSocket, reduced_motion: bool = False,
                      book: RoundBook = Depends(get_round_book)):
    await ws.accept()
    try:
        rnd = book.get(round_id)
    except EngineError as exc:
        await ws.send_json({"kind": exc.kind, "detail": exc.reason})
        await ws.close(code=1008)
        return
    if rnd.state not in (RoundState.STARTED, RoundState.REVEALED):
        await ws.send_json({"kind": "InvalidRoundState", "detail": f"round {round_id} has no outcome yet"})
        await ws.close(code=1008)
        return

    interval = 0 if reduced_motion else PLAYBACK_STEP_MS / 1000
    try:
        async for frame in playback.frames(rnd.outcome.path, interval):
            await ws.send_json(frame)
        await ws.send_json({"done": True, "bucket": rnd.outcome.bucket, "multiplier": rnd.multiplier})
        await ws.close()
    except WebSocketDisconnect:
        logger.debug("playback of round %s cancelled by client", round_id)
