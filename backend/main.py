import logging
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from api.session import SearchSession, current_session
from control.errors import ConfigError, ControlNotReadyError, LoadError, UnknownLayerError
from control.settings import log_level

logging.basicConfig(
    level=log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ApiLayerChange(BaseModel):
    displayName: str


class ApiSelection(BaseModel):
    value: Any
    key: str


class ApiInput(BaseModel):
    value: str = ""


class ApiMatch(BaseModel):
    key: str
    match: Any
    value: dict[str, Any] | None = None


class ApiDedupRequest(BaseModel):
    candidates: list[ApiMatch] = Field(default_factory=list)


def _error(status: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@app.exception_handler(UnknownLayerError)
async def _unknown_layer(_request: Request, exc: UnknownLayerError):
    return _error(404, exc)


@app.exception_handler(ConfigError)
async def _config_error(_request: Request, exc: ConfigError):
    return _error(400, exc)


@app.exception_handler(LoadError)
async def _load_error(_request: Request, exc: LoadError):
    return _error(502, exc)


@app.exception_handler(ControlNotReadyError)
async def _not_ready(_request: Request, exc: ControlNotReadyError):
    return _error(409, exc)


def _with_commands(session: SearchSession, **extra) -> dict[str, Any]:
    # Every response hands the browser the map mutations queued while handling it.
    return {**extra, "commands": session.host.drain()}


# Every handler is `async def`: the control is only ever touched from the event loop.
@app.get("/layers")
async def layers(session: SearchSession = Depends(current_session)):
    return session.control.picker_groups()


@app.post("/ready")
async def ready(session: SearchSession = Depends(current_session)):
    session.host.fire("idle")
    await session.control.populate()
    return _with_commands(session, search=session.control.ui_payload())


@app.get("/suggestions")
async def suggestions(session: SearchSession = Depends(current_session)):
    return session.control.ui_payload()


@app.post("/layer")
async def change_layer(body: ApiLayerChange, session: SearchSession = Depends(current_session)):
    index = await session.control.switch_layer(body.displayName)
    return _with_commands(
        session, search=session.control.ui_payload(), stale=index is None
    )


@app.post("/selection")
async def selection(body: ApiSelection, session: SearchSession = Depends(current_session)):
    state = session.control.select(body.value, body.key)
    return _with_commands(session, phase=state.phase.value)


@app.post("/input")
async def input_changed(body: ApiInput, session: SearchSession = Depends(current_session)):
    state = session.control.input_changed(body.value)
    return _with_commands(session, phase=state.phase.value)


@app.post("/matches/dedup")
async def dedup(body: ApiDedupRequest, session: SearchSession = Depends(current_session)):
    rows = [c.model_dump(exclude_none=True) for c in body.candidates]
    return {"candidates": session.control.dedup(rows)}
