import logging
import os
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
import uvicorn

from colorControl import rgb_to_hex
from commandParser import parse_command
from cubeConfig import CubeConfig
from cubeErrors import AuthError, ParseError
from frameRenderer import FrameRenderer
from integrator import Integrator, is_quiet
from matrixOutput import open_output
from renderLoop import RenderLoop
from stateStore import StateStore

logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT = 2.0


def configure_logging(level=None):
    level = level or os.environ.get("CUBE_LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def check_token(expected, supplied):
    if supplied != expected:
        raise AuthError()


def process_update(store: StateStore, expected_token, supplied_token, raw):
    """Authenticate, parse and apply one update. Returns (status, text)."""
    try:
        check_token(expected_token, supplied_token)
        cmd = parse_command(raw)
    except AuthError as e:
        logger.warning("API: rejected update (%s)", e.reason)
        return 401, e.reason
    except ParseError as e:
        logger.warning("API: rejected update (%s)", e)
        return 400, e.reason

    result = store.apply(cmd)
    if not result.accepted:
        return 400, result.reason
    return 200, "OK"


def create_app(config: CubeConfig = None, store: StateStore = None, output=None,
               renderer=None, clock=time.monotonic) -> FastAPI:
    config = config or CubeConfig.from_env()
    store = store or StateStore(clock=clock, boot_age=config.boot_age)
    renderer = renderer or FrameRenderer(
        config.width,
        config.height,
        config.segments,
        gray_start=config.gray_start,
        gray_end=config.gray_end,
    )
    render_loop = RenderLoop(store, Integrator(config), renderer, output, config, clock=clock)
    started = clock()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("INIT: Starting Matrix Controller")
        if render_loop.output is None:
            # DisplayInitError propagates and aborts startup
            render_loop.output = open_output(config)
        render_loop.start()
        logger.info("API: Listening on port %d", config.port)
        try:
            yield
        finally:
            logger.info("EXIT: Shutting down")
            if render_loop.stop(timeout=SHUTDOWN_TIMEOUT):
                render_loop.output.clear()
            else:
                # the render thread still owns the display
                logger.error("EXIT: render thread did not stop, leaving display as is")

    app = FastAPI(title="LED Cube Controller", lifespan=lifespan)
    app.state.config = config
    app.state.store = store
    app.state.render_loop = render_loop

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["X-API-Token", "Content-Type"],
    )

    @app.post("/update", response_class=PlainTextResponse)
    async def update(request: Request):
        raw = await request.body()
        status, text = await run_in_threadpool(
            process_update,
            store,
            config.api_token,
            request.headers.get("X-API-Token"),
            raw,
        )
        return PlainTextResponse(text, status_code=status)

    @app.get("/status")
    def status():
        target = store.snapshot()
        tick = render_loop.last_tick
        live = tick.live if tick is not None else render_loop.integrator.live
        age = clock() - target.updated_at
        body = live.status_fields()
        body.update(
            {
                "age": age,
                "quiet": is_quiet(age, config.blank_interval),
                "elementColor": rgb_to_hex(live.element_color),
                "backgroundColor": rgb_to_hex(live.background_color),
            }
        )
        return body

    @app.get("/config")
    def get_config():
        return config.public_dict()

    @app.get("/health")
    def health():
        return {"ok": True, "uptime": int(clock() - started)}

    return app


def run():
    """Console entry point.

    The app is built here rather than at import so that a bad ``CUBE_*``
    value fails at startup, not on ``import main``. Under a plain uvicorn
    command line use ``uvicorn main:create_app --factory``.
    """
    configure_logging()
    app = create_app()
    uvicorn.run(app, host=app.state.config.host, port=app.state.config.port)


if __name__ == "__main__":
    run()
