"""FastAPI transport for the SQL gateway."""

from __future__ import annotations

import argparse
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sqlgate.core.config import Settings, load_settings
from sqlgate.core.dependencies import GatewayDependencies, build_dependencies
from sqlgate.core.envelope import ResponseEnvelope, build_liveness_envelope


LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/dev.yaml"


def _envelope_response(envelope: ResponseEnvelope) -> JSONResponse:
    return JSONResponse(envelope.to_dict(), status_code=envelope.status_code)


def create_app(
    config_path: str = DEFAULT_CONFIG_PATH,
    *,
    settings: Settings | None = None,
    dependencies: GatewayDependencies | None = None,
) -> FastAPI:
    if settings is None:
        LOGGER.info("Initialising gateway with config '%s'", config_path)
        settings = load_settings(config_path)
    if dependencies is None:
        dependencies = build_dependencies(settings)
    gateway = dependencies.build_gateway(verbose_errors=settings.verbose_errors)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            dependencies.close()

    app = FastAPI(title="SQL Gateway", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.server.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.dependencies = dependencies
    app.state.gateway = gateway

    @app.post("/query")
    async def query(request: Request) -> JSONResponse:
        body = await request.body()
        envelope = await run_in_threadpool(gateway.handle, body)
        return _envelope_response(envelope)

    @app.get("/ping")
    def ping() -> JSONResponse:
        return _envelope_response(build_liveness_envelope())

    return app


def _configure_logging(debug: bool) -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        if debug:
            root_logger.setLevel(logging.DEBUG)
        return
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


def _resolve_bind(args: argparse.Namespace, settings: Settings) -> tuple[str, int]:
    """Command-line values win over the config file, even when falsy (port 0)."""

    host = args.host if args.host is not None else settings.server.host
    port = args.port if args.port is not None else settings.server.port
    return host, port


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the SQL gateway over HTTP")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to configuration file")
    parser.add_argument("--host", default=None, help="Interface to bind the server")
    parser.add_argument("--port", type=int, default=None, help="Port to bind the server")
    parser.add_argument("--debug", action="store_true", help="Log each statement at DEBUG level")
    args = parser.parse_args()

    _configure_logging(debug=args.debug)
    settings = load_settings(args.config)
    app = create_app(args.config, settings=settings)

    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise SystemExit("uvicorn must be installed to run the gateway") from exc

    host, port = _resolve_bind(args, settings)
    LOGGER.info("Listening on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
