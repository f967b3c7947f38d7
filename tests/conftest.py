"""Shared test fixtures for access-observer."""

from __future__ import annotations

import asyncio

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.testclient import TestClient
from starlette.requests import Request


class ServiceError(Exception):
    """Application error carrying the HTTP status it should produce."""

    def __init__(self, status_code: int, message: str = "Service Unavailable"):
        super().__init__(message)
        self.status_code = status_code


class Unavailable(Exception):
    """Error the app answers itself through an exception handler."""

    status_code = 503


async def render_service_error(request: Request, exc: Exception) -> JSONResponse:
    status = getattr(exc, "status_code", 500)
    return JSONResponse(status_code=status, content={"status": status})


@pytest.fixture()
def records():
    """Records emitted to a plain list sink."""
    return []


@pytest.fixture()
def sink(records):
    return records.append


@pytest.fixture()
def error_handler():
    return render_service_error


@pytest.fixture()
def make_app():
    """Build a FastAPI app with the given middleware entries."""

    def _make(*middleware) -> FastAPI:
        app = FastAPI(middleware=list(middleware))
        app.add_exception_handler(Unavailable, render_service_error)

        @app.get("/hello/world")
        async def hello() -> PlainTextResponse:
            return PlainTextResponse("Hello World!")

        @app.get("/retrieve")
        async def retrieve() -> PlainTextResponse:
            return PlainTextResponse("Hello GET!")

        @app.post("/submit")
        async def submit() -> PlainTextResponse:
            return PlainTextResponse("Hello POST!")

        @app.get("/slow")
        async def slow() -> PlainTextResponse:
            await asyncio.sleep(0.05)
            return PlainTextResponse("Hello World!")

        @app.get("/error")
        async def error() -> None:
            raise ServiceError(503)

        @app.post("/failure")
        async def failure() -> None:
            raise ServiceError(500, "Internal Server Error")

        @app.get("/slow-error")
        async def slow_error() -> None:
            await asyncio.sleep(0.05)
            raise ServiceError(503)

        @app.get("/http-error")
        async def http_error() -> None:
            raise HTTPException(status_code=503, detail="Service Unavailable")

        @app.get("/unavailable")
        async def unavailable() -> None:
            raise Unavailable()

        @app.get("/items")
        async def items(count: int) -> dict:
            return {"count": count}

        @app.get("/crash")
        async def crash() -> None:
            raise RuntimeError("boom")

        return app

    return _make


@pytest.fixture()
def make_client(make_app):
    """HTTP test client over an app built with the given middleware."""

    def _make(*middleware, raise_server_exceptions: bool = True) -> TestClient:
        return TestClient(
            make_app(*middleware), raise_server_exceptions=raise_server_exceptions
        )

    return _make


@pytest.fixture()
def make_request():
    """Starlette request over a minimal HTTP scope."""

    def _make(method: str = "GET", path: str = "/hello/world", query: bytes = b""):
        return Request(
            {
                "type": "http",
                "method": method,
                "path": path,
                "query_string": query,
                "headers": [],
            }
        )

    return _make
