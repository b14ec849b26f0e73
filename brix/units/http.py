"""HTTP unit.

``HttpUnit`` wraps a FastAPI application. Every request handled by the app
carries the owning unit in ``request.state.unit`` so route handlers can run
the unit's programs or reach its capabilities.

Optionally the unit exposes its own programs at ``POST /programs/{name}``:
the JSON body is the payload and the response is ``{"result": ...}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence

import uvicorn
from fastapi import Body, FastAPI, HTTPException, Request, Response

from ..errors import ProgramExecutionError, ProgramNotFoundError
from ..unit import Unit

HttpMiddleware = Callable[[Request, Callable[[Request], Awaitable[Response]]], Awaitable[Response]]


@dataclass(frozen=True)
class Route:
    """A route registered on the unit's app."""

    path: str
    method: str
    handler: Callable[..., Any]


class HttpUnit(Unit):
    """Unit that serves a FastAPI application."""

    def __init__(
        self,
        *,
        host: str = "127.0.0.1",
        port: int = 3000,
        routes: Sequence[Route] = (),
        middleware: Sequence[HttpMiddleware] = (),
        expose_programs: bool = False,
        **kwargs: Any,
    ) -> None:
        """
        Create an HTTP unit.

        Args:
            host: Interface ``serve`` binds to.
            port: Port ``serve`` listens on.
            routes: Routes added to the app in order.
            middleware: ``async (request, call_next)`` HTTP middleware, applied
                in order (the first entry runs outermost among them).
            expose_programs: Add ``POST /programs/{name}``.
            **kwargs: Forwarded to ``Unit``.
        """
        super().__init__(**kwargs)
        self.host = host
        self.port = port
        self.server: Optional[uvicorn.Server] = None
        self.app = FastAPI(title=self.name)

        for route in routes:
            self.app.add_api_route(route.path, route.handler, methods=[route.method.upper()])

        if expose_programs:
            self.app.add_api_route("/programs/{name}", self._run_program, methods=["POST"])

        # the most recently added middleware runs outermost
        for mw in reversed(list(middleware)):
            self.app.middleware("http")(mw)
        self.app.middleware("http")(self._attach_unit)

    async def _attach_unit(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request.state.unit = self
        return await call_next(request)

    async def _run_program(self, name: str, payload: Any = Body(default=None)) -> dict:
        try:
            result = await self.run(name, payload)
        except ProgramNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except ProgramExecutionError as e:
            self.log.error(f"Program {name} failed over HTTP: {e}")
            raise HTTPException(status_code=500, detail=str(e)) from e
        return {"result": result}

    async def serve(self, **config: Any) -> None:
        """Serve the app with uvicorn until shutdown."""
        cfg = uvicorn.Config(self.app, host=self.host, port=self.port, **config)
        self.server = uvicorn.Server(cfg)
        self.log.info(f"HTTP Unit listening on {self.host}:{self.port}")
        await self.server.serve()

    def shutdown(self) -> None:
        """Ask a running server to exit."""
        if self.server is not None:
            self.server.should_exit = True
