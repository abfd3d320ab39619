"""REST API exposing a remote command session to host integrations.

Each session property can be read and written by name; writes go through
the same setters as in-process callers, so every write produces the
command lines described in ``uirobot.session.driver``.

    GET  /health               -> {"status": "ok", "connected": true, ...}
    GET  /properties           -> [{"name": "power", "type": "bool", ...}, ...]
    GET  /properties/{name}    -> {"name": "program", "value": "..."}
    PUT  /properties/{name}    <- {"value": "control+s"}
    POST /callables/{name}     <- {"args": [10, -5]}
    POST /mouse/move           <- {"x": 10, "y": -5}
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from uirobot.config.settings import RobotConfig, SessionConfig
from uirobot.session.driver import RemoteCommandSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class PropertyWriteRequest(BaseModel):
    value: Any = Field(description="New property value")


class CallableRequest(BaseModel):
    args: list[Any] = Field(default_factory=list, description="Positional arguments")


class MouseMoveRequest(BaseModel):
    x: int = Field(description="Horizontal distance in pixels")
    y: int = Field(description="Vertical distance in pixels")


class PropertyValue(BaseModel):
    name: str
    value: Any


class PropertyInfo(BaseModel):
    name: str
    description: str
    type: str
    read_only: bool
    value: Any


class HealthResponse(BaseModel):
    status: str = "ok"
    peer: str = ""
    connected: bool = False
    power: bool = False


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def _build_session(robot: RobotConfig, session_config: SessionConfig) -> RemoteCommandSession:
    from uirobot.transport.tcp import TcpLineTransport

    transport = TcpLineTransport(
        host=robot.host,
        port=robot.port,
        max_line_length=robot.max_line_length,
        reconnect_interval=robot.reconnect_interval,
    )
    if robot.mac_address:
        transport.enable_wake_on_lan(robot.mac_address, robot.broadcast_address)
    return RemoteCommandSession(
        transport,
        power_down_program=session_config.power_down_program,
        key_release_delay=session_config.key_release_delay,
    )


def create_app(
    robot: RobotConfig | None = None,
    session_config: SessionConfig | None = None,
    session: RemoteCommandSession | None = None,
    auto_connect: bool = True,
) -> FastAPI:
    """Create the session REST API application.

    Args:
        robot: Connection settings for the UIRobot agent.
        session_config: Key release delay and shutdown program.
        session: Optional pre-built session (for testing).
        auto_connect: Whether to start connecting when the app starts.
    """
    robot = robot or RobotConfig()
    session_config = session_config or SessionConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        s: RemoteCommandSession | None = app.state.session
        if s is None:
            s = _build_session(robot, session_config)
            app.state.session = s

        connect = getattr(s.transport, "auto_connect", None)
        if auto_connect and connect is not None:
            connect()
            logger.info("Session API started (peer=%s)", s.transport.peer)

        yield

        s.close()
        await s.transport.disconnect()
        logger.info("Session API stopped")

    app = FastAPI(
        title="uirobot",
        description="Remote command session for the UIRobot agent",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.session = session

    def _session() -> RemoteCommandSession:
        s = app.state.session
        if s is None:
            raise HTTPException(status_code=503, detail="Session not initialized")
        return s

    @app.get("/health")
    async def health_check() -> HealthResponse:
        s = app.state.session
        if s is None:
            return HealthResponse(status="starting")
        return HealthResponse(
            status="ok",
            peer=s.transport.peer,
            connected=s.transport.connected,
            power=s.power,
        )

    @app.get("/properties")
    async def list_properties() -> list[PropertyInfo]:
        return [PropertyInfo(**info) for info in _session().properties.describe()]

    @app.get("/properties/{name}")
    async def read_property(name: str) -> PropertyValue:
        s = _session()
        try:
            return PropertyValue(name=name, value=s.properties.get(name))
        except KeyError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

    @app.put("/properties/{name}")
    async def write_property(name: str, request: PropertyWriteRequest) -> PropertyValue:
        s = _session()
        try:
            s.properties.set(name, request.value)
            return PropertyValue(name=name, value=s.properties.get(name))
        except KeyError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    @app.post("/callables/{name}")
    async def invoke_callable(name: str, request: CallableRequest) -> dict[str, str]:
        s = _session()
        try:
            s.properties.call(name, *request.args)
        except KeyError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return {"status": "ok", "callable": name}

    @app.post("/mouse/move")
    async def mouse_move(request: MouseMoveRequest) -> dict[str, str]:
        _session().move_mouse(request.x, request.y)
        return {"status": "ok", "x": str(request.x), "y": str(request.y)}

    return app


# ---------------------------------------------------------------------------
# Standalone entry point
# ---------------------------------------------------------------------------

def main(host: str = "0.0.0.0", port: int = 8080, robot_host: str = "127.0.0.1") -> None:
    """Run the session API server."""
    app = create_app(robot=RobotConfig(host=robot_host))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
