"""
TravelMemory Backend — HTTP Server Bootstrap
=============================================

What:  Binds the listening socket and runs the app under uvicorn.
How:   The socket is bound here, before uvicorn starts, so a port that is
       already taken surfaces as ServiceBindError instead of uvicorn's
       internal exit. Once uvicorn is accepting connections on that socket,
       "Server started at http://localhost:<port>" is logged.

States:
    starting  → app built, socket bound, lifespan running
    listening → accepting connections until the process is signalled
"""

import logging
import socket
from typing import List, Optional

import uvicorn

from travel_memory.config import Settings
from travel_memory.exceptions import ServiceBindError
from travel_memory.main import create_app

logger = logging.getLogger(__name__)


def bind_socket(host: str, port: int) -> socket.socket:
    """
    Bind a TCP socket for the HTTP listener.

    Raises:
        ServiceBindError: The address is in use, not local, or not permitted.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise ServiceBindError(host, port, e)
    sock.set_inheritable(True)
    return sock


class TravelMemoryServer(uvicorn.Server):
    """uvicorn.Server that announces the bound address once it is listening."""

    async def startup(self, sockets: Optional[List[socket.socket]] = None) -> None:
        await super().startup(sockets=sockets)
        if not self.started:
            return
        port = sockets[0].getsockname()[1] if sockets else self.config.port
        logger.info("Server started at http://localhost:%d", port)


def serve(settings: Settings) -> None:
    """Build the app, bind the configured port and serve until terminated."""
    app = create_app(settings)
    sock = bind_socket(settings.host, settings.port)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    TravelMemoryServer(config).run(sockets=[sock])
