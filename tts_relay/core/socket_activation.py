"""
Listening socket selection.

Under systemd socket activation the supervisor passes an already bound
socket as file descriptor 3 and announces it through ``LISTEN_FDS``;
otherwise the server binds the configured host and port itself.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import structlog

from ..constants import SD_LISTEN_FDS_START
from .config import Settings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ListenTarget:
    """Where the HTTP server listens: an inherited fd or a host/port pair."""

    fd: Optional[int] = None
    host: Optional[str] = None
    port: Optional[int] = None

    @property
    def is_socket_activated(self) -> bool:
        return self.fd is not None

    def uvicorn_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``uvicorn.Config``."""
        if self.fd is not None:
            return {"fd": self.fd}
        return {"host": self.host, "port": self.port}

    def __str__(self) -> str:
        if self.fd is not None:
            return f"fd://{self.fd}"
        return f"{self.host}:{self.port}"


def resolve_listen_target(
    settings: Settings,
    environ: Optional[Mapping[str, str]] = None,
    pid: Optional[int] = None,
) -> ListenTarget:
    """
    Choose the listening socket for this process.

    Args:
        settings: Application settings providing the fallback host and port
        environ: Process environment (``os.environ`` by default)
        pid: Current process id (``os.getpid()`` by default)

    Returns:
        Inherited descriptor when socket activation applies to this process,
        the configured host and port otherwise
    """
    environ = os.environ if environ is None else environ
    fallback = ListenTarget(host=settings.API_HOST, port=settings.API_PORT)

    listen_fds = environ.get("LISTEN_FDS")
    if not listen_fds:
        return fallback

    try:
        fd_count = int(listen_fds)
    except ValueError:
        logger.warning("Ignoring malformed LISTEN_FDS", value=listen_fds)
        return fallback

    listen_pid = environ.get("LISTEN_PID")
    if listen_pid:
        current_pid = os.getpid() if pid is None else pid
        if listen_pid != str(current_pid):
            logger.warning(
                "LISTEN_PID targets another process, binding port instead",
                listen_pid=listen_pid,
                pid=current_pid,
            )
            return fallback

    if fd_count < 1:
        return fallback

    return ListenTarget(fd=SD_LISTEN_FDS_START)
