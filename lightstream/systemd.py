"""Taking over a listening socket passed by the service manager."""

from __future__ import annotations

import contextlib
import logging
import os
import socket

__all__ = ["bind_systemd", "SD_LISTEN_FDS_START"]

_log = logging.getLogger(__name__)

SD_LISTEN_FDS_START = 3

_ENV_NAMES = ("LISTEN_PID", "LISTEN_FDS", "LISTEN_FDNAMES")


def _listen_fds() -> int:
    """Count the sockets passed to this process and clear the variables that tell it."""
    try:
        pid_text = os.environ.get("LISTEN_PID")
        fds_text = os.environ.get("LISTEN_FDS")
        if pid_text is None or fds_text is None:
            return 0
        try:
            pid = int(pid_text)
            count = int(fds_text)
        except ValueError:
            _log.error("Invalid socket activation variables")
            return 0
        if pid <= 0 or pid != os.getpid() or count < 0:
            return 0
        for fd in range(SD_LISTEN_FDS_START, SD_LISTEN_FDS_START + count):
            try:
                os.set_inheritable(fd, False)
            except OSError as err:
                _log.error("Can't use passed socket fd=%d: %s", fd, err)
                return 0
        return count
    finally:
        for name in _ENV_NAMES:
            os.environ.pop(name, None)


def bind_systemd() -> socket.socket:
    """Return the first socket passed by the service manager, non-blocking.

    Any further passed sockets are closed. Raises RuntimeError when no
    socket was passed to this process.
    """
    count = _listen_fds()
    if count < 1:
        _log.error("No available systemd sockets")
        raise RuntimeError("No available systemd sockets")

    for fd in range(SD_LISTEN_FDS_START + 1, SD_LISTEN_FDS_START + count):
        with contextlib.suppress(OSError):
            os.close(fd)

    sock = socket.socket(fileno=SD_LISTEN_FDS_START)
    sock.setblocking(False)
    return sock