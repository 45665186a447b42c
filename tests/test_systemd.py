import contextlib
import os
import socket

import pytest

from lightstream.systemd import SD_LISTEN_FDS_START, bind_systemd


@contextlib.contextmanager
def _on_fd3(sock):
    try:
        saved = os.dup(SD_LISTEN_FDS_START)
    except OSError:
        saved = None
    os.dup2(sock.fileno(), SD_LISTEN_FDS_START)
    try:
        yield
    finally:
        if saved is not None:
            os.dup2(saved, SD_LISTEN_FDS_START)
            os.close(saved)
        else:
            with contextlib.suppress(OSError):
                os.close(SD_LISTEN_FDS_START)


def test_no_environment_raises(monkeypatch):
    monkeypatch.delenv("LISTEN_PID", raising=False)
    monkeypatch.delenv("LISTEN_FDS", raising=False)
    with pytest.raises(RuntimeError):
        bind_systemd()


def test_other_pid_raises_and_clears_environment(monkeypatch):
    monkeypatch.setenv("LISTEN_PID", str(os.getpid() + 1))
    monkeypatch.setenv("LISTEN_FDS", "1")
    with pytest.raises(RuntimeError):
        bind_systemd()
    assert "LISTEN_PID" not in os.environ
    assert "LISTEN_FDS" not in os.environ


def test_zero_sockets_raises(monkeypatch):
    monkeypatch.setenv("LISTEN_PID", str(os.getpid()))
    monkeypatch.setenv("LISTEN_FDS", "0")
    with pytest.raises(RuntimeError):
        bind_systemd()


def test_garbage_count_raises(monkeypatch):
    monkeypatch.setenv("LISTEN_PID", str(os.getpid()))
    monkeypatch.setenv("LISTEN_FDS", "many")
    with pytest.raises(RuntimeError):
        bind_systemd()
    assert "LISTEN_FDS" not in os.environ


def test_takes_over_passed_socket(monkeypatch):
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        listener.bind(("127.0.0.1", 0))
        listener.listen(1)
        expected = listener.getsockname()
        monkeypatch.setenv("LISTEN_PID", str(os.getpid()))
        monkeypatch.setenv("LISTEN_FDS", "1")
        with _on_fd3(listener):
            sock = bind_systemd()
            try:
                name = sock.getsockname()
                timeout = sock.gettimeout()
                family = sock.family
                fileno = sock.fileno()
            finally:
                sock.detach()
        assert name == expected
        assert timeout == 0.0
        assert family == socket.AF_INET
        assert fileno == SD_LISTEN_FDS_START
        assert "LISTEN_PID" not in os.environ
    finally:
        listener.close()