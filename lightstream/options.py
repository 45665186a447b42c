"""Command-line options of the streamer."""

from __future__ import annotations

import enum
import logging
import os
import re
import string
import sys
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field

from .helptext import render_features, render_help

__all__ = [
    "OptionsError",
    "ControlMode",
    "Control",
    "SinkOptions",
    "Options",
    "parse_resolution",
    "check_instance_id",
    "parse_options",
    "main",
    "VERSION",
    "FORMATS",
    "STANDARDS",
    "IO_METHODS",
    "ENCODER_TYPES",
    "CONTROL_NAMES",
]

_log = logging.getLogger(__name__)

VERSION = "1.0.0"

VIDEO_MIN_WIDTH = 1
VIDEO_MAX_WIDTH = 10240
VIDEO_MIN_HEIGHT = 1
VIDEO_MAX_HEIGHT = 4320
VIDEO_MAX_FPS = 120

FORMATS = ("YUYV", "UYVY", "RGB565", "RGB24", "MJPEG", "JPEG")
STANDARDS = ("PAL", "NTSC", "SECAM")
IO_METHODS = ("MMAP", "USERPTR")
ENCODER_TYPES = ("CPU", "HW", "M2M-VIDEO", "M2M-IMAGE", "NOOP")

LOG_LEVEL_INFO = 0
LOG_LEVEL_PERF = 1
LOG_LEVEL_VERBOSE = 2
LOG_LEVEL_DEBUG = 3

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1
_UINT_MOD = 2**32

# Image controls; the ones marked True also accept "auto".
_CONTROLS = (
    ("brightness", True),
    ("contrast", False),
    ("saturation", False),
    ("hue", True),
    ("gamma", False),
    ("sharpness", False),
    ("backlight_compensation", False),
    ("white_balance", True),
    ("gain", True),
    ("color_effect", False),
    ("rotate", False),
    ("flip_vertical", False),
    ("flip_horizontal", False),
)
CONTROL_NAMES = tuple(name for name, _ in _CONTROLS)


class OptionsError(ValueError):
    """An invalid command line."""


class ControlMode(enum.Enum):
    """How an image control of the device is to be set."""

    NONE = "none"
    DEFAULT = "default"
    AUTO = "auto"
    VALUE = "value"


@dataclass
class Control:
    """One image control: its mode and, for VALUE, the value."""

    mode: ControlMode = ControlMode.NONE
    value: int = 0


@dataclass
class SinkOptions:
    """Settings of one shared-memory sink."""

    name: str | None = None
    mode: int = 0o660
    rm: bool = False
    client_ttl: int = 10
    timeout: int = 1

    @property
    def enabled(self) -> bool:
        """Whether the sink is to be created: it has a non-empty name."""
        return bool(self.name)


def _default_cores() -> int:
    return max(1, min(os.cpu_count() or 1, 4))


@dataclass
class Options:
    """Everything the command line configures."""

    # Capturing
    device: str = "/dev/video0"
    input: int = 0
    width: int = 640
    height: int = 480
    format: str = "YUYV"
    standard: str | None = None
    io_method: str = "MMAP"
    desired_fps: int = 0
    min_frame_size: int = 128
    persistent: bool = False
    dv_timings: bool = False
    n_bufs: int = field(default_factory=lambda: _default_cores() + 1)
    n_workers: int = field(default_factory=_default_cores)
    quality: int = 80
    encoder: str = "CPU"
    blank: str | None = None
    last_as_blank: int = -1
    slowdown: bool = False
    device_timeout: int = 1
    error_delay: int = 1
    m2m_device: str | None = None
    controls: dict[str, Control] = field(
        default_factory=lambda: {name: Control() for name in CONTROL_NAMES}
    )

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 8080
    unix_path: str | None = None
    unix_rm: bool = False
    unix_mode: int = 0
    systemd: bool = False
    user: str | None = None
    passwd: str | None = None
    static_path: str | None = None
    drop_same_frames: int = 0
    fake_width: int = 0
    fake_height: int = 0
    allow_origin: str | None = None
    instance_id: str = ""
    tcp_nodelay: bool = False
    server_timeout: int = 10

    # Sinks
    sink: SinkOptions = field(default_factory=SinkOptions)
    raw_sink: SinkOptions = field(default_factory=SinkOptions)
    h264_sink: SinkOptions = field(default_factory=SinkOptions)
    h264_bitrate: int = 5000
    h264_gop: int = 30
    h264_m2m_device: str | None = None

    # Process
    exit_on_no_clients: int = 0
    notify_parent: bool = False

    # Logging
    log_level: int = LOG_LEVEL_INFO
    log_colored: bool | None = None

    # An informational request that stopped parsing: help, version or features
    action: str | None = None

    version: str = VERSION

    @property
    def formats(self) -> str:
        return ", ".join(FORMATS)

    @property
    def standards(self) -> str:
        return ", ".join(STANDARDS)

    @property
    def io_methods(self) -> str:
        return ", ".join(IO_METHODS)


class _ResolutionError(ValueError):
    def __init__(self, part: str) -> None:
        super().__init__(f"Invalid resolution {part}")
        self.part = part


_RESOLUTION_RE = re.compile(r"\s*([+-]?\d+)x\s*([+-]?\d+)")


def parse_resolution(text: str, limited: bool = True) -> tuple[int, int]:
    """Parse ``WxH`` into a width and a height.

    With ``limited`` both must lie within the supported video limits.
    Raises ValueError for a malformed text or a value out of range.
    """
    match = _RESOLUTION_RE.match(text)
    if match is None:
        raise _ResolutionError("format")
    width, height = (int(group) % _UINT_MOD for group in match.groups())
    if limited:
        if not VIDEO_MIN_WIDTH <= width <= VIDEO_MAX_WIDTH:
            raise _ResolutionError("width")
        if not VIDEO_MIN_HEIGHT <= height <= VIDEO_MAX_HEIGHT:
            raise _ResolutionError("height")
    return width, height


_INSTANCE_ID_EXTRA = frozenset("./+_-")


def check_instance_id(text: str) -> bool:
    """Tell whether ``text`` holds only ASCII letters, digits and ``./+_-``."""
    return all(
        ch.isascii() and (ch.isalnum() or ch in _INSTANCE_ID_EXTRA) for ch in text
    )


_DIGITS = string.digits + string.ascii_lowercase


def _to_int(text: str, base: int) -> int:
    """Convert like strtoll: leading blanks, a sign, base prefixes; nothing after."""
    body = text.lstrip(" \t\n\r\v\f")
    sign = 1
    if body[:1] in ("+", "-"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    lowered = body.lower()
    if base in (0, 16) and lowered.startswith("0x") and len(lowered) > 2:
        base = 16
        lowered = lowered[2:]
    elif base == 0:
        if lowered.startswith("0") and len(lowered) > 1:
            base = 8
            lowered = lowered[1:]
        else:
            base = 10
    allowed = _DIGITS[:base]
    if not lowered or any(ch not in allowed for ch in lowered):
        raise ValueError(f"Not a number: {text!r}")
    return sign * int(lowered, base)


def _number(name: str, value: str, low: int, high: int, base: int = 0) -> int:
    try:
        number = _to_int(value, base)
    except ValueError:
        number = None
    if number is None or not low <= number <= high:
        raise OptionsError(f"Invalid value for '{name}={value}': min={low}, max={high}")
    return number


def _choice(what: str, value: str, available: Sequence[str]) -> str:
    wanted = value.upper()
    if wanted not in available:
        raise OptionsError(f"Unknown {what}: {value}; available: {', '.join(available)}")
    return wanted


def _resolution(name: str, value: str, limited: bool) -> tuple[int, int]:
    try:
        return parse_resolution(value, limited)
    except _ResolutionError as err:
        if err.part == "width":
            raise OptionsError(
                f"Invalid width of '{name}={value}': "
                f"min={VIDEO_MIN_WIDTH}, max={VIDEO_MAX_WIDTH}"
            ) from None
        if err.part == "height":
            raise OptionsError(
                f"Invalid height of '{name}={value}': "
                f"min={VIDEO_MIN_HEIGHT}, max={VIDEO_MAX_HEIGHT}"
            ) from None
        raise OptionsError(f"Invalid resolution format for '{name}={value}'") from None


_Handler = Callable[[Options, "str | None"], None]


@dataclass(frozen=True)
class _Spec:
    long: str
    short: str | None
    has_arg: bool
    handle: _Handler


def _flag(attr: str, value: object) -> _Handler:
    return lambda opts, _: setattr(opts, attr, value)


def _text(attr: str) -> _Handler:
    return lambda opts, value: setattr(opts, attr, value)


def _num(attr: str, name: str, low: int, high: int, base: int = 0) -> _Handler:
    return lambda opts, value: setattr(opts, attr, _number(name, value, low, high, base))


def _pick(attr: str, what: str, available: Sequence[str]) -> _Handler:
    return lambda opts, value: setattr(opts, attr, _choice(what, value, available))


def _set_resolution(opts: Options, value: str) -> None:
    opts.width, opts.height = _resolution("--resolution", value, True)


def _set_fake_resolution(opts: Options, value: str) -> None:
    opts.fake_width, opts.fake_height = _resolution("--fake-resolution", value, False)


def _set_instance_id(opts: Options, value: str) -> None:
    if not check_instance_id(value):
        raise OptionsError("Invalid instance ID, it should be like: ^[a-zA-Z0-9\\./+_-]*$")
    opts.instance_id = value


def _image_default(opts: Options, _: str | None) -> None:
    for control in opts.controls.values():
        control.mode = ControlMode.DEFAULT


def _control(name: str, allow_auto: bool) -> _Handler:
    def handle(opts: Options, value: str) -> None:
        control = opts.controls[name]
        if value.lower() == "default":
            control.mode = ControlMode.DEFAULT
        elif allow_auto and value.lower() == "auto":
            control.mode = ControlMode.AUTO
        else:
            control.mode = ControlMode.VALUE
            control.value = _number(f"--{name}", value, _INT_MIN, _INT_MAX)
    return handle


def _sink_field(sink: str, attr: str, convert: Callable[[str | None], object]) -> _Handler:
    return lambda opts, value: setattr(getattr(opts, sink), attr, convert(value))


def _sink_specs(prefix: str, sink: str) -> list[_Spec]:
    opt = f"{prefix}sink"
    return [
        _Spec(opt, None, True, _sink_field(sink, "name", lambda v: v)),
        _Spec(f"{opt}-mode", None, True, _sink_field(
            sink, "mode", lambda v: _number(f"--{opt}-mode", v, _INT_MIN, _INT_MAX, 8))),
        _Spec(f"{opt}-rm", None, False, _sink_field(sink, "rm", lambda _: True)),
        _Spec(f"{opt}-client-ttl", None, True, _sink_field(
            sink, "client_ttl", lambda v: _number(f"--{opt}-client-ttl", v, 1, 60))),
        _Spec(f"{opt}-timeout", None, True, _sink_field(
            sink, "timeout", lambda v: _number(f"--{opt}-timeout", v, 1, 60))),
    ]


def _action(name: str) -> _Handler:
    return _flag("action", name)


def _ignore(opts: Options, value: str | None) -> None:
    """A deprecated option that is still accepted."""


_SPECS: list[_Spec] = [
    _Spec("device", "d", True, _text("device")),
    _Spec("input", "i", True, _num("input", "--input", 0, 128)),
    _Spec("resolution", "r", True, _set_resolution),
    _Spec("format", "m", True, _pick("format", "pixel format", FORMATS)),
    _Spec("tv-standard", "a", True, _pick("standard", "TV standard", STANDARDS)),
    _Spec("io-method", "I", True, _pick("io_method", "IO method", IO_METHODS)),
    _Spec("desired-fps", "f", True, _num("desired_fps", "--desired-fps", 0, VIDEO_MAX_FPS)),
    _Spec("min-frame-size", "z", True, _num("min_frame_size", "--min-frame-size", 1, 8192)),
    _Spec("persistent", "n", False, _flag("persistent", True)),
    _Spec("dv-timings", "t", False, _flag("dv_timings", True)),
    _Spec("buffers", "b", True, _num("n_bufs", "--buffers", 1, 32)),
    _Spec("workers", "w", True, _num("n_workers", "--workers", 1, 32)),
    _Spec("quality", "q", True, _num("quality", "--quality", 1, 100)),
    _Spec("encoder", "c", True, _pick("encoder", "encoder type", ENCODER_TYPES)),
    _Spec("glitched-resolutions", "g", True, _ignore),
    _Spec("blank", "k", True, _text("blank")),
    _Spec("last-as-blank", "K", True, _num("last_as_blank", "--last-as-blank", 0, 86400)),
    _Spec("slowdown", "l", False, _flag("slowdown", True)),
    _Spec("device-timeout", None, True, _num("device_timeout", "--device-timeout", 1, 60)),
    _Spec("device-error-delay", None, True,
          _num("error_delay", "--device-error-delay", 1, 60)),
    _Spec("m2m-device", None, True, _text("m2m_device")),
    _Spec("image-default", None, False, _image_default),
    *(_Spec(name.replace("_", "-"), None, True, _control(name, auto)) for name, auto in _CONTROLS),
    _Spec("host", "s", True, _text("host")),
    _Spec("port", "p", True, _num("port", "--port", 1, 65535)),
    _Spec("unix", "U", True, _text("unix_path")),
    _Spec("unix-rm", "D", False, _flag("unix_rm", True)),
    _Spec("unix-mode", "M", True, _num("unix_mode", "--unix-mode", _INT_MIN, _INT_MAX, 8)),
    _Spec("systemd", "S", False, _flag("systemd", True)),
    _Spec("user", None, True, _text("user")),
    _Spec("passwd", None, True, _text("passwd")),
    _Spec("static", None, True, _text("static_path")),
    _Spec("drop-same-frames", "e", True,
          _num("drop_same_frames", "--drop-same-frames", 0, VIDEO_MAX_FPS)),
    _Spec("allow-origin", None, True, _text("allow_origin")),
    _Spec("instance-id", None, True, _set_instance_id),
    _Spec("fake-resolution", "R", True, _set_fake_resolution),
    _Spec("tcp-nodelay", None, False, _flag("tcp_nodelay", True)),
    _Spec("server-timeout", None, True, _num("server_timeout", "--server-timeout", 1, 60)),
    *_sink_specs("", "sink"),
    *_sink_specs("raw-", "raw_sink"),
    *_sink_specs("h264-", "h264_sink"),
    _Spec("h264-bitrate", None, True, _num("h264_bitrate", "--h264-bitrate", 25, 20000)),
    _Spec("h264-gop", None, True, _num("h264_gop", "--h264-gop", 0, 60)),
    _Spec("h264-m2m-device", None, True, _text("h264_m2m_device")),
    _Spec("exit-on-no-clients", None, True,
          _num("exit_on_no_clients", "--exit-on-no-clients", 0, 86400)),
    _Spec("notify-parent", None, False, _flag("notify_parent", True)),
    _Spec("log-level", None, True,
          _num("log_level", "--log-level", LOG_LEVEL_INFO, LOG_LEVEL_DEBUG)),
    _Spec("perf", None, False, _flag("log_level", LOG_LEVEL_PERF)),
    _Spec("verbose", None, False, _flag("log_level", LOG_LEVEL_VERBOSE)),
    _Spec("debug", None, False, _flag("log_level", LOG_LEVEL_DEBUG)),
    _Spec("force-log-colors", None, False, _flag("log_colored", True)),
    _Spec("no-log-colors", None, False, _flag("log_colored", False)),
    _Spec("help", "h", False, _action("help")),
    _Spec("version", "v", False, _action("version")),
    _Spec("features", None, False, _action("features")),
]

_LONG = {spec.long: spec for spec in _SPECS}
_SHORT = {spec.short: spec for spec in _SPECS if spec.short}


def _find_long(name: str) -> _Spec:
    spec = _LONG.get(name)
    if spec is not None:
        return spec
    matches = [spec for long, spec in _LONG.items() if long.startswith(name)]
    if not matches:
        raise OptionsError(f"unrecognized option '--{name}'")
    if len(matches) > 1:
        raise OptionsError(f"option '--{name}' is ambiguous")
    return matches[0]


def _getopt(argv: Sequence[str]) -> Iterator[tuple[_Spec, str | None]]:
    """Yield each option with its argument in command-line order.

    Long options may be abbreviated to a unique prefix; short options
    may be clustered. Other arguments are skipped; ``--`` ends the options.
    """
    args = iter(argv)
    for arg in args:
        if arg == "--":
            return
        if arg.startswith("--"):
            name, eq, value = arg[2:].partition("=")
            spec = _find_long(name)
            if spec.has_arg:
                if not eq:
                    value = next(args, None)
                    if value is None:
                        raise OptionsError(f"option '--{spec.long}' requires an argument")
                yield spec, value
            else:
                if eq:
                    raise OptionsError(f"option '--{spec.long}' doesn't allow an argument")
                yield spec, None
        elif arg.startswith("-") and len(arg) > 1:
            rest = arg[1:]
            while rest:
                letter, rest = rest[0], rest[1:]
                spec = _SHORT.get(letter)
                if spec is None:
                    raise OptionsError(f"invalid option -- '{letter}'")
                if not spec.has_arg:
                    yield spec, None
                    continue
                value = rest or next(args, None)
                if value is None:
                    raise OptionsError(f"option requires an argument -- '{letter}'")
                yield spec, value
                break


def parse_options(argv: Sequence[str]) -> Options:
    """Parse command-line arguments (without the program name) into Options.

    Parsing stops at ``--help``, ``--version`` or ``--features``, which is
    then recorded in ``action``. Raises OptionsError for an invalid option.
    """
    options = Options()
    for spec, value in _getopt(argv):
        spec.handle(options, value)
        if options.action is not None:
            break
    return options


_LOG_LEVELS = {
    LOG_LEVEL_INFO: logging.INFO,
    LOG_LEVEL_PERF: logging.DEBUG,
    LOG_LEVEL_VERBOSE: logging.DEBUG,
    LOG_LEVEL_DEBUG: logging.DEBUG,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command: parse options, answer help, version and features requests."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        options = parse_options(argv)
    except OptionsError as err:
        print(err)
        return 1

    if options.action == "help":
        print(render_help(options), end="")
        return 0
    if options.action == "version":
        print(options.version)
        return 0
    if options.action == "features":
        print(render_features(), end="")
        return 0

    logging.basicConfig(
        level=_LOG_LEVELS[options.log_level],
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    _log.info("Starting lightstream %s ...", options.version)
    return 0