"""The usage text and the feature list of the streamer command."""

from __future__ import annotations

from typing import Protocol

__all__ = ["render_help", "render_features", "FEATURES"]

# Optional features and whether this build has them.
FEATURES = (
    ("WITH_GPIO", False),
    ("WITH_SYSTEMD", True),
    ("WITH_PTHREAD_NP", False),
    ("WITH_SETPROCTITLE", False),
    ("HAS_PDEATHSIG", False),
)


class _HelpOptions(Protocol):
    version: str
    device: str
    input: int
    width: int
    height: int
    formats: str
    standards: str
    io_methods: str
    min_frame_size: int
    n_bufs: int
    n_workers: int
    quality: int
    device_timeout: int
    error_delay: int
    host: str
    port: int
    server_timeout: int
    h264_bitrate: int
    h264_gop: int
    log_level: int


def render_features() -> str:
    """Return the feature list, one ``+ NAME`` or ``- NAME`` line each."""
    return "".join(f"{'+' if enabled else '-'} {name}\n" for name, enabled in FEATURES)


def _sink_section(name: str, opt: str) -> list[str]:
    return [
        f"{name} sink options:",
        "══════════════════",
        f"    --{opt}sink <name>  ──────────── Use the shared memory to sink {name} frames. Default: disabled.\n",
        f"    --{opt}sink-mode <mode>  ─────── Set {name} sink permissions (like 777). Default: 660.\n",
        f"    --{opt}sink-rm  ──────────────── Remove shared memory on stop. Default: disabled.\n",
        f"    --{opt}sink-client-ttl <sec>  ── Client TTL. Default: 10.\n",
        f"    --{opt}sink-timeout <sec>  ───── Timeout for lock. Default: 1.\n",
    ]


def render_help(options: _HelpOptions) -> str:
    """Return the usage text, showing the defaults held by ``options``."""
    o = options
    pad = " " * 43
    lines = [
        "\nlightstream - Lightweight and fast MJPEG-HTTP streamer",
        "═══════════════════════════════════════════════════",
        f"Version: {o.version}\n",
        "Capturing options:",
        "══════════════════",
        f"    -d|--device </dev/path>  ───────────── Path to V4L2 device. Default: {o.device}.\n",
        f"    -i|--input <N>  ────────────────────── Input channel. Default: {o.input}.\n",
        f"    -r|--resolution <WxH>  ─────────────── Initial image resolution. Default: {o.width}x{o.height}.\n",
        "    -m|--format <fmt>  ─────────────────── Image format.",
        f"{pad}Available: {o.formats}; default: YUYV.\n",
        "    -a|--tv-standard <std>  ────────────── Force TV standard.",
        f"{pad}Available: {o.standards}; default: disabled.\n",
        "    -I|--io-method <method>  ───────────── Set V4L2 IO method (see kernel documentation).",
        f"{pad}Changing of this parameter may increase the performance. Or not.",
        f"{pad}Available: {o.io_methods}; default: MMAP.\n",
        "    -f|--desired-fps <N>  ──────────────── Desired FPS. Default: maximum possible.\n",
        "    -z|--min-frame-size <N>  ───────────── Drop frames smaller then this limit. Useful if the device",
        f"{pad}produces small-sized garbage frames. Default: {o.min_frame_size} bytes.\n",
        "    -n|--persistent  ───────────────────── Don't re-initialize device on timeout. Default: disabled.\n",
        "    -t|--dv-timings  ───────────────────── Enable DV-timings querying and events processing",
        f"{pad}to automatic resolution change. Default: disabled.\n",
        "    -b|--buffers <N>  ──────────────────── The number of buffers to receive data from the device.",
        f"{pad}Each buffer may processed using an independent thread.",
        f"{pad}Default: {o.n_bufs} (the number of CPU cores (but not more than 4) + 1).\n",
        "    -w|--workers <N>  ──────────────────── The number of worker threads but not more than buffers.",
        f"{pad}Default: {o.n_workers} (the number of CPU cores (but not more than 4)).\n",
        f"    -q|--quality <N>  ──────────────────── Set quality of JPEG encoding from 1 to 100 (best). Default: {o.quality}.",
        f"{pad}Note: If HW encoding is used (JPEG source format selected),",
        f"{pad}this parameter attempts to configure the camera",
        f"{pad}or capture device hardware's internal encoder.",
        f"{pad}It does not re-encode MJPEG to MJPEG to change the quality level",
        f"{pad}for sources that already output MJPEG.\n",
        "    -c|--encoder <type>  ───────────────── Use specified encoder. It may affect the number of workers.",
        f"{pad}Available:",
        f"{pad}  * CPU  ──────── Software MJPEG encoding (default);",
        f"{pad}  * HW  ───────── Use pre-encoded MJPEG frames directly from camera hardware;",
        f"{pad}  * M2M-VIDEO  ── GPU-accelerated MJPEG encoding using V4L2 M2M video interface;",
        f"{pad}  * M2M-IMAGE  ── GPU-accelerated JPEG encoding using V4L2 M2M image interface;",
        f"{pad}  * NOOP  ─────── Don't compress MJPEG stream (do nothing).\n",
        "    -g|--glitched-resolutions <WxH,...>  ─ It doesn't do anything. Still here for compatibility.\n",
        "    -k|--blank <path>  ─────────────────── Path to JPEG file that will be shown when the device is disconnected",
        f"{pad}during the streaming. Default: black screen 640x480 with 'NO SIGNAL'.\n",
        "    -K|--last-as-blank <sec>  ──────────── Show the last frame received from the camera after it was disconnected,",
        f"{pad}but no more than specified time (or endlessly if 0 is specified).",
        f"{pad}If the device has not yet been online, display 'NO SIGNAL' or the image",
        f"{pad}specified by option --blank. Default: disabled.",
        f"{pad}Note: currently this option has no effect on memory sinks.\n",
        "    -l|--slowdown  ─────────────────────── Slowdown capturing to 1 FPS or less when no stream or sink clients",
        f"{pad}are connected. Useful to reduce CPU consumption. Default: disabled.\n",
        f"    --device-timeout <sec>  ────────────── Timeout for device querying. Default: {o.device_timeout}.\n",
        "    --device-error-delay <sec>  ────────── Delay before trying to connect to the device again",
        f"{pad}after an error (timeout for example). Default: {o.error_delay}.\n",
        "    --m2m-device </dev/path>  ──────────── Path to V4L2 M2M encoder device. Default: auto select.\n",
        "Image control options:",
        "══════════════════════",
        "    --image-default  ────────────────────── Reset all image settings below to default. Default: no change.\n",
        "    --brightness <N|auto|default>  ──────── Set brightness. Default: no change.\n",
        "    --contrast <N|default>  ─────────────── Set contrast. Default: no change.\n",
        "    --saturation <N|default>  ───────────── Set saturation. Default: no change.\n",
        "    --hue <N|auto|default>  ─────────────── Set hue. Default: no change.\n",
        "    --gamma <N|default> ─────────────────── Set gamma. Default: no change.\n",
        "    --sharpness <N|default>  ────────────── Set sharpness. Default: no change.\n",
        "    --backlight-compensation <N|default>  ─ Set backlight compensation. Default: no change.\n",
        "    --white-balance <N|auto|default>  ───── Set white balance. Default: no change.\n",
        "    --gain <N|auto|default>  ────────────── Set gain. Default: no change.\n",
        "    --color-effect <N|default>  ─────────── Set color effect. Default: no change.\n",
        "    --rotate <N|default>  ───────────────── Set rotation. Default: no change.\n",
        "    --flip-vertical <1|0|default>  ──────── Set vertical flip. Default: no change.\n",
        "    --flip-horizontal <1|0|default>  ────── Set horizontal flip. Default: no change.\n",
        "    Hint: use v4l2-ctl --list-ctrls-menus to query available controls of the device.\n",
        "HTTP server options:",
        "════════════════════",
        f"    -s|--host <address>  ──────── Listen on Hostname or IP. Default: {o.host}.\n",
        f"    -p|--port <N>  ────────────── Bind to this TCP port. Default: {o.port}.\n",
        "    -U|--unix <path>  ─────────── Bind to UNIX domain socket. Default: disabled.\n",
        "    -D|--unix-rm  ─────────────── Try to remove old UNIX socket file before binding. Default: disabled.\n",
        "    -M|--unix-mode <mode>  ────── Set UNIX socket file permissions (like 777). Default: disabled.\n",
        "    -S|--systemd  ─────────────── Bind to systemd socket for socket activation.\n",
        "    --user <name>  ────────────── HTTP basic auth user. Default: disabled.\n",
        "    --passwd <str>  ───────────── HTTP basic auth passwd. Default: empty.\n",
        "    --static <path> ───────────── Path to dir with static files instead of embedded root index page.",
        "                                  Symlinks are not supported for security reasons. Default: disabled.\n",
        "    -e|--drop-same-frames <N>  ── Don't send identical frames to clients, but no more than specified number.",
        "                                  It can significantly reduce the outgoing traffic, but will increase",
        "                                  the CPU loading. Don't use this option with analog signal sources",
        "                                  or webcams, it's useless. Default: disabled.\n",
        "    -R|--fake-resolution <WxH>  ─ Override image resolution for the /state. Default: disabled.\n",
        "    --tcp-nodelay  ────────────── Set TCP_NODELAY flag to the client /stream socket. Only for TCP socket.",
        "                                  Default: disabled.\n",
        "    --allow-origin <str>  ─────── Set Access-Control-Allow-Origin header. Default: disabled.\n",
        "    --instance-id <str>  ──────── A short string identifier to be displayed in the /state handle.",
        "                                  It must satisfy regexp ^[a-zA-Z0-9\\./+_-]*$. Default: an empty string.\n",
        f"    --server-timeout <sec>  ───── Timeout for client connections. Default: {o.server_timeout}.\n",
    ]
    lines += _sink_section("JPEG", "")
    lines += _sink_section("RAW", "raw-")
    lines += _sink_section("H264", "h264-")
    lines += [
        f"    --h264-bitrate <kbps>  ───────── H264 bitrate in Kbps. Default: {o.h264_bitrate}.\n",
        f"    --h264-gop <N>  ──────────────── Intarval between keyframes. Default: {o.h264_gop}.\n",
        "    --h264-m2m-device </dev/path>  ─ Path to V4L2 M2M encoder device. Default: auto select.\n",
        "    --exit-on-no-clients <sec> ──── Exit the program if there have been no stream or sink clients",
        "                                    or any HTTP requests in the last N seconds. Default: 0 (disabled)\n",
        "Logging options:",
        "════════════════",
        "    --log-level <N>  ──── Verbosity level of messages from 0 (info) to 3 (debug).",
        "                          Enabling debugging messages can slow down the program.",
        "                          Available levels: 0 (info), 1 (performance), 2 (verbose), 3 (debug).",
        f"                          Default: {o.log_level}.\n",
        "    --perf  ───────────── Enable performance messages (same as --log-level=1). Default: disabled.\n",
        "    --verbose  ────────── Enable verbose messages and lower (same as --log-level=2). Default: disabled.\n",
        "    --debug  ──────────── Enable debug messages and lower (same as --log-level=3). Default: disabled.\n",
        "    --force-log-colors  ─ Force color logging. Default: colored if stderr is a TTY.\n",
        "    --no-log-colors  ──── Disable color logging. Default: ditto.\n",
        "Help options:",
        "═════════════",
        "    -h|--help  ─────── Print this text and exit.\n",
        "    -v|--version  ──── Print version and exit.\n",
        "    --features  ────── Print list of supported features.\n",
    ]
    return "".join(f"{line}\n" for line in lines)