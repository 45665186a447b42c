# lightstream

Pieces of a lightweight MJPEG/H264 video streamer for Linux, in pure
Python with no third-party dependencies: HTTP request helpers, a worker
thread pool, socket activation, and the streamer's command-line options
with their help text.

## Installation

    pip install .

To run the test suite:

    pip install ".[test]"
    pytest

## Command line

The package installs one command, `lightstream`:

    lightstream --help        # print the full option reference
    lightstream --version     # print the version
    lightstream --features    # list the optional features (+ or - each)

Any other command line is parsed and checked. Options cover capturing
(`--device`, `--resolution`, `--format`, `--desired-fps`, `--buffers`,
`--workers`, `--quality`, `--encoder`, ...), image controls
(`--brightness`, `--contrast`, `--hue`, `--image-default`, ...), the HTTP
server (`--host`, `--port`, `--unix`, `--static`, `--instance-id`, ...),
memory sinks (`--sink`, `--raw-sink`, `--h264-sink` and their `-mode`,
`-rm`, `-client-ttl`, `-timeout` variants), H264 settings
(`--h264-bitrate`, `--h264-gop`) and logging (`--log-level`, `--perf`,
`--verbose`, `--debug`). Long options may be shortened to a unique prefix
and short options may be grouped. An invalid value is printed with its
allowed range and the command exits with status 1; a valid command line
sets up logging, logs a start message and exits with status 0.

## Library

### HTTP helpers

- `lightstream.path.simplify_request_path(path)` normalises a request
  path, collapsing `//`, `.` and `..` so that it never climbs above the
  root:

      >>> from lightstream.path import simplify_request_path
      >>> simplify_request_path("../../../etc/passwd")
      '/etc/passwd'
      >>> simplify_request_path("/abc/./xyz/..")
      '/abc/'

- `lightstream.mime.guess_mime_type(path)` maps a file extension to a
  MIME type, case-insensitively, falling back to `application/misc`:

      >>> from lightstream.mime import guess_mime_type
      >>> guess_mime_type("index.HTML")
      'text/html'

- `lightstream.uri.get_true(params, key)` tells whether a query parameter
  starts with `1` or is `true`/`yes`; `lightstream.uri.get_string(params,
  key)` returns it percent-encoded, or `None`. `params` is a mapping or
  a sequence of name/value pairs; names match ignoring case.
- `lightstream.bev.format_reason(what, error)` describes a connection
  event: the text for the `errno` value `error`, then the names of the
  `EventFlag` bits in `what`, e.g. `"Connection reset by peer (reading,eof)"`.
- `lightstream.systemd.bind_systemd()` takes over the first listening
  socket passed through `LISTEN_PID`/`LISTEN_FDS`, closes any others, and
  returns it non-blocking; it raises `RuntimeError` when none was passed.

### Worker pool

`lightstream.workers.WorkersPool(name, wr_prefix, n_workers,
desired_interval, job_init, job_destroy, run_job)` starts `n_workers`
`Worker` threads, each with its own job from `job_init()`. `wait()`
returns a free worker — the oldest assigned one when it has finished
(`job_timely` set), otherwise any free one — and `assign(worker)` starts
it on its job. `get_fluency_delay(worker)` keeps a running average of job
time and returns the delay before the next frame should be taken, or
`desired_interval` when that is longer. `destroy()` stops and joins the
threads and passes each job to `job_destroy`; the pool is also a context
manager.

### Options

`lightstream.options.parse_options(argv)` returns an `Options` dataclass
or raises `OptionsError`. Image controls are `Control` values with a
`ControlMode`; sinks are `SinkOptions`. `parse_resolution(text, limited)`
and `check_instance_id(text)` validate single values.
`lightstream.helptext.render_help(options)` and `render_features()` return
the texts printed by `--help` and `--features`.

## What this package does not do

It does not capture video, encode frames, run an HTTP server or write
memory sinks. The `lightstream` command only parses and checks the
options and answers `--help`, `--version` and `--features`; it does not
start streaming.