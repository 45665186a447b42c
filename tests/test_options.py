import pytest

from lightstream.options import (
    CONTROL_NAMES,
    VERSION,
    ControlMode,
    OptionsError,
    check_instance_id,
    main,
    parse_options,
    parse_resolution,
)


def test_defaults_from_stream_and_sinks():
    opts = parse_options([])
    assert opts.last_as_blank == -1
    assert opts.error_delay == 1
    assert opts.h264_bitrate == 5000
    assert opts.h264_gop == 30
    assert opts.sink.mode == 0o660
    assert opts.raw_sink.client_ttl == 10
    assert opts.h264_sink.timeout == 1
    assert opts.sink.enabled is False
    assert all(c.mode is ControlMode.NONE for c in opts.controls.values())


def test_parse_resolution_values():
    assert parse_resolution("640x480", True) == (640, 480)
    assert parse_resolution("0x0", False) == (0, 0)


@pytest.mark.parametrize("text", ["640*480", "x480", "", "abc"])
def test_parse_resolution_bad_format(text):
    with pytest.raises(ValueError):
        parse_resolution(text, True)


def test_parse_resolution_limits():
    with pytest.raises(ValueError):
        parse_resolution("0x480", True)
    with pytest.raises(ValueError):
        parse_resolution("640x0", True)


def test_check_instance_id():
    assert check_instance_id("abc.DEF/1+2_3-4") is True
    assert check_instance_id("") is True
    assert check_instance_id("a b") is False
    assert check_instance_id("caf\u00e9") is False


def test_number_bases():
    opts = parse_options(["--port=0x1F90", "--unix-mode", "777", "--sink-mode=600"])
    assert opts.port == 0x1F90
    assert opts.unix_mode == 0o777
    assert opts.sink.mode == 0o600


def test_number_out_of_range_message():
    with pytest.raises(OptionsError, match="min=1, max=65535"):
        parse_options(["--port", "70000"])


@pytest.mark.parametrize("value", ["80x", "", "08", "0x"])
def test_number_garbage(value):
    with pytest.raises(OptionsError):
        parse_options(["--quality", value])


def test_short_clusters_and_attached_values():
    opts = parse_options(["-nt", "-q50", "-s", "0.0.0.0"])
    assert opts.persistent is True
    assert opts.dv_timings is True
    assert opts.quality == 50
    assert opts.host == "0.0.0.0"


def test_resolution_options():
    opts = parse_options(["-r", "1280x720", "--fake-resolution=0x0"])
    assert (opts.width, opts.height) == (1280, 720)
    assert (opts.fake_width, opts.fake_height) == (0, 0)
    with pytest.raises(OptionsError, match="Invalid resolution format"):
        parse_options(["--resolution", "big"])
    with pytest.raises(OptionsError, match="Invalid width"):
        parse_options(["--resolution", "0x480"])


def test_controls():
    opts = parse_options(["--brightness=auto", "--contrast=-5", "--hue=DEFAULT"])
    assert opts.controls["brightness"].mode is ControlMode.AUTO
    assert opts.controls["contrast"].mode is ControlMode.VALUE
    assert opts.controls["contrast"].value == -5
    assert opts.controls["hue"].mode is ControlMode.DEFAULT
    with pytest.raises(OptionsError):
        parse_options(["--contrast=auto"])


def test_image_default():
    opts = parse_options(["--image-default"])
    assert set(opts.controls) == set(CONTROL_NAMES)
    assert all(c.mode is ControlMode.DEFAULT for c in opts.controls.values())


def test_sinks():
    opts = parse_options(["--raw-sink=raw", "--raw-sink-rm", "--h264-sink-client-ttl=5"])
    assert opts.raw_sink.name == "raw"
    assert opts.raw_sink.enabled is True
    assert opts.raw_sink.rm is True
    assert opts.h264_sink.client_ttl == 5
    assert opts.sink.enabled is False
    with pytest.raises(OptionsError):
        parse_options(["--sink-timeout=61"])


def test_choices():
    opts = parse_options(["-c", "m2m-video", "--format=mjpeg", "--io-method", "userptr"])
    assert opts.encoder == "M2M-VIDEO"
    assert opts.format == "MJPEG"
    assert opts.io_method == "USERPTR"
    with pytest.raises(OptionsError, match="Unknown encoder type: foo; available:"):
        parse_options(["--encoder=foo"])


def test_instance_id_option():
    assert parse_options(["--instance-id=cam.1"]).instance_id == "cam.1"
    with pytest.raises(OptionsError, match="Invalid instance ID"):
        parse_options(["--instance-id=bad id"])


def test_credentials():
    password = "password"
    opts = parse_options(["--user", "user", "--passwd", password])
    assert opts.user == "user"
    assert opts.passwd == password


def test_abbreviations():
    assert parse_options(["--persist"]).persistent is True
    with pytest.raises(OptionsError, match="ambiguous"):
        parse_options(["--devi=x"])
    assert parse_options(["--device=/dev/x"]).device == "/dev/x"


def test_unknown_and_missing():
    with pytest.raises(OptionsError, match="unrecognized"):
        parse_options(["--nonexistent"])
    with pytest.raises(OptionsError, match="invalid option"):
        parse_options(["-X"])
    with pytest.raises(OptionsError, match="requires an argument"):
        parse_options(["--port"])
    with pytest.raises(OptionsError, match="requires an argument"):
        parse_options(["-p"])
    with pytest.raises(OptionsError, match="doesn't allow"):
        parse_options(["--persistent=1"])


def test_non_options_and_double_dash():
    assert parse_options(["foo", "-n"]).persistent is True
    assert parse_options(["--", "-n"]).persistent is False


def test_deprecated_glitched_resolutions_ignored():
    opts = parse_options(["-g", "640x480,800x600", "-n"])
    assert opts.persistent is True


def test_log_levels():
    assert parse_options(["--debug"]).log_level == 3
    assert parse_options(["--verbose"]).log_level == 2
    assert parse_options(["--log-level=1"]).log_level == 1
    assert parse_options(["--force-log-colors"]).log_colored is True
    assert parse_options(["--no-log-colors"]).log_colored is False
    with pytest.raises(OptionsError):
        parse_options(["--log-level=4"])


def test_help_stops_parsing():
    opts = parse_options(["--help", "--port=0"])
    assert opts.action == "help"


def test_main_help(capsys):
    assert main(["-h"]) == 0
    assert "Capturing options:" in capsys.readouterr().out


def test_main_version(capsys):
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == VERSION


def test_main_features(capsys):
    assert main(["--features"]) == 0
    assert "WITH_SYSTEMD" in capsys.readouterr().out


def test_main_error(capsys):
    assert main(["--port=0"]) == 1
    assert "Invalid value for '--port=0'" in capsys.readouterr().out


def test_main_ok():
    assert main(["-n"]) == 0