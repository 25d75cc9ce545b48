"""
End-to-end tests of the nfsgaze command line.

The monitor runs against a report file with a tiny interval and a single
poll, so these tests finish quickly while exercising the full wiring of
configuration, parser, delta engine, renderer and recorder.
"""

import argparse
from pathlib import Path

import pytest
import toml

from nfsgaze.cli.main import apply_cli_overrides, build_arg_parser, main_cli
from nfsgaze.config import get_config
from nfsgaze.models import MonitorConfig
from nfsgaze.validation import ValidationError


def run_cli(argv):
    """Run main_cli and return its exit status (0 when it returns normally)."""
    try:
        main_cli(argv)
    except SystemExit as e:
        return e.code
    return 0


@pytest.mark.integration
class TestMainCli:
    """Test cases for main_cli."""

    def test_single_report_from_file(self, mountstats_file, capsys):
        status = run_cli(["-f", str(mountstats_file), "-c", "1", "-i", "0.01", "/mnt/nfs"])

        assert status == 0
        out = capsys.readouterr().out
        assert "Monitoring NFS mount: /mnt/nfs (server:/export)" in out
        assert "Update interval: 0.01s" in out

    def test_mount_option_overrides_positional(self, mountstats_file, capsys):
        status = run_cli(["-f", str(mountstats_file), "-c", "1", "-i", "0.01", "-m", "/mnt/data", "/mnt/nfs"])

        assert status == 0
        out = capsys.readouterr().out
        assert "Monitoring NFS mount: /mnt/data (nfsserver2:/data)" in out
        assert "/mnt/nfs" not in out

    def test_ops_filter_in_summary(self, mountstats_file, capsys):
        run_cli(["-f", str(mountstats_file), "-c", "1", "-i", "0.01", "--ops", "WRITE, READ", "/mnt/nfs"])

        assert "Filtering operations: READ,WRITE" in capsys.readouterr().out

    def test_nfsiostat_initial_report(self, mountstats_file, capsys):
        status = run_cli(["-f", str(mountstats_file), "-c", "1", "-i", "0.01", "--nfsiostat", "/mnt/nfs"])

        assert status == 0
        out = capsys.readouterr().out
        assert "server:/export mounted on /mnt/nfs:" in out
        assert "getattr:" in out
        assert "read:" in out
        assert "write:" in out

    def test_unknown_mount_exits_1(self, mountstats_file):
        assert run_cli(["-f", str(mountstats_file), "-c", "1", "/mnt/missing"]) == 1

    def test_missing_mountstats_exits_1(self, temp_dir):
        assert run_cli(["-f", str(temp_dir / "missing"), "-c", "1"]) == 1

    def test_malformed_report_exits_1(self, temp_dir):
        path = temp_dir / "mountstats"
        path.write_text(
            "device server:/export mounted on /mnt/nfs with fstype nfs\n"
            "\tage:\tabc\n"
        )
        assert run_cli(["-f", str(path), "-c", "1"]) == 1

    @pytest.mark.parametrize("flag,value", [("-i", "abc"), ("-i", "0"), ("-c", "-1"), ("--prometheus-port", "70000")])
    def test_invalid_argument_exits_1(self, mountstats_file, flag, value):
        assert run_cli(["-f", str(mountstats_file), flag, value]) == 1

    def test_missing_config_file_exits_1(self, mountstats_file, temp_dir):
        assert run_cli(["--config", str(temp_dir / "absent.toml"), "-f", str(mountstats_file)]) == 1

    def test_config_file_drives_run(self, mountstats_file, temp_dir, capsys):
        records_dir = temp_dir / "records"
        config_file = temp_dir / "config.toml"
        with open(config_file, "w") as f:
            toml.dump(
                {
                    "monitor": {
                        "collection": {
                            "mountstats_path": str(mountstats_file),
                            "interval_seconds": 0.01,
                            "count": 1,
                        },
                        "storage": {"enabled": True, "output_dir": str(records_dir)},
                    }
                },
                f,
            )

        status = run_cli(["--config", str(config_file), "/mnt/nfs"])

        assert status == 0
        assert "Monitoring NFS mount: /mnt/nfs" in capsys.readouterr().out
        assert len(list(records_dir.glob("*_metadata.json"))) == 1
        # Command-line overrides never leak into the cached configuration.
        assert get_config().monitor.collection.count == 1


@pytest.mark.unit
class TestArgumentHandling:
    """Test cases for argument parsing and configuration overrides."""

    def parse(self, *argv):
        return build_arg_parser().parse_args(list(argv))

    def test_defaults_leave_config_untouched(self):
        config = apply_cli_overrides(MonitorConfig(), self.parse())

        assert config == MonitorConfig()

    def test_overrides(self):
        args = self.parse("-i", "2.5", "-c", "4", "--bw", "--attr", "--clear", "--nfsiostat",
                          "-f", "/tmp/ms", "--prometheus-port", "9300", "--record", "/tmp/rec")
        config = apply_cli_overrides(MonitorConfig(), args)

        assert config.collection.interval_seconds == 2.5
        assert config.collection.count == 4
        assert config.collection.mountstats_path == Path("/tmp/ms")
        assert config.display.show_bandwidth
        assert config.display.show_attr
        assert config.display.clear_screen
        assert config.display.nfsiostat_format
        assert config.metrics.enable_prometheus
        assert config.metrics.prometheus_port == 9300
        assert config.storage.enabled
        assert config.storage.output_dir == Path("/tmp/rec")

    def test_invalid_interval(self):
        with pytest.raises(ValidationError) as excinfo:
            apply_cli_overrides(MonitorConfig(), self.parse("-i", "fast"))
        assert excinfo.value.field_name == "--interval"

    def test_log_level_is_case_insensitive(self):
        assert self.parse("--log-level", "debug").log_level == "DEBUG"

    def test_invalid_log_level_exits(self):
        with pytest.raises(SystemExit):
            self.parse("--log-level", "chatty")
