"""
Pytest configuration and shared fixtures for the nfsgaze test suite.

This module provides sample mountstats reports, configuration files and
test utilities shared by all test modules.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Dict, Optional, Sequence

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Sample Reports
# ============================================================================

EVENTS_1_TO_27 = " ".join(str(i) for i in range(1, 28))

SAMPLE_MOUNTSTATS = f"""\
device rootfs mounted on / with fstype rootfs
device proc mounted on /proc with fstype proc
device server:/export mounted on /mnt/nfs with fstype nfs statvers=1.1
\topts:\trw,vers=3,rsize=1048576,wsize=1048576,namlen=255,acregmin=3
\tage:\t3600
\tcaps:\tcaps=0x3fef,wtmult=4096,dtsize=4096,bsize=0,namlen=255
\tsec:\tflavor=1,pseudoflavor=1
\tevents:\t{EVENTS_1_TO_27}
\tbytes:\t1048576 0 0 0 0 2097152 0 0
\tRPC iostats version: 1.1  p/v: 100003/3 (nfs)
\txprt:\ttcp 0 1 2 0 0 100 100 0 100 0 2 0 0
\tper-op statistics
\t        NULL: 0 0 0 0 0 0 0 0
\t     GETATTR: 50 50 0 6000 5600 5 25 35 0
\t        READ: 100 95 5 1024 2048 10 20 30 2
\t       WRITE: 40 40 0 409600 4800 8 80 100 1

device tmpfs mounted on /run with fstype tmpfs
device nfsserver2:/data mounted on /mnt/data with fstype nfs4 statvers=1.1
\tage:\t60
\tbytes:\t0 0 0 0 0 0 0 0
\tper-op statistics
\t        READ: 10 10 0 1000 2000 1 2 3
"""


def build_mountstats(
    operations: Dict[str, Sequence[int]],
    device: str = "server:/export",
    mount_path: str = "/mnt/nfs",
    age: int = 100,
    events: Optional[Sequence[int]] = None,
) -> str:
    """Build a single-mount report with the given per-op counters."""
    lines = [
        f"device {device} mounted on {mount_path} with fstype nfs statvers=1.1",
        f"\tage:\t{age}",
    ]
    if events is not None:
        lines.append("\tevents:\t" + " ".join(str(v) for v in events))
    lines.append("\tbytes:\t0 0 0 0 0 0 0 0")
    lines.append("\tper-op statistics")
    for name, counters in operations.items():
        lines.append(f"\t{name:>12}: " + " ".join(str(v) for v in counters))
    return "\n".join(lines) + "\n"


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_mountstats():
    """A report with two NFS mounts between non-NFS mounts."""
    return SAMPLE_MOUNTSTATS


@pytest.fixture
def mountstats_file(temp_dir, sample_mountstats):
    """The sample report written to a file."""
    path = temp_dir / "mountstats"
    path.write_text(sample_mountstats)
    return path


@pytest.fixture
def report_builder():
    """Provide the single-mount report builder."""
    return build_mountstats


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def sample_config_data():
    """Sample ``[monitor]`` configuration data for testing."""
    return {
        "general": {"log_level": "DEBUG"},
        "collection": {
            "mountstats_path": "/tmp/mountstats",
            "interval_seconds": 2.5,
            "count": 3,
        },
        "display": {
            "show_bandwidth": True,
            "show_attr": False,
            "clear_screen": False,
            "nfsiostat_format": True,
        },
        "metrics": {
            "enable_prometheus": False,
            "prometheus_port": 9200,
            "prometheus_addr": "127.0.0.1",
        },
        "storage": {
            "enabled": True,
            "output_dir": "/tmp/records",
            "compression": "zstd",
            "flush_every": 5,
        },
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary config.toml for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump({"monitor": sample_config_data}, f)

    return {
        "config": config_file,
        "dir": temp_dir,
    }


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    yield  # Run the test

    from nfsgaze.config import reset_config_path

    # Always restore the default config path and drop the cache
    reset_config_path()
