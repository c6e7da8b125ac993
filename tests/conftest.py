from __future__ import annotations

from pathlib import Path

import pytest

from blorbgen.reporting import SilentReporter, set_reporter, set_verbosity

# Small stand-ins for real resources; only the bytes matter to the packager.
RESOURCE_BYTES = {
    "png": b"\x89PNG\r\n\x1a\n",
    "jpg": b"\xff\xd8\xff",
    "ogg": b"OggS\x00",
    "mod": b"M.K.",
    "z5": b"\x05\x00\x00\x01\x02\x03",
    "ulx": b"Glul\x00\x03\x01",
    "ifiction": b"<ifindex/>",
}


@pytest.fixture(autouse=True)
def quiet_reporter():
    set_reporter(SilentReporter())
    set_verbosity(0)
    yield
    set_reporter(SilentReporter())
    set_verbosity(0)


def write_resource(directory: Path, name: str) -> Path:
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    ext = name.rsplit(".", 1)[-1].lower()
    path.write_bytes(RESOURCE_BYTES.get(ext, b"data"))
    return path


@pytest.fixture
def make_control(tmp_path: Path):
    """Write a control list (and its resources) under ``tmp_path``.

    ``resources`` lists file names to create next to the control file;
    files referenced by ``lines`` but not listed stay missing.
    """

    def _make(lines, resources=(), name: str = "game.res") -> Path:
        for res in resources:
            write_resource(tmp_path, res)
        control = tmp_path / name
        control.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return control

    return _make
