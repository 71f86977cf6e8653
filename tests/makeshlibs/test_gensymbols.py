import subprocess
from pathlib import Path
from unittest import mock

import pytest

from makeshlibs import gensymbols

SCANNED = [Path("libfoo.so.1"), Path("libfoo.so")]
VERSIONED = [Path("libfoo.so.1")]


@pytest.mark.parametrize(
    "compat_level, expected",
    ((7, []), (8, SCANNED), (11, SCANNED), (12, VERSIONED), (14, VERSIONED)),
)
def test_libraries_for_compat(compat_level, expected):
    assert gensymbols.libraries_for_compat(compat_level, SCANNED, VERSIONED) == expected


def test_gensymbols_command():
    cmd = gensymbols.gensymbols_command(
        "libfoo1",
        Path("debian/libfoo1.symbols"),
        Path("debian/libfoo1"),
        [Path("debian/libfoo1/usr/lib/libfoo.so.1")],
        ["-c4"],
    )

    assert cmd == [
        "dpkg-gensymbols",
        "-plibfoo1",
        "-Idebian/libfoo1.symbols",
        "-Pdebian/libfoo1",
        "-edebian/libfoo1/usr/lib/libfoo.so.1",
        "-c4",
    ]


class TestRunGensymbols:
    @pytest.fixture
    def staging_dir(self, tmp_path) -> Path:
        staging_dir = tmp_path / "libfoo1"
        (staging_dir / "DEBIAN").mkdir(parents=True)
        return staging_dir

    @pytest.mark.parametrize("generated", ("empty", "content", "missing"))
    def test_success(self, generated, staging_dir, tmp_path):
        symbols = tmp_path / "libfoo1.symbols"
        output = staging_dir / "DEBIAN" / "symbols"

        def fake_run(cmd):
            if generated == "empty":
                output.write_text("")
            elif generated == "content":
                output.write_text("libfoo.so.1 libfoo1 #MINVER#\n foo@Base 1.0\n")
            return subprocess.CompletedProcess(args=cmd, returncode=0)

        with mock.patch.object(gensymbols.subprocess, "run", side_effect=fake_run) as run:
            failure = gensymbols.run_gensymbols("libfoo1", symbols, staging_dir)

        assert failure is None
        run.assert_called_once_with(
            ["dpkg-gensymbols", "-plibfoo1", f"-I{symbols}", f"-P{staging_dir}"]
        )
        assert output.exists() == (generated == "content")

    def test_failure(self, staging_dir, tmp_path, caplog):
        symbols = tmp_path / "libfoo1.symbols"

        with mock.patch.object(gensymbols.subprocess, "run") as run:
            run.return_value = subprocess.CompletedProcess(args=[], returncode=2)
            failure = gensymbols.run_gensymbols(
                "libfoo1", symbols, staging_dir, params=["-c4"]
            )

        assert failure == (
            f"dpkg-gensymbols -plibfoo1 -I{symbols} -P{staging_dir} -c4 returned exit code 2"
        )
        assert failure in caplog.text

    def test_no_act(self, staging_dir, tmp_path):
        with mock.patch.object(gensymbols.subprocess, "run") as run:
            failure = gensymbols.run_gensymbols(
                "libfoo1", tmp_path / "libfoo1.symbols", staging_dir, no_act=True
            )

        assert failure is None
        run.assert_not_called()
