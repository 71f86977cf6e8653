import subprocess
from unittest import mock

import pytest

from makeshlibs import soname
from makeshlibs.exc import MetadataDumpFailure

from ..common import objdump_output


@pytest.mark.parametrize(
    "soname_value, expected",
    (
        ("libfoobar.so.1", soname.SonameInfo(soname.LibraryDescriptor("libfoobar", "1"))),
        ("libfoobar.so.1.2", soname.SonameInfo(soname.LibraryDescriptor("libfoobar", "1.2"))),
        ("libfoo.so.bar.so.5", soname.SonameInfo(soname.LibraryDescriptor("libfoo.so.bar", "5"))),
        ("libfoobar-1.so", soname.SonameInfo(soname.LibraryDescriptor("libfoobar", "1"))),
        ("libfoo-bar-2.0.so", soname.SonameInfo(soname.LibraryDescriptor("libfoo-bar", "2.0"))),
        ("libfoobar.so", soname.SonameInfo(unversioned=True)),
        ("libfoo-bar.so", soname.SonameInfo(unversioned=True)),
        (None, soname.SonameInfo()),
    ),
    ids=(
        "versioned",
        "versioned-minor",
        "versioned-greedy",
        "dashed",
        "dashed-name",
        "unversioned",
        "unversioned-dashed",
        "no-soname",
    ),
)
def test_parse_soname(soname_value, expected):
    assert soname.parse_soname(objdump_output(soname_value)) == expected


def test_parse_soname_empty_output():
    result = soname.parse_soname("")

    assert result.descriptor is None
    assert not result.unversioned


def test_parse_soname_ignores_needed():
    output = objdump_output(None)

    assert "NEEDED" in output
    assert soname.parse_soname(output) == soname.SonameInfo()


class TestDumpPrivateHeaders:
    @mock.patch.object(soname.subprocess, "run")
    def test_success(self, run):
        run.return_value = subprocess.CompletedProcess(
            args=[], returncode=0, stdout=objdump_output("libfoo.so.1").encode(), stderr=b""
        )

        output = soname.dump_private_headers("/tmp/libfoo.so.1", objdump="x86_64-linux-gnu-objdump")

        run.assert_called_once_with(
            ["x86_64-linux-gnu-objdump", "-p", "/tmp/libfoo.so.1"],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        assert "SONAME               libfoo.so.1" in output

    @mock.patch.object(soname.subprocess, "run")
    def test_failure(self, run):
        run.return_value = subprocess.CompletedProcess(
            args=[], returncode=1, stdout=b"", stderr=b"objdump: file format not recognized\n"
        )

        with pytest.raises(MetadataDumpFailure) as excinfo:
            soname.dump_private_headers("/tmp/libfoo.so.1")

        assert excinfo.value.code == "1"
        assert excinfo.value.detail == "objdump: file format not recognized"
        assert str(excinfo.value).startswith("objdump failed on /tmp/libfoo.so.1 with exit code 1")


def test_read_soname():
    with mock.patch.object(soname, "dump_private_headers") as dump_private_headers:
        dump_private_headers.return_value = objdump_output("libfoo-2.so")

        result = soname.read_soname("libfoo-2.so", objdump="objdump")

    dump_private_headers.assert_called_once_with("libfoo-2.so", objdump="objdump")
    assert result.descriptor == ("libfoo", "2")
