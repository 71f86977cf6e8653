import logging
import re
import subprocess
from pathlib import Path
from typing import NamedTuple, Optional, Union

from .exc import MetadataDumpFailure

log = logging.getLogger(__name__)

# libfoo.so.1, libfoo.so.1.2
versioned_soname_re = re.compile(r"\s+SONAME\s+(?P<library>.+)\.so\.(?P<major>.+)")
# libfoo-1.so, libfoo-1.2.so
dashed_soname_re = re.compile(r"\s+SONAME\s+(?P<library>.+)-(?P<major>\d.*)\.so")
# libfoo.so
unversioned_soname_re = re.compile(r"\s+SONAME\s+.+\.so")


class LibraryDescriptor(NamedTuple):
    library: str
    major: str


class SonameInfo(NamedTuple):
    descriptor: Optional[LibraryDescriptor] = None
    unversioned: bool = False


def parse_soname(output: str) -> SonameInfo:
    """Extract library name and major version from `objdump -p` output.

    Output without any SONAME yields an empty result, this isn’t an error.

    :param output: The private headers as dumped by objdump.
    :return: the descriptor, or whether the SONAME is unversioned
    """
    for soname_re in (versioned_soname_re, dashed_soname_re):
        if match := soname_re.search(output):
            library = match.group("library").strip()
            major = match.group("major").strip()
            return SonameInfo(descriptor=LibraryDescriptor(library=library, major=major))

    if unversioned_soname_re.search(output):
        return SonameInfo(unversioned=True)

    return SonameInfo()


def dump_private_headers(path: Union[Path, str], objdump: str = "objdump") -> str:
    """Run objdump -p on a file and return its output."""
    cmd = [objdump, "-p", str(path)]
    log.debug("Running %s", " ".join(cmd))
    result = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    if result.returncode:
        raise MetadataDumpFailure(
            f"{objdump} failed on {path} with exit code {result.returncode}",
            code=str(result.returncode),
            detail=result.stderr.decode("utf-8", errors="replace").strip(),
        )
    return result.stdout.decode("utf-8", errors="replace")


def read_soname(path: Union[Path, str], objdump: str = "objdump") -> SonameInfo:
    return parse_soname(dump_private_headers(path, objdump=objdump))
