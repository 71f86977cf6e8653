import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

log = logging.getLogger(__name__)

# Before this compatibility level, libraries aren't passed to dpkg-gensymbols
PASS_LIBRARIES_COMPAT_LEVEL = 8
# Before this compatibility level, every scanned library is passed, not just those with shlibs
ONLY_VERSIONED_LIBRARIES_COMPAT_LEVEL = 12


def libraries_for_compat(
    compat_level: int, scanned: Sequence[Path], versioned: Sequence[Path]
) -> list[Path]:
    """Select the library files to hand to dpkg-gensymbols.

    :param compat_level: The debhelper compatibility level.
    :param scanned: Every shared library found in the staging directory.
    :param versioned: The libraries which produced a shlibs line.
    """
    if compat_level < PASS_LIBRARIES_COMPAT_LEVEL:
        return []
    if compat_level < ONLY_VERSIONED_LIBRARIES_COMPAT_LEVEL:
        return list(scanned)
    return list(versioned)


def gensymbols_command(
    package: str,
    symbols: Path,
    tmpdir: Path,
    libraries: Sequence[Path] = (),
    params: Sequence[str] = (),
) -> list[str]:
    # -I because dh_installdeb makes its own copy of the symbols file if needed
    cmd = ["dpkg-gensymbols", f"-p{package}", f"-I{symbols}", f"-P{tmpdir}"]
    cmd.extend(f"-e{library}" for library in libraries)
    cmd.extend(params)
    return cmd


def run_gensymbols(
    package: str,
    symbols: Path,
    tmpdir: Path,
    libraries: Sequence[Path] = (),
    params: Sequence[str] = (),
    *,
    no_act: bool = False,
) -> Optional[str]:
    """Generate the symbols control file of a package.

    :param package: The binary package name.
    :param symbols: The packager-provided symbols file.
    :param tmpdir: The staging directory of the package.
    :param libraries: Library files to limit dpkg-gensymbols to.
    :param params: Additional parameters for dpkg-gensymbols.
    :param no_act: Only log what would be done.
    :return: a description of the failure, or None on success
    """
    cmd = gensymbols_command(package, symbols, tmpdir, libraries, params)
    log.debug("%s", " ".join(cmd))

    if no_act:
        return None

    completed = subprocess.run(cmd)
    if completed.returncode:
        failure = f"{' '.join(cmd)} returned exit code {completed.returncode}"
        log.error("%s", failure)
        return failure

    generated = tmpdir / "DEBIAN" / "symbols"
    if generated.is_file() and not generated.stat().st_size:
        log.debug("rm -f %s", generated)
        generated.unlink()

    return None
