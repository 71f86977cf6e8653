import logging
import subprocess
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import NamedTuple, Optional, Union

from debian.changelog import Changelog, ChangelogParseError
from debian.deb822 import Deb822

from .exc import ControlFileError

log = logging.getLogger(__name__)


class BinaryPackage(NamedTuple):
    name: str
    architecture: str
    package_type: str = "deb"

    @property
    def is_udeb(self) -> bool:
        return self.package_type == "udeb"


def read_binary_packages(debian_dir: Union[Path, str]) -> list[BinaryPackage]:
    """Read the binary package stanzas of debian/control.

    :param debian_dir: The debian/ directory of the source package.
    :return: the binary packages, in the order they are declared
    """
    control = Path(debian_dir) / "control"

    try:
        with control.open("r", encoding="utf-8") as fp:
            paragraphs = list(Deb822.iter_paragraphs(fp))
    except FileNotFoundError as exc:
        raise ControlFileError(f"Control file '{control}' doesn’t exist") from exc

    if not paragraphs or "Source" not in paragraphs[0]:
        raise ControlFileError(f"Control file '{control}' lacks a source paragraph")

    packages = []
    for paragraph in paragraphs[1:]:
        name = paragraph.get("Package")
        if not name:
            raise ControlFileError(
                f"Binary paragraph without Package field in '{control}'",
                detail=paragraph.dump(),
            )
        package_type = paragraph.get("Package-Type") or paragraph.get("XC-Package-Type") or "deb"
        packages.append(
            BinaryPackage(
                name=name,
                architecture=paragraph.get("Architecture", "any"),
                package_type=package_type,
            )
        )

    if not packages:
        raise ControlFileError(f"Control file '{control}' declares no binary packages")

    return packages


def read_source_version(debian_dir: Union[Path, str]) -> str:
    """Read the version of the most recent debian/changelog entry.

    :param debian_dir: The debian/ directory of the source package.
    :return: the full version, including epoch and revision
    """
    changelog_path = Path(debian_dir) / "changelog"

    try:
        with changelog_path.open("r", encoding="utf-8") as fp:
            changelog = Changelog(fp, max_blocks=1, strict=True)
    except FileNotFoundError as exc:
        raise ControlFileError(f"Changelog '{changelog_path}' doesn’t exist") from exc
    except ChangelogParseError as exc:
        raise ControlFileError(
            f"Couldn’t parse changelog '{changelog_path}'", detail=str(exc)
        ) from exc

    if not len(changelog):
        raise ControlFileError(f"Changelog '{changelog_path}' has no entries")

    return changelog.full_version


def pkgfile(
    debian_dir: Union[Path, str], package: str, name: str, *, is_main_package: bool = False
) -> Optional[Path]:
    """Locate a packager-provided file for a binary package.

    Looks for debian/<package>.<name> and, for the main (first) package of the
    source, falls back to debian/<name>.

    :return: the path of the file or None if there is none
    """
    debian_dir = Path(debian_dir)

    candidates = [debian_dir / f"{package}.{name}"]
    if is_main_package:
        candidates.append(debian_dir / name)

    for candidate in candidates:
        if candidate.is_file():
            return candidate

    return None


def tmpdir(debian_dir: Union[Path, str], package: str) -> Path:
    """Return the staging directory of a binary package."""
    return Path(debian_dir) / package


def _architecture_matches(host_arch: str, wildcard: str) -> bool:
    cmd = ["dpkg-architecture", f"-a{host_arch}", f"-i{wildcard}"]
    log.debug("Running %s", " ".join(cmd))
    result = subprocess.run(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    return result.returncode == 0


def is_built_for(package: BinaryPackage, host_arch: Optional[str]) -> bool:
    """Check whether a binary package is built for the host architecture.

    Architecture independent packages are always built. Wildcards like
    linux-any or any-amd64 are resolved by dpkg-architecture.

    :param package: The binary package.
    :param host_arch: The Debian host architecture, e.g. amd64. If unset, every
        package is considered to be built.
    """
    if not host_arch:
        return True

    for arch in package.architecture.split():
        if arch in ("all", "any", host_arch):
            return True
        if "any" in arch.split("-") and _architecture_matches(host_arch, arch):
            return True

    return False


def select_packages(
    packages: Sequence[BinaryPackage],
    include: Iterable[str] = (),
    exclude: Iterable[str] = (),
    host_arch: Optional[str] = None,
) -> list[BinaryPackage]:
    """Select the packages to act on.

    :param packages: All binary packages of the source, in control file order.
    :param include: If not empty, act only on these packages.
    :param exclude: Don’t act on these packages.
    :param host_arch: Skip architecture dependent packages not built for this
        architecture.
    :return: the selected packages, in control file order
    """
    include = set(include)
    exclude = set(exclude)

    known = {package.name for package in packages}
    unknown = include - known
    if unknown:
        raise ControlFileError(
            f"Requested unknown package(s): {', '.join(sorted(unknown))}"
        )

    selected = []
    for package in packages:
        if include and package.name not in include:
            continue
        if package.name in exclude:
            continue
        if package.is_udeb:
            log.debug("Skipping udeb package %s", package.name)
            continue
        if not is_built_for(package, host_arch):
            log.debug("Skipping %s, not built for %s", package.name, host_arch)
            continue
        selected.append(package)

    return selected
