import enum
import logging
import os
import re
import shutil
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import NamedTuple, Optional

log = logging.getLogger(__name__)

UPSTREAM_VERSION_KEYWORD = "Upstream-Version"
NONE_KEYWORD = "None"

# At this and later compatibility levels, shlibs dependencies are versioned by default
VERSIONED_BY_DEFAULT_COMPAT_LEVEL = 12
# Before this compatibility level, the Debian revision is part of the version
STRIP_REVISION_COMPAT_LEVEL = 4

SHLIBS_FILE_MODE = 0o644
CONTROL_DIR_MODE = 0o755

revision_re = re.compile(r"-[^-]*$")


class DependencyMode(enum.Enum):
    NONE = "none"
    UPSTREAM_VERSION = "upstream-version"
    EXPLICIT_RELATION = "explicit-relation"


class DependencySpec(NamedTuple):
    mode: DependencyMode
    relation: Optional[str] = None


class MakeshlibsConfig(NamedTuple):
    compat_level: int
    dependency: DependencySpec
    major: Optional[str] = None
    exclude: tuple[str, ...] = ()
    no_scripts: bool = False
    add_udeb: Optional[str] = None
    gensymbols_params: tuple[str, ...] = ()
    no_act: bool = False
    objdump: str = "objdump"


def resolve_dependency_mode(version_info: Optional[str], compat_level: int) -> DependencySpec:
    """Map the value of the -V option to a dependency mode.

    :param version_info: The option value, None if it wasn’t given.
    :param compat_level: The debhelper compatibility level.
    :return: the mode and, for explicit relations, the relation itself
    """
    if version_info is None:
        if compat_level >= VERSIONED_BY_DEFAULT_COMPAT_LEVEL:
            return DependencySpec(DependencyMode.UPSTREAM_VERSION)
        return DependencySpec(DependencyMode.NONE)

    if version_info in ("", UPSTREAM_VERSION_KEYWORD):
        return DependencySpec(DependencyMode.UPSTREAM_VERSION)

    if version_info == NONE_KEYWORD:
        return DependencySpec(DependencyMode.NONE)

    return DependencySpec(DependencyMode.EXPLICIT_RELATION, relation=version_info)


def strip_revision(version: str) -> str:
    """Remove the Debian revision from a version, keeping any epoch."""
    return revision_re.sub("", version)


def build_dependency(
    package: str, version: Optional[str], dependency: DependencySpec, compat_level: int
) -> str:
    """Build the dependency relation of a shlibs line.

    :param package: The binary package shipping the library.
    :param version: The full source version, e.g. 1.1-3.
    :param dependency: The dependency mode.
    :param compat_level: The debhelper compatibility level.
    :return: the dependency relation
    """
    if dependency.mode is DependencyMode.EXPLICIT_RELATION:
        return dependency.relation

    if dependency.mode is DependencyMode.UPSTREAM_VERSION:
        if compat_level >= STRIP_REVISION_COMPAT_LEVEL:
            version = strip_revision(version)
        return f"{package} (>= {version})"

    return package


def udeb_dependency(dependency: str, package: str, udeb_package: str) -> str:
    """Derive the dependency relation for the udeb variant of a library.

    The first occurrence of the package name in the dependency is replaced by
    the udeb package name. Relations not mentioning the package are returned
    as they are.
    """
    return dependency.replace(package, udeb_package, 1)


class ShlibsCollector:
    """Accumulate shlibs lines of one binary package.

    Lines are kept in the order they were added, duplicates are dropped.
    """

    def __init__(self, package: str, config: MakeshlibsConfig):
        self.package = package
        self.config = config

        self.lines: list[str] = []
        self.udeb_lines: list[str] = []
        self.lib_files: list[Path] = []
        self.versioned_files: list[Path] = []
        self.need_ldconfig = False
        self.unversioned_so = False

        self._seen: set[str] = set()

    def add(self, library: str, major: Optional[str], dependency: str) -> bool:
        """Add a shlibs line for a library.

        :param library: The library name derived from the SONAME.
        :param major: The major version derived from the SONAME, overridden by
            the configured major version, if any.
        :param dependency: The dependency relation.
        :return: whether or not the library qualified for a shlibs line
        """
        if self.config.major is not None:
            major = self.config.major

        if not library or not major or not dependency:
            return False

        self.need_ldconfig = True

        line = f"{library} {major} {dependency}"
        if line in self._seen:
            return True
        self._seen.add(line)
        self.lines.append(line)

        if self.config.add_udeb:
            udeb_dep = udeb_dependency(dependency, self.package, self.config.add_udeb)
            self.udeb_lines.append(f"udeb: {library} {major} {udeb_dep}")

        return True

    @property
    def all_lines(self) -> list[str]:
        return self.lines + self.udeb_lines


def _ensure_control_dir(tmpdir: Path, no_act: bool) -> Path:
    control_dir = tmpdir / "DEBIAN"
    log.debug("install -d %s", control_dir)
    if not no_act:
        control_dir.mkdir(mode=CONTROL_DIR_MODE, parents=True, exist_ok=True)
    return control_dir


def remove_shlibs(tmpdir: Path, no_act: bool = False) -> None:
    shlibs = tmpdir / "DEBIAN" / "shlibs"
    log.debug("rm -f %s", shlibs)
    if not no_act:
        shlibs.unlink(missing_ok=True)


def install_shlibs_override(override: Path, tmpdir: Path, no_act: bool = False) -> Path:
    """Copy a hand-written shlibs file verbatim into the control directory."""
    target = _ensure_control_dir(tmpdir, no_act) / "shlibs"
    log.debug("install -m0644 %s %s", override, target)
    if not no_act:
        shutil.copyfile(override, target)
        target.chmod(SHLIBS_FILE_MODE)
    return target


def write_shlibs(lines: list[str], tmpdir: Path, no_act: bool = False) -> Path:
    """Write computed shlibs lines into the control directory.

    The lines are written to a temporary file next to the target first, so a
    failure never leaves a partial shlibs file behind.
    """
    target = _ensure_control_dir(tmpdir, no_act) / "shlibs"
    log.debug("echo '%s' > %s", "\\n".join(lines), target)
    if not no_act:
        tmp_shlibs = NamedTemporaryFile(
            "w", encoding="utf-8", dir=target.parent, prefix=".shlibs-", delete=False
        )
        tmp_path = Path(tmp_shlibs.name)
        try:
            with tmp_shlibs:
                for line in lines:
                    print(line, file=tmp_shlibs)
            tmp_path.chmod(SHLIBS_FILE_MODE)
            os.replace(tmp_path, target)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
    return target
