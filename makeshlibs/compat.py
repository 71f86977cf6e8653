import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Optional, Union

from debian.deb822 import Deb822, PkgRelation

from .exc import CompatLevelError

log = logging.getLogger(__name__)

MIN_COMPAT_LEVEL = 3
LOWEST_VIRTUAL_COMPAT_LEVEL = 9
MAX_STABLE_COMPAT_LEVEL = 13
MAX_COMPAT_LEVEL = 14

# Levels below this one still work, but are scheduled for removal
DEPRECATED_BELOW_COMPAT_LEVEL = 7

compat_version_re = re.compile(r"^\s*(?P<level>\d+)\s*$")


def _parse_level(value: str, origin: str) -> int:
    match = compat_version_re.match(value)
    if not match:
        raise CompatLevelError(f"Invalid compatibility level {value!r} in {origin}")
    return int(match.group("level"))


def _level_from_build_depends(control: Path) -> Optional[int]:
    with control.open("r", encoding="utf-8") as fp:
        source = next(iter(Deb822.iter_paragraphs(fp)), None)

    if source is None:
        return None

    build_depends = source.get("Build-Depends", "")
    for alternatives in PkgRelation.parse_relations(build_depends):
        for relation in alternatives:
            if relation["name"] != "debhelper-compat":
                continue
            version = relation.get("version")
            if not version or version[0] != "=":
                raise CompatLevelError(
                    "The debhelper-compat build dependency must use an exact version",
                    detail=f"Build-Depends: {build_depends}",
                )
            return _parse_level(version[1], f"{control} (Build-Depends)")

    return None


def read_compat_level(
    debian_dir: Union[Path, str], env: Optional[Mapping[str, str]] = None
) -> int:
    """Determine the debhelper compatibility level of a source package.

    The environment variable DH_COMPAT takes precedence, followed by a
    ``debhelper-compat (= N)`` build dependency, followed by debian/compat.

    :param debian_dir: The debian/ directory of the source package.
    :param env: The environment, e.g. os.environ.
    :return: the compatibility level
    """
    if not isinstance(debian_dir, Path):
        debian_dir = Path(debian_dir)

    level = None
    origin = None

    if env and env.get("DH_COMPAT"):
        origin = "DH_COMPAT"
        level = _parse_level(env["DH_COMPAT"], origin)

    control = debian_dir / "control"
    if level is None and control.exists():
        level = _level_from_build_depends(control)
        origin = f"{control} (Build-Depends)"

    compat_file = debian_dir / "compat"
    if compat_file.exists():
        if level is None:
            origin = str(compat_file)
            level = _parse_level(compat_file.read_text(encoding="utf-8").split("\n")[0], origin)
        elif origin != "DH_COMPAT":
            raise CompatLevelError(
                f"The compatibility level is specified both in {compat_file} and via"
                + " Build-Depends: debhelper-compat"
            )

    if level is None:
        raise CompatLevelError(
            "Please specify the compatibility level in debian/compat or via"
            + " Build-Depends: debhelper-compat (= X)"
        )

    check_compat_level(level)
    log.debug("Using compatibility level %d (from %s)", level, origin)

    return level


def check_compat_level(level: int) -> None:
    if level < MIN_COMPAT_LEVEL:
        raise CompatLevelError(
            f"Compatibility levels before {MIN_COMPAT_LEVEL} are no longer supported"
            + f" (level {level} requested)"
        )
    if level > MAX_COMPAT_LEVEL:
        raise CompatLevelError(
            f"Sorry, but {MAX_COMPAT_LEVEL} is the highest compatibility level supported"
            + f" (level {level} requested)"
        )

    if level < DEPRECATED_BELOW_COMPAT_LEVEL:
        log.warning("Compatibility levels before %d are deprecated", DEPRECATED_BELOW_COMPAT_LEVEL)
    elif level > MAX_STABLE_COMPAT_LEVEL:
        log.warning("Compatibility level %d is in beta, changes may occur", level)


def supported_virtual_levels() -> list[int]:
    """Compatibility levels selectable via the debhelper-compat virtual package."""
    return list(range(LOWEST_VIRTUAL_COMPAT_LEVEL, MAX_COMPAT_LEVEL + 1))
