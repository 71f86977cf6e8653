import logging
from pathlib import Path

from .version import __version__

log = logging.getLogger(__name__)

LDCONFIG_TRIGGER = "activate-noawait ldconfig"

# Before this compatibility level, ldconfig is run from maintainer scripts instead of a trigger
TRIGGER_COMPAT_LEVEL = 10

snippet_template = """# Automatically added by dh_makeshlibs/{version}
if [ "$1" = "{action}" ]; then
	ldconfig
fi
# End automatically added section
"""

SNIPPET_ACTIONS = {"postinst": "configure", "postrm": "remove"}


def triggers_file(debian_dir: Path, package: str) -> Path:
    return debian_dir / ".debhelper" / "generated" / package / "triggers"


def add_trigger(debian_dir: Path, package: str, trigger: str, *, no_act: bool = False) -> Path:
    """Register a trigger for a package, at most once."""
    target = triggers_file(debian_dir, package)
    if target.exists():
        existing = target.read_text(encoding="utf-8").splitlines()
    else:
        existing = []

    if trigger in existing:
        log.debug("Trigger %r already registered for %s", trigger, package)
        return target

    log.debug("echo '%s' >> %s", trigger, target)
    if not no_act:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("a", encoding="utf-8") as fp:
            print(trigger, file=fp)

    return target


def add_ldconfig_snippets(debian_dir: Path, package: str, *, no_act: bool = False) -> list[Path]:
    """Append ldconfig calls to the postinst/postrm script fragments of a package."""
    targets = []
    for script, action in SNIPPET_ACTIONS.items():
        target = debian_dir / f"{package}.{script}.debhelper"
        log.debug("Adding ldconfig to %s", target)
        if not no_act:
            with target.open("a", encoding="utf-8") as fp:
                fp.write(snippet_template.format(version=__version__, action=action))
        targets.append(target)
    return targets


def register_ldconfig(
    debian_dir: Path, package: str, compat_level: int, *, no_act: bool = False
) -> list[Path]:
    """Make sure the dynamic linker cache is refreshed after installation.

    :return: the files which (would) have been written to
    """
    if compat_level < TRIGGER_COMPAT_LEVEL:
        return add_ldconfig_snippets(debian_dir, package, no_act=no_act)
    return [add_trigger(debian_dir, package, LDCONFIG_TRIGGER, no_act=no_act)]
