import logging
import os
from pathlib import Path
from typing import Optional

import click

from ..compat import read_compat_level
from ..exc import MakeshlibsException
from ..shlibs import MakeshlibsConfig, resolve_dependency_mode
from ..subcommands.makeshlibs import do_makeshlibs
from ..subcommands.provides import do_gen_provides
from ..util import handle_expected_exceptions
from .base import setup_logging

log = logging.getLogger(__name__)

MAKESHLIBS_CONTEXT_SETTINGS = {"ignore_unknown_options": True}

_makeshlibs_options = (
    click.option(
        "--debian-dir",
        type=click.Path(file_okay=False, path_type=Path),
        default="debian",
        show_default=True,
        help="Directory containing the packaging files and staging directories",
    ),
    click.option("--major", "-m", help="Use this major number instead of the one in the SONAME"),
    click.option(
        "--version-info",
        "-V",
        is_flag=False,
        flag_value="Upstream-Version",
        default=None,
        help="Dependency relation for shlibs lines: 'Upstream-Version', 'None' or a literal"
        + " relation such as 'libfoo1 (>= 1.0)'",
    ),
    click.option(
        "--exclude",
        "-X",
        multiple=True,
        help="Don’t treat files containing this string in their path as shared libraries",
    ),
    click.option(
        "--no-scripts",
        "-n",
        is_flag=True,
        default=False,
        help="Don’t register the ldconfig trigger",
    ),
    click.option("--add-udeb", help="Also add udeb shlibs lines for this udeb package"),
    click.option("--package", "-p", "packages", multiple=True, help="Act on this package"),
    click.option(
        "--no-package", "-N", "excluded_packages", multiple=True, help="Don’t act on this package"
    ),
    click.option(
        "--no-act", is_flag=True, default=False, help="Only show what would be done"
    ),
    click.argument("gensymbols_params", nargs=-1, type=click.UNPROCESSED),
)


def makeshlibs_options(func):
    for option in reversed(_makeshlibs_options):
        func = option(func)
    return func


def dh_verbose() -> bool:
    return os.getenv("DH_VERBOSE", "") not in ("", "0")


def run_makeshlibs(
    debian_dir: Path,
    major: Optional[str],
    version_info: Optional[str],
    exclude: tuple[str, ...],
    no_scripts: bool,
    add_udeb: Optional[str],
    packages: tuple[str, ...],
    excluded_packages: tuple[str, ...],
    no_act: bool,
    gensymbols_params: tuple[str, ...],
) -> None:
    try:
        compat_level = read_compat_level(debian_dir, os.environ)
        config = MakeshlibsConfig(
            compat_level=compat_level,
            dependency=resolve_dependency_mode(version_info, compat_level),
            major=major,
            exclude=exclude,
            no_scripts=no_scripts,
            add_udeb=add_udeb,
            gensymbols_params=gensymbols_params,
            no_act=no_act,
        )
        results = do_makeshlibs(
            debian_dir,
            config,
            packages=packages,
            excluded_packages=excluded_packages,
            host_arch=os.environ.get("DEB_HOST_ARCH"),
        )
    except MakeshlibsException as exc:
        raise click.ClickException(str(exc)) from exc

    for result in results:
        for line in result.lines:
            log.debug("%s: %s", result.package, line)


@click.group(name="makeshlibs")
@click.option("--quiet", "-q", "log_level", flag_value=logging.WARNING, help="Be less talkative")
@click.option(
    "--debug",
    "--verbose",
    "-v",
    "log_level",
    flag_value=logging.DEBUG,
    help="Enable debugging output, also enabled by $DH_VERBOSE",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[int]):
    ctx.ensure_object(dict)
    if log_level is None and dh_verbose():
        log_level = logging.DEBUG
    ctx.obj["log_level"] = log_level

    setup_logging(log_level=log_level or logging.INFO)


# Subcommands


@cli.command(name="dh-makeshlibs", context_settings=MAKESHLIBS_CONTEXT_SETTINGS)
@makeshlibs_options
@handle_expected_exceptions
def generate_shlibs(**kwargs) -> None:
    """Generate shlibs files for the shared libraries of binary packages"""
    run_makeshlibs(**kwargs)


@cli.command()
@handle_expected_exceptions
def gen_provides() -> None:
    """Print the debhelper-compat virtual packages as a substvar"""
    print(do_gen_provides())


# Standalone dh_makeshlibs


@click.command(name="dh_makeshlibs", context_settings=MAKESHLIBS_CONTEXT_SETTINGS)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show what is being done")
@makeshlibs_options
@handle_expected_exceptions
def dh_makeshlibs(verbose: bool, **kwargs) -> None:
    """Generate shlibs files for the shared libraries of binary packages"""
    setup_logging(log_level=logging.DEBUG if verbose or dh_verbose() else logging.INFO)
    run_makeshlibs(**kwargs)
