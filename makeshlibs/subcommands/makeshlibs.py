import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import NamedTuple, Optional, Union

from ..exc import GensymbolsFailure
from ..gensymbols import libraries_for_compat, run_gensymbols
from ..package import (
    BinaryPackage,
    pkgfile,
    read_binary_packages,
    read_source_version,
    select_packages,
    tmpdir,
)
from ..scanner import exclude_matcher, find_shared_libraries
from ..shlibs import (
    DependencyMode,
    MakeshlibsConfig,
    ShlibsCollector,
    build_dependency,
    install_shlibs_override,
    remove_shlibs,
    write_shlibs,
)
from ..soname import read_soname
from ..triggers import register_ldconfig

log = logging.getLogger(__name__)


class PackageResult(NamedTuple):
    package: str
    lines: list[str]
    needs_ldconfig: bool
    gensymbols_failure: Optional[str] = None


def needs_ldconfig_trigger(collector: ShlibsCollector, has_symbols_file: bool) -> bool:
    """Decide whether a package needs its dynamic linker cache refreshed.

    Libraries without versioned SONAME but with a symbols file still need it.
    """
    return collector.need_ldconfig or (has_symbols_file and collector.unversioned_so)


def scan_package(
    package: str, staging_dir: Path, version: Optional[str], config: MakeshlibsConfig
) -> ShlibsCollector:
    """Collect the shlibs lines for the libraries in a staging directory."""
    collector = ShlibsCollector(package, config)
    dependency = build_dependency(package, version, config.dependency, config.compat_level)

    exclude = exclude_matcher(config.exclude, staging_dir=staging_dir)
    for path in find_shared_libraries(staging_dir, exclude=exclude):
        collector.lib_files.append(path)

        info = read_soname(path, objdump=config.objdump)
        if info.unversioned:
            log.debug("%s has an unversioned SONAME", path)
            collector.unversioned_so = True
        if info.descriptor is None:
            continue

        if collector.add(info.descriptor.library, info.descriptor.major, dependency):
            collector.versioned_files.append(path)

    return collector


def process_package(
    package: str,
    debian_dir: Union[Path, str],
    version: Optional[str],
    config: MakeshlibsConfig,
    *,
    is_main_package: bool = False,
) -> PackageResult:
    """Generate the shlibs file of one binary package.

    :param package: The binary package name.
    :param debian_dir: The debian/ directory of the source package.
    :param version: The full source package version, only needed to build
        versioned dependency relations.
    :param config: The configuration of this run.
    :param is_main_package: Whether this is the first package of the source,
        which may use packager-provided files without package prefix.
    :return: what was done for the package
    """
    debian_dir = Path(debian_dir)
    staging_dir = tmpdir(debian_dir, package)

    collector = scan_package(package, staging_dir, version, config)

    remove_shlibs(staging_dir, no_act=config.no_act)

    shlibs_override = pkgfile(debian_dir, package, "shlibs", is_main_package=is_main_package)
    if shlibs_override:
        log.debug("Using packager-provided %s for %s", shlibs_override, package)
        install_shlibs_override(shlibs_override, staging_dir, no_act=config.no_act)
        lines = shlibs_override.read_text(encoding="utf-8", errors="replace").splitlines()
    elif collector.lines:
        lines = collector.all_lines
        write_shlibs(lines, staging_dir, no_act=config.no_act)
    else:
        lines = []

    failure = None
    symbols = pkgfile(debian_dir, package, "symbols", is_main_package=is_main_package)
    if symbols:
        libraries = libraries_for_compat(
            config.compat_level, collector.lib_files, collector.versioned_files
        )
        failure = run_gensymbols(
            package,
            symbols,
            staging_dir,
            libraries,
            config.gensymbols_params,
            no_act=config.no_act,
        )

    needs_ldconfig = needs_ldconfig_trigger(collector, has_symbols_file=symbols is not None)
    if needs_ldconfig and not config.no_scripts:
        register_ldconfig(debian_dir, package, config.compat_level, no_act=config.no_act)

    return PackageResult(
        package=package,
        lines=lines,
        needs_ldconfig=needs_ldconfig,
        gensymbols_failure=failure,
    )


def do_makeshlibs(
    debian_dir: Union[Path, str],
    config: MakeshlibsConfig,
    *,
    packages: Iterable[str] = (),
    excluded_packages: Iterable[str] = (),
    version: Optional[str] = None,
    binary_packages: Optional[Sequence[BinaryPackage]] = None,
    host_arch: Optional[str] = None,
) -> list[PackageResult]:
    """Generate shlibs files for the binary packages of a source package.

    :param debian_dir: The debian/ directory of the source package.
    :param config: The configuration of this run.
    :param packages: Act only on these packages (default: all).
    :param excluded_packages: Don’t act on these packages.
    :param version: The source version, read from debian/changelog if unset
        and needed for the dependency relation.
    :param binary_packages: The binary packages, read from debian/control if
        unset.
    :param host_arch: The host architecture, architecture dependent packages
        not built for it are skipped.
    :return: the results for each package acted on
    """
    debian_dir = Path(debian_dir)

    if binary_packages is None:
        binary_packages = read_binary_packages(debian_dir)
    if version is None and config.dependency.mode is DependencyMode.UPSTREAM_VERSION:
        version = read_source_version(debian_dir)

    main_package = binary_packages[0].name if binary_packages else None

    results = []
    for package in select_packages(
        binary_packages, packages, excluded_packages, host_arch=host_arch
    ):
        log.debug("Processing %s", package.name)
        results.append(
            process_package(
                package.name,
                debian_dir,
                version,
                config,
                is_main_package=package.name == main_package,
            )
        )

    failures = [result for result in results if result.gensymbols_failure]
    if failures:
        raise GensymbolsFailure(
            "dpkg-gensymbols failed for "
            + ", ".join(result.package for result in failures),
            detail="\n".join(result.gensymbols_failure for result in failures),
        )

    return results
