import fnmatch
import logging
import os
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Optional, Union

from elftools.common.exceptions import ELFError, ELFParseError
from elftools.elf.elffile import ELFFile

log = logging.getLogger(__name__)

ELF_MAGIC = b"\x7fELF"
SHARED_LIBRARY_PATTERNS = ("*.so", "*.so.*")

ExcludePredicate = Callable[[Path], bool]


def exclude_matcher(
    patterns: Iterable[str], staging_dir: Optional[Path] = None
) -> Optional[ExcludePredicate]:
    """Build a predicate excluding paths that contain any of the patterns.

    With a staging directory, paths are matched the way debhelper shows them,
    i.e. as debian/<package>/..., whatever the debian/ directory is called
    from the current working directory.

    :param patterns: Substrings to look for anywhere in a path.
    :param staging_dir: The staging directory the paths are located in.
    :return: the predicate or None if no (non-empty) pattern was given
    """
    patterns = tuple(pattern for pattern in patterns if pattern)
    if not patterns:
        return None

    def is_excluded(path: Path) -> bool:
        if staging_dir is not None:
            path = Path(staging_dir.parent.name, staging_dir.name, path.relative_to(staging_dir))
        path = str(path)
        return any(pattern in path for pattern in patterns)

    return is_excluded


def is_shared_library_name(name: str) -> bool:
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in SHARED_LIBRARY_PATTERNS)


def is_shared_object(path: Union[Path, str]) -> bool:
    """Check whether a file is an ELF shared object.

    Files which aren’t ELF at all, or whose headers can’t be parsed, are
    reported as not being shared objects.
    """
    with open(path, "rb") as fp:
        if fp.read(len(ELF_MAGIC)) != ELF_MAGIC:
            return False
        fp.seek(0)
        try:
            elf = ELFFile(fp)
        except (ELFError, ELFParseError) as exc:
            log.debug("Couldn’t parse ELF header of %s: %s", path, exc)
            return False
        return elf["e_type"] == "ET_DYN"


def _candidates(root: Path, exclude: Optional[ExcludePredicate]) -> list[Path]:
    candidates = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            if not is_shared_library_name(filename):
                continue
            path = Path(dirpath, filename)
            # development symlinks (libfoo.so -> libfoo.so.1) are skipped
            if path.is_symlink() or not path.is_file():
                continue
            if exclude and exclude(path):
                log.debug("Excluding %s", path)
                continue
            candidates.append(path)

    # Same order as `LC_ALL=C sort`
    candidates.sort(key=os.fsencode)
    return candidates


def find_shared_libraries(
    root: Union[Path, str], exclude: Optional[ExcludePredicate] = None
) -> Iterator[Path]:
    """Find the shared libraries within a staging directory.

    :param root: The directory to search.
    :param exclude: A predicate for paths which should be skipped.
    :return: an iterator over the shared object files, in byte-wise order of
        their paths
    """
    if not isinstance(root, Path):
        root = Path(root)

    if not root.is_dir():
        log.debug("Staging directory %s doesn’t exist", root)
        return

    for path in _candidates(root, exclude):
        if is_shared_object(path):
            yield path
        else:
            log.debug("Skipping %s: not an ELF shared object", path)
