import logging
from pathlib import Path

import pytest

from .common import CHANGELOG_TEMPLATE, CONTROL_TEMPLATE


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Ensure tests aren’t influenced by debhelper environment variables."""
    for name in ("DEB_HOST_ARCH", "DH_COMPAT", "DH_VERBOSE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_root_logger():
    """Keep log level changes done by CLI tests isolated."""
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)

    yield

    root.setLevel(level)
    root.handlers[:] = handlers


@pytest.fixture
def compat_level(request) -> int:
    """
    This fixture exists to be substituted into the *debian_dir* fixture
    indirectly, or else provide a default of 13.
    """
    return getattr(request, "param", 13)


@pytest.fixture
def version(request) -> str:
    """
    This fixture exists to be substituted into the *debian_dir* fixture
    indirectly, or else provide a default of 1.1-3.
    """
    return getattr(request, "param", "1.1-3")


@pytest.fixture
def extra_packages(request) -> str:
    """Additional binary package paragraphs for debian/control."""
    return getattr(request, "param", "")


@pytest.fixture
def debian_dir(tmp_path, compat_level, version, extra_packages) -> Path:
    """Generate the debian/ directory of a source package.

    The source package builds libfoobar1 and whatever is passed in as
    *extra_packages*.
    """
    debian_dir = tmp_path / "debian"
    debian_dir.mkdir()

    (debian_dir / "control").write_text(
        CONTROL_TEMPLATE.format(
            build_depends=f"debhelper-compat (= {compat_level})",
            extra_packages=f"\n{extra_packages}" if extra_packages else "",
        )
    )
    (debian_dir / "changelog").write_text(CHANGELOG_TEMPLATE.format(version=version))

    yield debian_dir
