from pathlib import Path

from setuptools import find_packages, setup


HERE = Path(__file__).parent
with (HERE / "requirements.txt").open("r") as f:
    INSTALL_REQUIRES = [x.strip() for x in f.readlines() if x.strip()]
with (HERE / "test_requirements.txt").open("r") as f:
    TESTS_REQUIRE = [x.strip() for x in f.readlines() if x.strip()]
with (HERE / "makeshlibs" / "version.py").open("r") as f:
    version = {}
    exec(f.read(), version)
    VERSION = version["__version__"]


setup(
    name="makeshlibs",
    version=VERSION,
    description="Debian helper generating shlibs control files for shared libraries",
    # Possible options are at https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        "Development Status :: 3 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Build Tools",
        "Topic :: System :: Archiving :: Packaging",
    ],
    license="MIT",
    platforms=["Debian", "GNU/Linux"],
    keywords="debian debhelper shlibs",
    packages=find_packages(include=["makeshlibs", "makeshlibs.*"]),
    include_package_data=True,
    package_data={},
    zip_safe=False,
    python_requires=">=3.10",
    install_requires=INSTALL_REQUIRES,
    tests_require=TESTS_REQUIRE,
    extras_require={"test": TESTS_REQUIRE},
    entry_points={
        "console_scripts": [
            "makeshlibs = makeshlibs.cli:main",
            "dh_makeshlibs = makeshlibs.cli:dh_makeshlibs",
        ]
    },
)
