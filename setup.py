#!/usr/bin/env python
from subprocess import call

from setuptools import Command, setup


REQUIREMENTS = [
    "numpy",
    "pandas>=2.0",
    "pandas-indexing",
    "PyYAML",
    "openpyxl",
    "xlsxwriter",
    "matplotlib",
]

EXTRA_REQUIREMENTS = {
    "tests": ["pytest", "coverage", "pytest-cov"],
    "deploy": ["twine", "setuptools", "wheel"],
}


class RunTests(Command):
    """Run all tests."""

    description = "run tests"
    user_options = []

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    def run(self):
        """Run all tests!"""
        errno = call(["py.test", "--cov=lagshift", "--cov-report=term-missing"])
        raise SystemExit(errno)


CMDCLASS = {"test": RunTests}


def main():
    classifiers = [
        "License :: OSI Approved :: Apache Software License",
    ]
    packages = [
        "lagshift",
    ]
    pack_dir = {
        "": "src",
    }
    entry_points = {
        "console_scripts": [
            # list CLIs here
            "lagshift=lagshift.cli:main",
        ],
    }
    package_data = {
        # add explicit data files here
        # 'lagshift': [],
    }
    install_requirements = REQUIREMENTS
    extra_requirements = EXTRA_REQUIREMENTS
    setup_kwargs = {
        "name": "lagshift",
        "version": "0.1.0",
        "description": "Re-base climate scenario emission intensities onto "
        "current market intensities for every lag year",
        "cmdclass": CMDCLASS,
        "classifiers": classifiers,
        "license": "Apache License 2.0",
        "packages": packages,
        "package_dir": pack_dir,
        "entry_points": entry_points,
        "package_data": package_data,
        "python_requires": ">=3.10",
        "install_requires": install_requirements,
        "extras_require": extra_requirements,
    }
    setup(**setup_kwargs)


if __name__ == "__main__":
    main()
