"""
Wheel build that leaves out the desktop front end.

The Scope deployment only needs the engine, the pipeline and the plugin
hook. viewer.py imports pygame, which Scope does not ship, and __main__.py
is the launcher for that viewer, so both stay in the source tree only.
"""

from setuptools import setup
from setuptools.command.build_py import build_py as _build_py


# Desktop-only modules (pygame window and its launcher)
_EXCLUDE_MODULES = {"viewer", "__main__"}


class BuildPy(_build_py):
    """build_py that drops the desktop-only modules from symmetric_chaos."""

    def find_package_modules(self, package, package_dir):
        modules = super().find_package_modules(package, package_dir)
        return [
            (pkg, mod, path)
            for (pkg, mod, path) in modules
            if mod not in _EXCLUDE_MODULES
        ]


setup(
    cmdclass={"build_py": BuildPy},
)
