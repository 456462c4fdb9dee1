"""Setup for TomatoClock.

Install for development:
    pip install -e ".[tests]"

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

from setuptools import setup, find_packages

APP = ["main.py"]
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,
    "plist": {
        "CFBundleName": "TomatoClock",
        "CFBundleDisplayName": "TomatoClock",
        "CFBundleIdentifier": "com.tomatoclock.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "NSHighResolutionCapable": True,
        "LSUIElement": True,
        "LSMinimumSystemVersion": "13.0",
    },
}

setup(
    app=APP,
    name="TomatoClock",
    version="0.1.0",
    packages=find_packages(include=["tomatoclock", "tomatoclock.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.4",
        "SQLAlchemy>=2.0",
        "numpy>=1.24",
    ],
    extras_require={
        "tests": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["tomatoclock=tomatoclock.__main__:main"],
    },
    options={"py2app": OPTIONS},
)
