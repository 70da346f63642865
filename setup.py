#!/usr/bin/env python
# coding: utf-8

from setuptools import setup
from pathlib import Path
import os

_version_ns = {}
exec(
    Path(os.path.join(os.path.dirname(__file__), "simone_prompts", "version.py")).read_text(),
    _version_ns,
)
__version__ = _version_ns["__version__"]
__author__ = _version_ns["__author__"]

readme = Path(os.path.join(os.path.dirname(__file__), "README.md")).read_text()
version = __version__
requirements_file = os.path.join(os.path.dirname(__file__), "requirements.txt")
with open(requirements_file, "r") as requirements:
    install_requires = [
        line.strip()
        for line in requirements
        if line.strip() and not line.startswith("#")
    ]
description = "Resolve Simone prompts into fully rendered model messages"

setup(
    name="simone-prompts",
    version=f"{version}",
    description=description,
    long_description=f"{readme}",
    long_description_content_type="text/markdown",
    author=__author__,
    license="MIT",
    packages=["simone_prompts"],
    include_package_data=True,
    install_requires=install_requires,
    extras_require={"tests": ["pytest", "pytest-asyncio"]},
    package_data={
        "simone_prompts": [
            "templates/prompts/*.yaml",
            "templates/prompts/partials/*.j2",
        ]
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Environment :: Console",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.12",
    ],
    entry_points={
        "console_scripts": ["simone-prompts = simone_prompts.simone_prompts:main"]
    },
)
