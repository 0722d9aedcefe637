# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Setup configuration for levelog package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="levelog",
    version="0.1.0",
    author="Levelog Contributors",
    description="Leveled, template-driven logging with environment defaults and dump-on-error buffering",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Logging",
    ],
    python_requires=">=3.10",
    install_requires=[
        # Standard library only
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "hypothesis>=6.0.0",  # Property-based tests for the format compiler
            "pylint>=3.0.0",
            "mypy>=1.0.0",
        ],
    },
)
