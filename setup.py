#!/usr/bin/env python3
"""
Setup script for anotherpass
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="anotherpass",
    version="1.0.0",
    author="Tyler Zervas",
    author_email="tz-dev@vectorweight.com",
    description="Secondary password authentication for multi-user login gates",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/tzervas/anotherpass",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Systems Administration :: Authentication/Directory",
    ],
    python_requires=">=3.10",
    install_requires=[
        "click>=8.1",
        "cryptography>=41.0",
        "pydantic>=2.0",
        "pydantic-settings>=2.7",
        "rich>=13.0",
        "structlog>=23.1",
        "pywin32>=306; sys_platform == 'win32'",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "anotherpass=anotherpass.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
