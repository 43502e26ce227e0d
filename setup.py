#!/usr/bin/env python3
"""
Setup script for password-kvstore
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="password-kvstore",
    version="0.1.0",
    description="Encrypted key/value store for credential records",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src"),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security :: Cryptography",
    ],
    python_requires=">=3.9",
    install_requires=[
        "argon2-cffi>=21.0",
        "click>=8.0",
        "cryptography>=41.0",
        "pydantic>=2.0",
        "rich>=12.0",
        "structlog>=22.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pwkv=password_kvstore.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
