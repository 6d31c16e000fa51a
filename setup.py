# -*- coding: utf-8 -*-

import os
import re

from setuptools import find_packages, setup

extras_require = {
    "test": [
        "pytest>=6.2.5",
        "pytest-cov>=2.10",
        "pytest-instafail>=0.4",
        "pytest-xdist>=2.5",
        "hypothesis>=5.37.1",
    ],
    "lint": [
        "black==23.12.0",
        "flake8==6.1.0",
        "flake8-bugbear==23.12.2",
        "flake8-use-fstring==1.4",
        "isort==5.13.2",
        "mypy==1.5",
    ],
    "dev": ["ipython", "pre-commit", "twine"],
}

extras_require["dev"] = extras_require["test"] + extras_require["lint"] + extras_require["dev"]

long_description = ""
if os.path.exists("README.md"):
    with open("README.md", "r") as f:
        long_description = f.read()


def _read_version():
    with open(os.path.join("tokenledger", "version.py")) as f:
        return re.search(r"^version = \"(.+)\"", f.read(), re.M).group(1)


setup(
    name="tokenledger",
    version=_read_version(),
    description="Fixed-supply fungible token ledger behind an ERC20 call interface",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="",
    author_email="",
    license="Apache License 2.0",
    keywords="ethereum evm erc20 token ledger",
    include_package_data=True,
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.10,<4",
    install_requires=[
        "pycryptodome>=3.5.1,<4",
        "eth-abi>=4.0.0",
        "eth-utils>=2.0.0",
    ],
    tests_require=extras_require["test"],
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "tokenledger=tokenledger.cli.ledger_run:_parse_cli_args",
        ]
    },
    classifiers=[
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
