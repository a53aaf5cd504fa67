import os
import sys

import setuptools
from setuptools import setup


# Utility function to read the README file.
# Used for the long_description.  It's nice, because now 1) we have a top level
# README file and 2) it's easier to type in the README file than to put a raw
# string in below ...
def read(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()


dependencies = [
    "chia-blockchain==2.4.4",
    "chia_rs>=0.5.2",
    "aiohttp==3.10.4",
    "setuptools>=56.1,<75.7",
    "PyYAML>=6.0",
    "click>=8.1",
]

dev_dependencies = [
    "pytest==8.3.4",
    "pytest-asyncio>=0.23",
    "types-pyyaml==6.0.12.20240917",
    "types-setuptools==75.6.0.20241126",
]

kwargs = dict(
    name="chia-farmer-config",
    version="0.1",
    description=("Generate a standalone farmer configuration from a Chia mnemonic."),
    license="Apache-2.0",
    packages=setuptools.find_packages(exclude=("tests",)),
    package_data={"farmer_config": ["defaults.yaml"]},
    install_requires=dependencies,
    extras_require=dict(
        dev=dev_dependencies,
    ),
    entry_points={
        "console_scripts": ["farmer-config = farmer_config.cli:main"],
    },
    long_description=read("README.md"),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Topic :: Utilities",
        "License :: OSI Approved :: Apache Software License",
    ],
)

if "setup_file" in sys.modules:
    # include dev deps in regular deps when run in snyk
    dependencies.extend(dev_dependencies)

setup(**kwargs)  # type: ignore
