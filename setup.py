# -*- coding: utf-8 -
import os
from setuptools import setup, find_packages


def read(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()


setup(
    name="vmspec",
    version="0.1.0",
    description="Specification schema and validation of microvms",
    license="GPL-3.0",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        ],
    keywords="MicroVM, Firecracker, Virtualization, Provisioning",
    long_description=read("README.rst"),
    packages=find_packages(),
    python_requires=">=3.8",
    install_requires=[
        "jsonschema>=4.0",
        "netaddr>=0.8",
        "PyYAML>=5.4",
        "rich>=12.0",
    ],
    extras_require={
        "test": [
            "pytest",
            "ddt",
        ],
    },
    include_package_data=True
)
