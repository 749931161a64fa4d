# -*- coding: utf-8 -*-

import os.path

import setuptools


def readme():
    """Load README contents."""
    path = os.path.join(os.path.dirname(__file__), "README.rst")
    with open(path) as readme:
        return readme.read()


setuptools.setup(
    name="python-sourcercon",
    version="0.1.0",
    description=("Blocking client for the Source RCON protocol: "
                 "authenticate against and run commands on game servers."),
    long_description=readme(),
    long_description_content_type="text/x-rst",
    packages=setuptools.find_packages(exclude=["tests"]),
    python_requires=">=3.6",
    install_requires=[
        "monotonic>=1.0",
    ],
    extras_require={
        "development": [
            "pylint",
        ],
        "test": [
            "mock",
            "pytest>=3.6.0",
            "pytest-cov",
            "pytest-timeout",
        ],
    },
    license="MIT License",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
        "Programming Language :: Python :: Implementation :: PyPy",
        "Topic :: Games/Entertainment",
    ],
)
