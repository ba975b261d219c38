# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

import os
import re

from setuptools import find_packages, setup


def read_version():
    init_py = os.path.join(os.path.dirname(__file__), "batchnet", "__init__.py")
    with open(init_py, encoding="utf-8") as f:
        match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.MULTILINE)
    if match is None:
        raise RuntimeError("Unable to find __version__ in batchnet/__init__.py")
    return match.group(1)


setup(
    name="batchnet",
    version=read_version(),
    description="Batch-resizing serving sessions for fixed-topology inference nets",
    author="Wahyu Ardiansyah",
    license="Apache-2.0",
    packages=find_packages(include=["batchnet", "batchnet.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24",
        "onnx>=1.14",
        "protobuf>=3.20",
    ],
    extras_require={
        "cuda": ["cupy-cuda12x"],
        "test": ["pytest>=7.0", "hypothesis>=6.0"],
    },
)
