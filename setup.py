#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from setuptools import find_packages, setup

setup(
    name="mlcore",
    version="0.1.0",
    description="Tensor shapes, content-addressed tensors, op specifications and graph IR",
    license="BSD-3-Clause",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "numpy",
        "typing_extensions",
        "strictyaml",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "mlcore-graph=mlcore.cli.graph_tool:main",
        ],
    },
)
