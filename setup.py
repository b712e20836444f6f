"""Setup script for instrumentation_sharding package."""

from setuptools import setup, find_packages

setup(
    name="instrumentation-sharding",
    version="1.0.0",
    description="Deterministic sharding and device work distribution for instrumentation test runs",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml>=5.4",
        "click>=8.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "shard-tests=instrumentation_sharding.cli.main:cli",
        ],
    },
)
