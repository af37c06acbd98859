"""Setup script for backward compatibility with older pip versions."""
from setuptools import setup, find_packages

setup(
    name="imbstream",
    version="0.1.0",
    packages=find_packages(include=["imbstream", "imbstream.*"]),
    package_dir={"": "."},
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.22",
        "river>=0.21",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
