"""Setup configuration for the Cocktail Order Engine."""

from setuptools import setup, find_namespace_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="cocktail-order-engine",
    version="0.1.0",
    description="Shopping lists and booking change summaries for cocktail events",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["src", "src.*"], exclude=["src.tests", "src.tests.*"]),
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "cocktail-order=src.main:main",
        ],
    },
)
