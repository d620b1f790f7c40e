from setuptools import setup, find_packages

setup(
    name="huck",
    version="0.1.0",
    description="Huck — scanner, precedence-climbing parser and type checker for a small expression language",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "llvmlite>=0.41.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "huck=huck.cli:main",
        ],
    },
)
