"""Setup configuration for roomwatch."""

from setuptools import setup, find_packages

setup(
    name="roomwatch",
    version="0.0.1",
    description="Inbound message pipeline, command runner and auto-moderation for a pipe-delimited chat server",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "PyYAML>=6.0",
        "prompt_toolkit>=3.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "roomwatch=roomwatch.main:main",
        ],
    },
)
