"""Setup script for ytfeed."""

from pathlib import Path

from setuptools import find_packages, setup

with Path("README.md").open() as file:
    long_description = file.read()

setup(
    name="ytfeed",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    description="Personal YouTube feed that merges the recent uploads of the channels "
    "you follow, grouped in profiles",
    long_description=long_description,
    long_description_content_type="text/markdown",
    install_requires=[
        "fastapi~=0.115.0",
        "httpx~=0.28.1",
        "uvicorn~=0.34.0",
        "aiofiles~=24.1.0",
        "python-dotenv~=1.0.1",
        "typing_extensions>=4.12.2",
    ],
    extras_require={
        "test": [
            "pytest~=8.3.4",
            "pytest-asyncio~=0.25.0",
            "respx~=0.22.0",
        ],
        "docs": [
            "sphinx~=8.1.3",
            "furo~=2024.8.6",
        ],
    },
    license="MIT",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
)
