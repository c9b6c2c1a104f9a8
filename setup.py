# setup.py
from setuptools import setup, find_packages

setup(
    name="pivx-indexer",
    version="0.1.0",  # Match __version__ in src/pivx_indexer/__init__.py
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "aiohttp>=3.8",
        "aiofiles>=0.8",
        "base58>=2.1",
        "pydantic>=1.10",
        "PyYAML>=6.0",
        "fastapi>=0.95",
        "uvicorn>=0.15.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "pytest-cov>=4.1",
            "pytest-mock>=3.10",
            "httpx>=0.24",
        ],
    },
    entry_points={
        "console_scripts": [
            "pivx-indexer=pivx_indexer.cli.cli:main",
        ],
    },
    description="Address index for the PIVX chain, built from block files or a node's RPC",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
