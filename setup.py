#!/usr/bin/env python3
"""Setup script for the Article Rewrite Agent."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="article-rewrite-agent",
    version="0.1.0",
    author="Article Rewrite Team",
    author_email="team@example.com",
    description="Agent that rewrites the newest article using web references and an LLM",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/article-rewrite-agent",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Information Technology",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP :: Indexing/Search",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Topic :: Text Processing :: Linguistic",
    ],
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.5",
        "pydantic-settings>=2.2",
        "httpx>=0.27",
        "aiohttp>=3.9",
        "selectolax>=0.3,<1.0",
        "structlog>=24.1",
        "click>=8.1",
        "pyyaml>=6.0",
        "openai>=1.97.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.2",
            "pytest-asyncio>=0.23",
            "ruff>=0.4",
            "mypy>=1.10",
            "coverage>=7.5",
            "pytest-cov>=4.1",
        ]
    },
    entry_points={
        "console_scripts": [
            "article-rewriter=rewrite_agent.orchestrator:cli",
        ],
    },
    include_package_data=True,
    package_data={
        "rewrite_agent": ["*.yaml"],
    },
)
