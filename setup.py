"""
Setup script for vocab-mastery.

vocab-mastery is the spaced-repetition engine behind the vocabulary
learning app. It serves three roles:

1. Scheduler - decides which vocabulary items are due for review
2. Mastery tracker - evolves per-learner retention state after each answer
3. Session engine - assembles and scores lesson and review sessions

The 'vocab-mastery' command runs review sessions from the terminal.
"""

from setuptools import find_packages, setup

setup(
    name="vocab-mastery",
    version="1.0.0",
    description="Spaced-repetition mastery engine for vocabulary learning",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["vocab_mastery", "vocab_mastery.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy[asyncio]>=2.0.0",
        "aiosqlite>=0.19.0",
        "asyncpg>=0.29.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Events
        "blinker>=1.6.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "vocab-mastery=vocab_mastery.cli:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition vocabulary education mastery",
)
