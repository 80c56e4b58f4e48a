"""
Setup script for skills-wallet.

Skills Wallet is the skill-tracking backend of the membership portal:

1. Catalog - Skills and their ordered content items
2. Assignments - Which member has which skill, with admin decisions
3. Progress - One reconciled view per (member, skill), computed on read

The 'skills-wallet' command is the maintenance CLI; the API is served
with uvicorn from skills_wallet.api.main:app.
"""

from setuptools import find_packages, setup

setup(
    name="skills-wallet",
    version="1.0.0",
    description="Skill assignment and progress reconciliation for a membership portal",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # API
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        "psycopg2-binary>=2.9.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "httpx>=0.25.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "skills-wallet=skills_wallet.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: FastAPI",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="skills progress membership portal",
)
