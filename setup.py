# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Setup configuration for oauth-gateway package."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="oauth-gateway",
    version="0.1.0",
    author="oauth-gateway contributors",
    description="Google and GitHub sign-in gateway issuing provider-agnostic identity tokens",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["oauth_gateway", "oauth_gateway.*", "gateway_logging", "gateway_logging.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.109.0",  # HTTP routes, request/response types
        "starlette>=0.49.1",  # Exception handling and CORS middleware
        "httpx>=0.27.0",  # Outbound calls to provider token and profile endpoints
        "PyJWT>=2.8.0",  # Credential signing and verification
        "pydantic>=2.4.0",  # Response models
        "uvicorn>=0.27.0",  # ASGI server
        "python-dotenv>=1.0.0",  # Optional .env file at startup
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "pylint>=3.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "oauth-gateway=oauth_gateway.main:main",
        ],
    },
)
