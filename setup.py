#!/usr/bin/env python3
"""
Setup configuration for lyric-resolver
Resolve free-text track/artist queries to catalog entries and decode their lyrics
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "click>=8.1.7",
    "pyyaml>=6.0.1",
    "requests>=2.31.0",
    "colorama>=0.4.6",
    "python-dotenv>=1.0.0",
    "pycryptodome>=3.19.0",
]

test_requirements = [
    "pytest>=7.4.3",
]

setup(
    name="lyric-resolver",
    version="1.0.0",
    author="lyric-resolver contributors",
    description="Match track/artist queries to QQ Music entries and decode their encrypted lyrics",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["lyric_resolver", "lyric_resolver.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Text Processing",
    ],
    python_requires=">=3.8",
    install_requires=core_requirements,
    extras_require={
        "test": test_requirements,
        "dev": test_requirements + [
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lyric-resolver=lyric_resolver.main:cli",
        ],
    },
    include_package_data=True,
    package_data={
        "lyric_resolver": ["config/*.yaml"],
    },
    keywords="lyrics lrc qrc qq-music matching cli",
)
