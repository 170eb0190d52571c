#!/usr/bin/env python3
"""
Setup script for Quill.
"""

from setuptools import setup, find_packages

setup(
    name="quill-serializer",
    version="0.3.0",
    description="Declarative field selection and serialization for Python objects",
    author="Quill Contributors",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
        "python-dotenv>=1.0.0",
        "lxml>=4.9.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries",
    ],
    keywords="serializer serialization fields json xml yaml",
)
