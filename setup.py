"""
Setup script for coldflow.

This is a compatibility shim for older pip versions.
The actual package configuration (including the README long description)
is in pyproject.toml.
"""

from setuptools import setup

setup()
