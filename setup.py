#!/usr/bin/env python3

"""
Setup script.

Package metadata lives in setup.cfg.
"""

import setuptools

setuptools.setup()
