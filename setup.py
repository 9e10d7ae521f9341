#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Minimal setup.py for dimred.

All metadata, dependencies and package discovery live in pyproject.toml; this
file only lets legacy tooling that still calls setup.py directly build the
package.
"""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
