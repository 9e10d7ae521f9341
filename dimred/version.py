# dimred/version.py
"""
dimred Version Information

Version number and package metadata, exposed as dimred.__version__.

dimred follows semantic versioning (MAJOR.MINOR.PATCH).
"""

VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0

__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

__title__ = "dimred"
__description__ = "Principal component analysis with distance-preservation checks"
__license__ = "MIT"
__author__ = "dimred developers"
__copyright__ = "Copyright 2026 dimred developers"
