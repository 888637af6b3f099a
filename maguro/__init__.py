"""
maguro: a fast YouTube and DASH downloader.
"""

__version__ = "0.1.0"
