"""
Image Batch Converter CLI
Command line front end for batch conversion, zip and PDF export
"""

from imagebatch import __version__

__all__ = ["__version__"]
