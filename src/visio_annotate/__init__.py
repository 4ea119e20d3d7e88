"""
Visio Annotate - bounding-box annotation of image folders.

Keeps per-image rectangle annotations in an ``annotations.json`` sidecar,
follows the working folder as files come and go, and exports re-encoded
copies of the images together with their annotations.
"""

__version__ = "1.0.0"
__author__ = "Visio Annotate Team"
