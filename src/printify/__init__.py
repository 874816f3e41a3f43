"""printify: turn a PDF into a grayscale, contrast-enhanced PDF fitted to a paper format.

The heavy lifting is done by pdftoppm, ImageMagick, pdftk and Ghostscript;
this package validates input, runs the tools in order inside a temporary
workspace and cleans up after itself.

Usage:
    printify document.pdf -p letter -r 600
    python -m printify document.pdf
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
