"""PDF inspection helpers.

Provides:
- get_page_count: number of pages in a PDF file

These only read PDFs. Rendering and writing is left to the external tools.
"""

from pathlib import Path

import fitz  # PyMuPDF


def get_page_count(pdf_path: Path) -> int:
    """Get number of pages in a PDF."""
    doc = fitz.open(str(pdf_path))
    try:
        return len(doc)
    finally:
        doc.close()
