"""
Output Package

Turns layout plans into PDF bytes and packages them: ReportLab drawing,
PyMuPDF page operations, interchange exports and the ZIP archive.
"""

from .archive import ArchiveManifest, NameRegistry, random_passcode, requests_to_zip, to_file_safe_string
from .assembler import build_request_pdf, merge_pdfs, requests_to_pdf, stamp_headers
from .interchange import build_interchange, to_json, to_jsonp, viewer_html

__all__ = [
    "ArchiveManifest",
    "NameRegistry",
    "build_interchange",
    "build_request_pdf",
    "merge_pdfs",
    "random_passcode",
    "requests_to_pdf",
    "requests_to_zip",
    "stamp_headers",
    "to_file_safe_string",
    "to_json",
    "to_jsonp",
    "viewer_html",
]
