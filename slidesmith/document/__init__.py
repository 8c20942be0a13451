"""
Document package for SlideSmith.

Uploaded transcripts (.txt/.doc/.docx/.pdf) are turned into plain text here.
"""

from .extraction import extract_document_text

__all__ = ["extract_document_text"]
