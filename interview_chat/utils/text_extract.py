from __future__ import annotations

import logging
from io import BytesIO

logger = logging.getLogger(__name__)


def extract_text_from_pdf(data: bytes) -> str:
	"""Extract text from an uploaded resume/job-description PDF.

	Strategy:
	1) PyPDF2 (fast, works on most text PDFs)
	2) pdfminer.six when PyPDF2 yields nothing or fails
	Returns empty string when neither can read the document.
	"""
	from PyPDF2 import PdfReader
	from PyPDF2.errors import PdfReadError

	parts: list[str] = []
	try:
		reader = PdfReader(BytesIO(data))
		for page in reader.pages:
			text = page.extract_text() or ""
			if text.strip():
				parts.append(text)
	except (PdfReadError, ValueError, KeyError) as exc:
		logger.info("PyPDF2 could not read upload (%s), trying pdfminer", exc)
	if parts:
		return "\n".join(parts)

	from pdfminer.high_level import extract_text
	from pdfminer.pdfparser import PDFSyntaxError

	try:
		return extract_text(BytesIO(data)) or ""
	except PDFSyntaxError as exc:
		logger.warning("pdfminer could not read upload: %s", exc)
		return ""


def decode_upload(filename: str, content_type: str, data: bytes) -> str:
	"""Turn an uploaded background document into plain text."""
	name = (filename or "").lower()
	ctype = (content_type or "").lower()
	if name.endswith(".pdf") or ctype == "application/pdf":
		return extract_text_from_pdf(data)
	# .txt, .md and anything else: best-effort utf-8
	return data.decode("utf-8", errors="ignore")
