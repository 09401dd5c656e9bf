"""Plain-text extraction from PDF and Word documents.

The format is decided by the file extension alone. Decoding is delegated to
pluggable decoders so the pipeline can run against fakes in tests; the
defaults wrap PyMuPDF and python-docx and are imported only when a document
of that kind is actually decoded.
"""

from __future__ import annotations

import asyncio
import importlib
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Optional, Protocol, Sequence, Union

from .errors import (
    DependencyError,
    ParseFailureError,
    QuizPipelineError,
    ReadFailureError,
    UnsupportedFormatError,
)

PDF_EXTENSIONS: frozenset[str] = frozenset({"pdf"})
WORD_EXTENSIONS: frozenset[str] = frozenset({"doc", "docx"})
SUPPORTED_EXTENSIONS: frozenset[str] = PDF_EXTENSIONS | WORD_EXTENSIONS

PAGE_SEPARATOR = "\n\n"

_log = logging.getLogger(__name__)


class PdfDocument(Protocol):
    """An opened PDF whose pages are addressed from 1."""

    def page_count(self) -> int: ...

    def page_tokens(self, number: int) -> Sequence[str]: ...


class PdfDecoder(Protocol):
    def open(self, data: bytes) -> PdfDocument: ...


class WordDecoder(Protocol):
    def extract_raw_text(self, data: bytes) -> str: ...


class PyMuPdfDocument:
    """PyMuPDF-backed page access; tokens are the words PyMuPDF reports."""

    def __init__(self, document: Any) -> None:
        self._document = document

    def page_count(self) -> int:
        return int(self._document.page_count)

    def page_tokens(self, number: int) -> list[str]:
        page = self._document.load_page(number - 1)
        return [str(word[4]) for word in page.get_text("words")]

    def close(self) -> None:
        self._document.close()


class PyMuPdfDecoder:
    def open(self, data: bytes) -> PyMuPdfDocument:
        fitz = _import_module("fitz", format="pdf", package="pymupdf")
        document = fitz.open(stream=data, filetype="pdf")
        if document.needs_pass:
            document.close()
            raise ParseFailureError("pdf")
        return PyMuPdfDocument(document)


class PythonDocxDecoder:
    def extract_raw_text(self, data: bytes) -> str:
        docx = _import_module("docx", format="word", package="python-docx")
        document = docx.Document(io.BytesIO(data))
        return PAGE_SEPARATOR.join(
            paragraph.text for paragraph in document.paragraphs
        )


def _read_path_bytes(path: Path) -> bytes:
    return path.read_bytes()


@dataclass(frozen=True)
class ExtractorDependencies:
    """Callable seams for reading and decoding documents."""

    pdf: PdfDecoder = field(default_factory=PyMuPdfDecoder)
    word: WordDecoder = field(default_factory=PythonDocxDecoder)
    read_bytes: Callable[[Path], bytes] = _read_path_bytes


def detect_format(
    source: Union[str, Path], extension: Optional[str] = None
) -> str:
    """Return ``"pdf"`` or ``"word"`` for ``source``.

    ``extension`` overrides the file-name suffix; a leading dot is optional
    and case does not matter.
    """

    raw = extension if extension is not None else Path(source).suffix
    normalized = raw.strip().lstrip(".").lower()
    if normalized in PDF_EXTENSIONS:
        return "pdf"
    if normalized in WORD_EXTENSIONS:
        return "word"
    raise UnsupportedFormatError(normalized or None)


async def extract_text(
    source: Union[str, Path],
    extension: Optional[str] = None,
    *,
    dependencies: Optional[ExtractorDependencies] = None,
) -> str:
    """Read ``source`` once and return its plain text."""

    path = Path(source)
    kind = detect_format(path, extension)
    deps = dependencies or ExtractorDependencies()

    data = await _read_bytes(path, deps.read_bytes)
    if kind == "pdf":
        return await _extract_pdf(data, deps.pdf)
    return await _extract_word(data, deps.word)


async def _read_bytes(
    path: Path, reader: Callable[[Path], bytes]
) -> bytes:
    try:
        return await asyncio.to_thread(reader, path)
    except OSError as exc:
        _log.warning(
            "Failed to read document",
            extra={"source": str(path), "error": str(exc)},
        )
        raise ReadFailureError() from exc


async def _extract_pdf(data: bytes, decoder: PdfDecoder) -> str:
    document: Optional[PdfDocument] = None
    try:
        document = await asyncio.to_thread(decoder.open, data)
        count = document.page_count()
        _log.debug("Decoding PDF", extra={"page_count": count})
        pages: list[str] = []
        for number in range(1, count + 1):
            tokens = await asyncio.to_thread(document.page_tokens, number)
            pages.append(" ".join(tokens))
    except QuizPipelineError:
        raise
    except Exception as exc:
        raise ParseFailureError("pdf") from exc
    finally:
        close = getattr(document, "close", None)
        if callable(close):
            close()
    return PAGE_SEPARATOR.join(pages)


async def _extract_word(data: bytes, decoder: WordDecoder) -> str:
    try:
        text = await asyncio.to_thread(decoder.extract_raw_text, data)
    except QuizPipelineError:
        raise
    except Exception as exc:
        raise ParseFailureError("word") from exc
    return str(text or "")


def _import_module(module: str, *, format: str, package: str) -> ModuleType:
    try:
        return importlib.import_module(module)
    except ImportError as exc:
        raise DependencyError(format, package) from exc


__all__ = [
    "ExtractorDependencies",
    "PdfDecoder",
    "PdfDocument",
    "PyMuPdfDecoder",
    "PyMuPdfDocument",
    "PythonDocxDecoder",
    "SUPPORTED_EXTENSIONS",
    "WordDecoder",
    "detect_format",
    "extract_text",
]
