"""
Best-effort text extraction for uploaded files.

Text-like files are decoded directly, PDFs go through PyPDFLoader and
DOCX paragraphs are read with python-docx. Anything that cannot be
downloaded or read (oversized files, seeded placeholder URLs, binary
formats, storage errors) is described from its name, type and size
instead, so every file yields some indexable text.

Dependencies: langchain_community.document_loaders, python-docx, boto3 (via S3FileStore)
System role: File stage of the indexing pipeline
"""

import asyncio
import io
import logging
import os
import re
import tempfile

from docx import Document
from langchain_community.document_loaders import PyPDFLoader

from vault_rag.boundary.storage.s3_client import S3FileStore, is_storage_key
from vault_rag.core.exceptions import ExtractionError
from vault_rag.models.content import FileItem

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024

TEXT_EXTENSIONS = frozenset({
    ".txt", ".md", ".markdown", ".csv", ".json", ".xml", ".html", ".htm",
    ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".c", ".cpp", ".h",
    ".css", ".scss", ".less", ".yaml", ".yml", ".toml", ".ini", ".cfg",
    ".sh", ".bash", ".zsh", ".bat", ".ps1", ".sql", ".r", ".rb", ".go",
    ".rs", ".swift", ".kt", ".scala", ".lua", ".pl", ".php", ".tex",
    ".bib", ".log", ".env", ".gitignore", ".dockerfile",
})

CODE_EXTENSIONS = frozenset({".js", ".ts", ".py", ".java", ".c", ".cpp", ".go", ".rs"})

# Below these lengths extracted text is treated as noise.
MIN_PDF_TEXT_LENGTH = 50
MIN_DOCX_TEXT_LENGTH = 10

FILE_TYPE_DESCRIPTIONS = {
    ".pdf": "PDF document",
    ".docx": "Microsoft Word document",
    ".doc": "Microsoft Word document",
    ".xlsx": "Microsoft Excel spreadsheet",
    ".xls": "Microsoft Excel spreadsheet",
    ".pptx": "Microsoft PowerPoint presentation",
    ".ppt": "Microsoft PowerPoint presentation",
    ".md": "Markdown document",
    ".txt": "Plain text document",
    ".csv": "CSV data file",
    ".json": "JSON data file",
    ".xml": "XML document",
    ".html": "HTML web page",
    ".png": "PNG image",
    ".jpg": "JPEG image",
    ".jpeg": "JPEG image",
    ".gif": "GIF image",
    ".svg": "SVG vector image",
    ".zip": "ZIP archive",
    ".tar": "TAR archive",
    ".gz": "Compressed archive",
    ".py": "Python source file",
    ".js": "JavaScript source file",
    ".ts": "TypeScript source file",
    ".java": "Java source file",
    ".sql": "SQL database script",
    ".yaml": "YAML configuration file",
    ".yml": "YAML configuration file",
}

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# (keywords, description) checked in order; first match wins.
NAME_HINTS: list[tuple[tuple[str, ...], str]] = [
    (
        ("strategy", "roadmap", "plan"),
        "This is a strategy or planning document. It outlines strategic goals, initiatives, "
        "timelines, and key performance indicators.",
    ),
    (
        ("financial", "budget", "report"),
        "This is a financial or business report document. It contains data analysis, "
        "financial metrics, projections, and business performance summaries.",
    ),
    (
        ("design", "ui", "assets", "mockup"),
        "This is a design/UI assets file. It contains user interface design elements, "
        "visual assets, and design system components used in the project.",
    ),
    (
        ("architecture", "diagram", "system"),
        "This is a system architecture document. It describes the technical architecture, "
        "system components, data flow, infrastructure setup, and technology decisions.",
    ),
    (
        ("research", "paper", "study"),
        "This is a research paper or academic document. It contains research findings, "
        "methodology, analysis, literature review, and conclusions from a study.",
    ),
    (
        ("notes", "summary"),
        "This is a notes/summary document. It contains captured notes, key takeaways, "
        "and summaries of important topics or discussions.",
    ),
    (
        ("cheatsheet", "cheat sheet", "reference", "guide"),
        "This is a reference guide or cheatsheet. It contains quick-reference material, "
        "commonly used patterns, syntax examples, and best practices.",
    ),
    (
        ("spec", "requirement", "prd"),
        "This is a specification or requirements document. It defines project requirements, "
        "functional specifications, acceptance criteria, and technical constraints.",
    ),
]

_DATE_PATTERN = re.compile(r"(\d{4})[- _](\d{2})[- _](\d{2})")


def get_extension(file_name: str) -> str:
    _, ext = os.path.splitext(file_name)
    return ext.lower()


def file_type_description(ext: str) -> str:
    return FILE_TYPE_DESCRIPTIONS.get(ext, f"{ext.lstrip('.').upper()} file")


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}KB"
    return f"{size / (1024 * 1024):.1f}MB"


def humanize_name(base_name: str) -> str:
    """'q3-meeting_2024-03-05_v2' -> 'q3 meeting March 5, 2024 version v2'"""

    def _date(match: re.Match) -> str:
        year, month, day = match.groups()
        month_index = int(month) - 1
        month_name = MONTHS[month_index] if 0 <= month_index < 12 else month
        return f"{month_name} {int(day)}, {year}"

    human = re.sub(r"[-_]", " ", base_name)
    human = _DATE_PATTERN.sub(_date, human, count=1)
    human = re.sub(r"\b(v\d+)", r"version \1", human, flags=re.IGNORECASE)
    return human.strip()


def infer_content_hint(base_name: str, ext: str) -> str:
    """Guess what a file is about from keywords in its name."""
    lower = re.sub(r"[-_]", " ", base_name.lower())

    if "meeting" in lower or "minutes" in lower:
        date_match = _DATE_PATTERN.search(base_name)
        dated = f" dated {'-'.join(date_match.groups())}" if date_match else ""
        return (
            f"This is a meeting notes document{dated}. It contains notes, discussions, decisions, "
            "and action items from a team meeting."
        )

    if "api" in lower and ("doc" in lower or "reference" in lower):
        return (
            "This is an API documentation file. It contains endpoint definitions, request/response "
            "schemas, authentication details, and usage examples for the project's API."
        )

    for keywords, hint in NAME_HINTS:
        if any(keyword in lower for keyword in keywords):
            return hint

    if ext in CODE_EXTENSIONS:
        return "This is a source code file. It contains programming code, functions, classes, and implementation logic."

    return (
        f"This is a {file_type_description(ext).lower()} uploaded to the vault "
        "for team collaboration and reference."
    )


def describe_file(file_name: str, file_size: int | None = None) -> str:
    """
    Placeholder text for a file whose body could not be read.

    Args:
        file_name: Original file name
        file_size: Size in bytes, if known

    Returns:
        str: Name, type, size, and an inferred content hint
    """
    ext = get_extension(file_name)
    base_name = file_name[: -len(ext)] if ext else file_name

    parts = [
        f"File: {file_name}",
        f"Name: {humanize_name(base_name)}",
        f"Type: {file_type_description(ext)}",
    ]
    if file_size:
        parts.append(f"Size: {format_size(file_size)}")
    parts.extend(["", infer_content_hint(base_name, ext)])
    return "\n".join(parts)


def extract_pdf_text(data: bytes) -> str:
    """Extract page text with PyPDFLoader (which needs a path on disk)."""
    with tempfile.TemporaryDirectory(prefix="vault_file_") as temp_dir:
        path = os.path.join(temp_dir, "document.pdf")
        with open(path, "wb") as handle:
            handle.write(data)
        documents = PyPDFLoader(path).load()
    return "\n\n".join(doc.page_content for doc in documents if doc.page_content).strip()


def extract_docx_text(data: bytes) -> str:
    """Paragraph texts of a Word document, separated by blank lines."""
    document = Document(io.BytesIO(data))
    paragraphs = (paragraph.text.strip() for paragraph in document.paragraphs)
    return "\n\n".join(text for text in paragraphs if text)


class FileExtractor:
    """Turn a file record into indexable text, degrading to a description."""

    def __init__(self, store: S3FileStore | None, max_file_size: int = DEFAULT_MAX_FILE_SIZE) -> None:
        """
        Args:
            store: File store used to download bodies (None: describe only)
            max_file_size: Larger files are described, never downloaded
        """
        self._store = store
        self._max_file_size = max_file_size

    async def extract(self, file: FileItem) -> str:
        """
        Extract text for one file. Never raises for unreadable content.

        Args:
            file: File record (name, storage key, size)

        Returns:
            str: Extracted text prefixed with the file name, or a description
        """
        ext = get_extension(file.file_name)
        readable = ext in TEXT_EXTENSIONS or ext in (".pdf", ".docx")

        if (
            self._store is None
            or not readable
            or not is_storage_key(file.file_url)
            or (file.file_size and file.file_size > self._max_file_size)
        ):
            return describe_file(file.file_name, file.file_size)

        try:
            text = await asyncio.to_thread(self._extract_body, file, ext)
        except ExtractionError as e:
            logger.warning(
                f"{__name__}:extract - Falling back to description",
                extra={"file_id": str(file.id), "error_msg": str(e)},
            )
            text = None
        except Exception as e:
            logger.warning(
                f"{__name__}:extract - Unreadable file, falling back to description",
                extra={"file_id": str(file.id), "error_type": type(e).__name__, "error_msg": str(e)},
            )
            text = None

        return text or describe_file(file.file_name, file.file_size)

    def _extract_body(self, file: FileItem, ext: str) -> str | None:
        data = self._store.download(file.file_url, max_bytes=self._max_file_size)

        if ext == ".pdf":
            text = extract_pdf_text(data)
            return f"File: {file.file_name} (PDF)\n\n{text}" if len(text) > MIN_PDF_TEXT_LENGTH else None

        if ext == ".docx":
            text = extract_docx_text(data)
            return f"File: {file.file_name} (DOCX)\n\n{text}" if len(text) > MIN_DOCX_TEXT_LENGTH else None

        text = data.decode("utf-8", errors="replace").strip()
        return f"File: {file.file_name}\n\n{text}" if text else None
