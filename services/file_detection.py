from dataclasses import dataclass
from enum import Enum


class DetectedKind(str, Enum):
    PDF = "pdf"
    WORD_DOCUMENT = "docx"
    IMAGE = "image"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Signature:
    kind: DetectedKind
    magic: bytes
    offset: int = 0
    # ZIP containers are ambiguous; only trust them alongside a matching extension
    required_extensions: frozenset[str] | None = None


WORD_EXTENSIONS = frozenset({"doc", "docx"})
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "bmp", "svg"})

# Checked in order, first match wins
SIGNATURES: tuple[Signature, ...] = (
    Signature(DetectedKind.PDF, b"%PDF-"),
    Signature(DetectedKind.WORD_DOCUMENT, b"PK\x03\x04", required_extensions=WORD_EXTENSIONS),
    Signature(DetectedKind.IMAGE, b"\x89PNG"),
    Signature(DetectedKind.IMAGE, b"\xff\xd8\xff"),
    Signature(DetectedKind.IMAGE, b"GIF"),
    Signature(DetectedKind.IMAGE, b"RIFF"),
)

OOXML_WORD_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

IMAGE_CONTENT_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
}


def matches(data: bytes, offset: int, magic: bytes) -> bool:
    """True if `magic` sits at `offset`. Short buffers simply do not match."""
    end = offset + len(magic)
    if len(data) < end:
        return False
    return data[offset:end] == magic


def file_extension(file_name: str) -> str:
    """Lower-cased text after the last dot, or '' when there is none."""
    base = file_name.rsplit("/", 1)[-1]
    if "." not in base:
        return ""
    return base.rsplit(".", 1)[-1].lower()


def classify_by_extension(ext: str) -> DetectedKind:
    if ext == "pdf":
        return DetectedKind.PDF
    if ext in WORD_EXTENSIONS:
        return DetectedKind.WORD_DOCUMENT
    if ext in IMAGE_EXTENSIONS:
        return DetectedKind.IMAGE
    return DetectedKind.UNKNOWN


def detect_file_type(data: bytes, file_name: str) -> DetectedKind:
    """
    Classifies a file by its leading bytes, falling back to the extension.

    :param data: Raw file content.
    :param file_name: Client-supplied name, only the extension is used.
    :return: The detected kind, UNKNOWN if neither check resolves it.
    """
    ext = file_extension(file_name)

    for signature in SIGNATURES:
        if not matches(data, signature.offset, signature.magic):
            continue
        if signature.required_extensions is not None and ext not in signature.required_extensions:
            continue
        return signature.kind

    return classify_by_extension(ext)


def resolve_content_type(kind: DetectedKind, ext: str) -> str:
    """
    Maps a detected kind plus extension to the MIME type stored with the object.

    :raises ValueError: If called with UNKNOWN.
    """
    if kind is DetectedKind.PDF:
        return "application/pdf"
    if kind is DetectedKind.WORD_DOCUMENT:
        return "application/msword" if ext == "doc" else OOXML_WORD_MIME
    if kind is DetectedKind.IMAGE:
        return IMAGE_CONTENT_TYPES.get(ext, "image/png")
    raise ValueError(f"No content type for file kind: {kind.value}")
