import pytest

from services.file_detection import (
    DetectedKind,
    OOXML_WORD_MIME,
    SIGNATURES,
    detect_file_type,
    file_extension,
    matches,
    resolve_content_type,
)
from conftest import DOCX_BYTES, JPEG_BYTES, PDF_BYTES, PNG_BYTES


@pytest.mark.parametrize("name", ["paper.pdf", "paper.png", "paper.docx", "paper.xyz", "paper"])
def test_pdf_signature_wins_regardless_of_extension(name):
    assert detect_file_type(PDF_BYTES, name) is DetectedKind.PDF


@pytest.mark.parametrize("name", ["notes.docx", "notes.doc", "NOTES.DOCX"])
def test_zip_signature_is_word_document_with_word_extension(name):
    assert detect_file_type(DOCX_BYTES, name) is DetectedKind.WORD_DOCUMENT


def test_zip_signature_without_word_extension_falls_through_to_extension():
    assert detect_file_type(DOCX_BYTES, "archive.zip") is DetectedKind.UNKNOWN
    assert detect_file_type(DOCX_BYTES, "slides.pptx") is DetectedKind.UNKNOWN
    # extension fallback still applies after the ambiguous signature is skipped
    assert detect_file_type(DOCX_BYTES, "scan.png") is DetectedKind.IMAGE


@pytest.mark.parametrize(
    "data",
    [
        PNG_BYTES,
        JPEG_BYTES,
        b"GIF89a" + b"\x00" * 16,
        b"RIFF\x24\x00\x00\x00WEBPVP8 ",
    ],
)
def test_image_signatures_win_regardless_of_extension(data):
    assert detect_file_type(data, "upload.bin") is DetectedKind.IMAGE
    assert detect_file_type(data, "upload.pdf") is DetectedKind.IMAGE


@pytest.mark.parametrize(
    "name, expected",
    [
        ("paper.pdf", DetectedKind.PDF),
        ("paper.doc", DetectedKind.WORD_DOCUMENT),
        ("paper.docx", DetectedKind.WORD_DOCUMENT),
        ("scan.bmp", DetectedKind.IMAGE),
        ("diagram.svg", DetectedKind.IMAGE),
        ("Photo.JPEG", DetectedKind.IMAGE),
        ("notes.xyz", DetectedKind.UNKNOWN),
        ("README", DetectedKind.UNKNOWN),
    ],
)
def test_extension_fallback_when_no_signature_matches(name, expected):
    assert detect_file_type(b"plain text body, no magic here", name) is expected


def test_empty_and_short_buffers_never_raise():
    for signature in SIGNATURES:
        short = signature.magic[:-1]
        assert matches(short, signature.offset, signature.magic) is False
    assert detect_file_type(b"", "empty.xyz") is DetectedKind.UNKNOWN
    assert detect_file_type(b"%PD", "truncated.bin") is DetectedKind.UNKNOWN
    assert detect_file_type(b"%PD", "truncated.pdf") is DetectedKind.PDF


def test_matches_respects_offset():
    assert matches(b"xxWEBP", 2, b"WEBP") is True
    assert matches(b"xxWEB", 2, b"WEBP") is False


@pytest.mark.parametrize(
    "name, expected",
    [("Paper.PDF", "pdf"), ("archive.tar.gz", "gz"), ("noext", ""), ("dir.v2/noext", ""), ("trailing.", "")],
)
def test_file_extension(name, expected):
    assert file_extension(name) == expected


@pytest.mark.parametrize(
    "kind, ext, expected",
    [
        (DetectedKind.PDF, "pdf", "application/pdf"),
        (DetectedKind.PDF, "png", "application/pdf"),
        (DetectedKind.WORD_DOCUMENT, "doc", "application/msword"),
        (DetectedKind.WORD_DOCUMENT, "docx", OOXML_WORD_MIME),
        (DetectedKind.IMAGE, "png", "image/png"),
        (DetectedKind.IMAGE, "jpg", "image/jpeg"),
        (DetectedKind.IMAGE, "jpeg", "image/jpeg"),
        (DetectedKind.IMAGE, "gif", "image/gif"),
        (DetectedKind.IMAGE, "webp", "image/webp"),
        (DetectedKind.IMAGE, "svg", "image/svg+xml"),
        (DetectedKind.IMAGE, "bmp", "image/png"),
    ],
)
def test_resolve_content_type(kind, ext, expected):
    assert resolve_content_type(kind, ext) == expected


def test_resolve_content_type_rejects_unknown():
    with pytest.raises(ValueError):
        resolve_content_type(DetectedKind.UNKNOWN, "xyz")
