import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

from core.errors import InvalidRequest, PayloadTooLarge, StorageWriteFailed, UnsupportedFileType
from schemas.upload_schema import StoredFile, UploadResponse
from services.file_detection import (
    DetectedKind,
    detect_file_type,
    file_extension,
    resolve_content_type,
)
from services.storage_service import ObjectStore

logger = logging.getLogger(__name__)

GALLERY = "gallery"


@dataclass(frozen=True)
class IncomingFile:
    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ClassifiedFile:
    name: str
    data: bytes
    ext: str
    kind: DetectedKind
    content_type: str


@dataclass
class WriteOutcome:
    """Result of writing a batch: everything stored so far, plus the first failure if any."""
    stored: list[StoredFile] = field(default_factory=list)
    keys: list[str] = field(default_factory=list)
    failed_index: int | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.failed_index is None


def current_timestamp_ms() -> int:
    return int(time.time() * 1000)


def check_total_size(files: Sequence[IncomingFile], limit_bytes: int) -> int:
    """
    Rejects the whole batch when the summed size exceeds the limit.

    :return: The total size in bytes.
    :raises PayloadTooLarge: If the total is above `limit_bytes`.
    """
    total = sum(f.size for f in files)
    if total > limit_bytes:
        logger.error(f"Total file size too large: {total} bytes (limit {limit_bytes})")
        raise PayloadTooLarge(limit_bytes=limit_bytes, total_bytes=total)
    return total


def classify_batch(files: Sequence[IncomingFile]) -> list[ClassifiedFile]:
    """
    Classifies every file before anything is written.
    The first unrecognised file rejects the batch.
    """
    classified = []
    for index, incoming in enumerate(files):
        kind = detect_file_type(incoming.data, incoming.name)
        if kind is DetectedKind.UNKNOWN:
            logger.error(f"Unsupported file type: {incoming.name} (index {index})")
            raise UnsupportedFileType(incoming.name, index)

        ext = file_extension(incoming.name)
        classified.append(
            ClassifiedFile(
                name=incoming.name,
                data=incoming.data,
                ext=ext,
                kind=kind,
                content_type=resolve_content_type(kind, ext),
            )
        )
    return classified


def build_storage_key(principal_id: str, timestamp_ms: int, index: int, count: int, ext: str) -> str:
    """
    <principal>/<timestamp>.<ext> for a single file,
    <principal>/<timestamp>_<index>.<ext> when the batch has several.
    """
    stem = f"{timestamp_ms}" if count == 1 else f"{timestamp_ms}_{index}"
    suffix = f".{ext}" if ext else ""
    return f"{principal_id}/{stem}{suffix}"


def write_batch(
    principal_id: str,
    files: Sequence[ClassifiedFile],
    store: ObjectStore,
    timestamp_ms: int,
) -> WriteOutcome:
    """
    Writes files one at a time, in order, stopping at the first failure.
    Nothing is retried.
    """
    outcome = WriteOutcome()
    count = len(files)

    for index, item in enumerate(files):
        logger.info(f"Processing file {index + 1}/{count}: {item.name}, type: {item.kind.value}")
        key = build_storage_key(principal_id, timestamp_ms, index, count, item.ext)

        try:
            store.put_object(key, item.data, item.content_type)
        except Exception as e:
            logger.error(f"Storage upload error for {item.name} ({key}): {e}")
            outcome.failed_index = index
            outcome.error = e
            return outcome

        outcome.keys.append(key)
        outcome.stored.append(
            StoredFile(url=store.public_url(key), type=item.kind.value, name=item.name)
        )
        logger.info(f"Uploaded: {key}")

    return outcome


def remove_written(store: ObjectStore, keys: Sequence[str]) -> None:
    """Best-effort removal of objects written before a failed write."""
    for key in keys:
        try:
            store.delete_object(key)
            logger.info(f"Removed partially uploaded object: {key}")
        except Exception as e:
            logger.error(f"Could not remove partially uploaded object {key}: {e}")


def assemble_response(stored: Sequence[StoredFile]) -> UploadResponse:
    is_multi_image = len(stored) > 1 and all(f.type == DetectedKind.IMAGE.value for f in stored)
    primary = stored[0]
    return UploadResponse(
        success=True,
        files=list(stored),
        primary_url=primary.url,
        file_type=GALLERY if is_multi_image else primary.type,
        is_multi_image=is_multi_image,
    )


def ingest_files(
    principal_id: str,
    files: Sequence[IncomingFile],
    store: ObjectStore,
    max_total_bytes: int,
    cleanup_on_failure: bool = True,
    clock: Callable[[], int] = current_timestamp_ms,
) -> UploadResponse:
    """
    Runs one upload batch end to end: size guard, classification, writes, response.

    :param principal_id: Authenticated caller, used as the storage key namespace.
    :param files: Ordered batch, at least one file.
    :param store: Destination object store.
    :param max_total_bytes: Ceiling for the summed size of the batch.
    :param cleanup_on_failure: Delete objects already written when a later write fails.
    :param clock: Source of the batch timestamp in milliseconds.
    :raises InvalidRequest, PayloadTooLarge, UnsupportedFileType, StorageWriteFailed:
    """
    if not files:
        logger.error(f"No files provided (user {principal_id})")
        raise InvalidRequest("No files provided")

    # 1. Size guard
    check_total_size(files, max_total_bytes)

    # 2. Classify everything before the first write
    classified = classify_batch(files)

    # 3. Write sequentially
    outcome = write_batch(principal_id, classified, store, clock())
    if not outcome.ok:
        failed = classified[outcome.failed_index]
        if cleanup_on_failure and outcome.keys:
            remove_written(store, outcome.keys)
        raise StorageWriteFailed(failed.name, outcome.failed_index, cause=outcome.error) from outcome.error

    # 4. Assemble
    return assemble_response(outcome.stored)
