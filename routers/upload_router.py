import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from core.config import settings
from core.errors import InvalidRequest, ServiceError, UnexpectedError
from middleware.auth.auth_deps import principal_dependency
from schemas.upload_schema import ErrorResponse, UploadResponse
from services.storage_service import ObjectStore, get_object_store
from services.upload_service import IncomingFile, ingest_files

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["upload"],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post("/upload-files", response_model=UploadResponse, responses=ERROR_RESPONSES)
async def upload_files(
    request: Request,
    principal: principal_dependency,
    store: ObjectStore = Depends(get_object_store),
):
    """
    Validates and stores a batch of question paper files.
    Expects multipart form data with one or more `files` parts.
    The body is only read once the caller has been authenticated.
    """
    form = await request.form()
    uploads = [item for item in form.getlist("files") if isinstance(item, UploadFile)]

    try:
        if not uploads:
            raise InvalidRequest("No files provided")

        files = [IncomingFile(name=upload.filename or "", data=await upload.read()) for upload in uploads]

        return await run_in_threadpool(
            ingest_files,
            principal.id,
            files,
            store,
            settings.MAX_TOTAL_UPLOAD_BYTES,
            settings.CLEANUP_ON_FAILURE,
        )
    except ServiceError as e:
        logger.error(f"Upload rejected for user {principal.id}: {e.message}")
        raise
    except Exception as e:
        logger.exception(f"Unexpected error during upload for user {principal.id}: {e}")
        raise UnexpectedError() from e
    finally:
        await form.close()
