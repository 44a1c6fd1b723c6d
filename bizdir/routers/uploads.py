from fastapi import APIRouter, File, UploadFile

from bizdir.core.config import settings
from bizdir.core.errors import ValidationError
from bizdir.schemas.upload import FileRead, UploadMultipleResponse, UploadResponse
from bizdir.services.storage import StoredFile, save_uploads, selected_files

router = APIRouter(prefix="/upload", tags=["upload"])


def _file_read(stored: StoredFile) -> FileRead:
    return FileRead(
        filename=stored.filename,
        original_name=stored.original_name,
        size=stored.size,
        path=stored.path,
        url=stored.url,
    )


@router.post("", response_model=UploadResponse)
async def upload_single(file: UploadFile | None = File(None)):
    """Store one image (form field "file")."""
    files = selected_files([file] if file is not None else [])
    if not files:
        raise ValidationError("No file uploaded")
    stored = await save_uploads(files, max_files=1)
    return UploadResponse(message="File uploaded successfully", file=_file_read(stored[0]))


@router.post("/multiple", response_model=UploadMultipleResponse)
async def upload_multiple(files: list[UploadFile] = File(default=[])):
    """Store up to max_photos images (form field "files")."""
    chosen = selected_files(files)
    if not chosen:
        raise ValidationError("No files uploaded")
    stored = await save_uploads(chosen, settings.max_photos)
    return UploadMultipleResponse(message="Files uploaded successfully", files=[_file_read(s) for s in stored])
