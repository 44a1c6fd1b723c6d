from pydantic import BaseModel


class FileRead(BaseModel):
    filename: str
    original_name: str
    size: int
    path: str
    url: str


class UploadResponse(BaseModel):
    message: str
    file: FileRead


class UploadMultipleResponse(BaseModel):
    message: str
    files: list[FileRead]
