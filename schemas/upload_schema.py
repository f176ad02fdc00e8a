from pydantic import BaseModel, ConfigDict, Field
from typing import List

class StoredFile(BaseModel):
    url: str
    type: str
    name: str

class UploadResponse(BaseModel):
    # Field names stay pythonic, the wire format is camelCase
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    files: List[StoredFile]
    primary_url: str = Field(alias="primaryUrl")
    file_type: str = Field(alias="fileType")
    is_multi_image: bool = Field(alias="isMultiImage")

class ErrorResponse(BaseModel):
    error: str
