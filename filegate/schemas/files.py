from pydantic import BaseModel, Field
from typing import Optional


class SignRequest(BaseModel):
    file_key: Optional[str] = Field(default=None, alias="fileKey")
    file_name: Optional[str] = Field(default=None, alias="fileName")
    expires_in: Optional[int] = Field(default=None, alias="expiresIn")
    download: bool = False

    class Config:
        populate_by_name = True


class DeleteRequest(BaseModel):
    file_key: Optional[str] = Field(default=None, alias="fileKey")
    purge_record: bool = Field(default=False, alias="purgeRecord")

    class Config:
        populate_by_name = True


class UploadResponse(BaseModel):
    success: bool = True
    file_key: str = Field(alias="fileKey")
    file_name: str = Field(alias="fileName")
    file_size: int = Field(alias="fileSize")
    file_type: str = Field(alias="fileType")
    uploaded_by: str = Field(alias="uploadedBy")

    class Config:
        populate_by_name = True


class SignResponse(BaseModel):
    success: bool = True
    signed_url: str = Field(alias="signedUrl")
    expires_in: int = Field(alias="expiresIn")

    class Config:
        populate_by_name = True


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
    file_key: str = Field(alias="fileKey")
    user_id: str = Field(alias="userId")
    record_deleted: bool = Field(default=False, alias="recordDeleted")
    warning: Optional[str] = None

    class Config:
        populate_by_name = True
