from pydantic import BaseModel, Field, BeforeValidator
from typing import Optional, Annotated
from datetime import datetime

# Helper for ObjectId
PyObjectId = Annotated[str, BeforeValidator(str)]


class DocumentRecord(BaseModel):
    id: Optional[PyObjectId] = Field(alias="_id", default=None)
    file_key: str
    uploaded_by: Optional[str] = None
    application_id: Optional[str] = None
    field_id: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
