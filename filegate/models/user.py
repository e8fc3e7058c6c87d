from pydantic import BaseModel, BeforeValidator
from typing import Optional, Annotated

PyObjectId = Annotated[str, BeforeValidator(str)]

ADMIN_ROLE = "admin"


class AuthenticatedUser(BaseModel):
    """Identity the provider vouched for. Only ``id`` is used for authorization."""

    id: str
    email: Optional[str] = None


class UserRecord(BaseModel):
    id: PyObjectId
    role: str = "student"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE
