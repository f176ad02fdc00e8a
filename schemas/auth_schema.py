from pydantic import BaseModel

# Schema for the principal returned by the identity dependency
class Principal(BaseModel):
    id: str
    email: str | None = None
    role: str | None = None
