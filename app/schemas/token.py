from pydantic import BaseModel

class TokenPayload(BaseModel):
    user_id: int | None = None
    role: str | None = None
    exp: int | None = None
