from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CodeSent(BaseModel):
    success: bool = True
    message: str
    dev_code: str | None = None


class CodeVerify(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: Annotated[str, Field(pattern=r"^\d{6}$", examples=["482913"])]


class CooldownQuery(BaseModel):
    email: EmailStr


class CooldownStatus(BaseModel):
    can_send: bool
    next: int
