from pydantic import BaseModel


class HealthCheck(BaseModel):
    name: str
    version: str | None
    description: str | None
    environment: str
    database: str


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    sub: str
