from pydantic import BaseModel, ConfigDict


class UploadRead(BaseModel):
    path: str
    url: str


class UploadDelete(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str
