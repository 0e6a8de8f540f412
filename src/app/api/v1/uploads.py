from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ...core.exceptions.http_exceptions import NotFoundException
from ...core.services.storage import MediaStorage, get_media_storage
from ...schemas.upload import UploadDelete, UploadRead
from ..dependencies import get_current_admin

router = APIRouter(prefix="/uploads", tags=["uploads"], dependencies=[Depends(get_current_admin)])


@router.post("", response_model=UploadRead, status_code=201)
async def upload_file(
    storage: Annotated[MediaStorage, Depends(get_media_storage)],
    file: Annotated[UploadFile, File()],
    folder: Annotated[str, Form()] = "content",
) -> UploadRead:
    data = await file.read()
    path, url = await storage.save(folder, file.filename, data)
    return UploadRead(path=path, url=url)


@router.post("/delete")
async def delete_file(
    values: UploadDelete,
    storage: Annotated[MediaStorage, Depends(get_media_storage)],
) -> dict[str, str]:
    if not await storage.delete(values.url):
        raise NotFoundException("File not found")
    return {"message": "File deleted"}
