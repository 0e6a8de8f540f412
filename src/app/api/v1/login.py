from typing import Annotated

from fastapi import APIRouter, Depends, Response
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import UnauthorizedException
from ...core.schemas import Token
from ...core.security import authenticate_user, create_access_token, set_access_cookie

router = APIRouter(tags=["login"])


@router.post("/login", response_model=Token)
async def login_for_access_token(
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    user = await authenticate_user(email=form_data.username, password=form_data.password, db=db)
    if not user:
        raise UnauthorizedException("Wrong email or password.")

    access_token = create_access_token(data={"sub": str(user.uuid)})
    set_access_cookie(response, access_token)
    return {"access_token": access_token, "token_type": "bearer"}
