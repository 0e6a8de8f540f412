from fastapi import APIRouter, Response

router = APIRouter(tags=["login"])


@router.post("/logout")
async def logout(response: Response) -> dict[str, str]:
    response.delete_cookie(key="access_token")
    return {"message": "Logged out successfully"}
