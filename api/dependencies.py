"""FastAPI dependencies shared by the API routers."""

from fastapi import Header, HTTPException, status

from db.config import settings
from utils.const import API_PASSWORD_HEADER


async def require_api_password(
    api_password: str | None = Header(None, alias=API_PASSWORD_HEADER),
) -> None:
    """Reject admin requests that do not carry the instance API password."""
    if not api_password or api_password != settings.api_password:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API password.",
        )
