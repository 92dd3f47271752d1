from fastapi import Response

from config import ApplicationConfig


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=ApplicationConfig.ACCESS_TOKEN_COOKIE,
        value=token,
        max_age=ApplicationConfig.ACCESS_TOKEN_TTL_MINUTES * 60,
        httponly=True,
        secure=ApplicationConfig.COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=ApplicationConfig.ACCESS_TOKEN_COOKIE)
