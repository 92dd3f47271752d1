from fastapi import APIRouter, Depends, status

from teller_iam.api.error import ClientError, ServerError
from teller_iam.app.services.session_claims import SessionClaims
from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.app.use_cases.users import LoadContextUseCase
from teller_iam.depends import get_current_user, get_unit_of_work

router = APIRouter(tags=["User"])


@router.get("/me", status_code=status.HTTP_200_OK)
async def get_me(
    claims: SessionClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Load Current User

    Returns the stored user behind the session token, with the role and
    permissions as they are now.

    Raises:
        - 401 Unauthorized: Invalid or expired token
        - 403 Forbidden: Account locked or suspended since the token was issued
        - 404 Not Found: User no longer exists
    """
    use_case = LoadContextUseCase(uow)
    result = await use_case.execute(claims.user_id)

    if result.is_err():
        error = result.error
        if error.code == "ACCOUNT_LOCKED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
