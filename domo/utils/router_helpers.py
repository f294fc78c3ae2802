# domo/utils/router_helpers.py

from fastapi import HTTPException, status
from typing import Callable
from functools import wraps
import logging

from ..services.errors import (
    IdentityServiceError,
    InputError,
    AuthError,
    ConflictError,
    NotFoundError,
    FatalError,
)
from ..services.household_service import HouseholdServiceError

logger = logging.getLogger(__name__)


def handle_service_errors(func: Callable) -> Callable:
    """Decorator to standardize service error handling in routers"""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        # Input Errors -> 400 Bad Request
        except InputError as e:
            logger.warning(f"Invalid input: {str(e)}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        # Credential Errors -> 401 Unauthorized
        except AuthError as e:
            logger.warning(f"Unauthorized: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(e),
                headers={"WWW-Authenticate": "Bearer"},
            )

        except NotFoundError as e:
            logger.warning(f"Resource not found: {str(e)}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

        # Contact ownership -> 409 Conflict
        except ConflictError as e:
            logger.warning(f"Conflict: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"error": str(e), "code": e.code, **e.extra},
            )

        except FatalError as e:
            logger.error(f"Fatal error in {func.__name__}: {str(e)}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
            )

        # Remaining service errors are not caller mistakes
        except (IdentityServiceError, HouseholdServiceError) as e:
            logger.error(f"Service error in {func.__name__}: {str(e)}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
            )

        # Validation Errors -> 400 Bad Request
        except ValueError as e:
            logger.warning(f"Validation error: {str(e)}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        # Unexpected errors -> 500 Internal Server Error
        except Exception as e:
            logger.error(
                f"Unexpected error in {func.__name__}: {str(e)}", exc_info=True
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An unexpected error occurred",
            )

    return wrapper
