from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AuthenticationError
from app.core.security import Principal, authenticate_token
from app.llm.dispatcher import ProviderDispatcher

security_scheme = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)],
) -> Principal:
    if credentials is None:
        raise AuthenticationError("Access denied. No token provided or invalid format.")
    principal = authenticate_token(credentials.credentials)
    if principal is None:
        raise AuthenticationError("Invalid token")
    return principal


def get_dispatcher(request: Request) -> ProviderDispatcher:
    return request.app.state.dispatcher


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
Dispatcher = Annotated[ProviderDispatcher, Depends(get_dispatcher)]
