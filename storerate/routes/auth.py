"""Authentication endpoints.

POST /auth/register        - self sign-up as a normal user
POST /auth/login           - exchange credentials for a bearer token
POST /auth/logout          - stateless acknowledgement
PUT  /auth/update-password - change own password
GET  /auth/me              - who am I
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.routes.deps import get_db_session, get_principal, require
from storerate.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    Principal,
    RegisterRequest,
    UpdatePasswordRequest,
)
from storerate.services.access import Permission, Role
from storerate.services.auth import create_access_token
from storerate.services.users import authenticate, change_password, create_user

router = APIRouter()


def _login_response(message: str, user_id: int, name: str, email: str, role: Role) -> LoginResponse:
    return LoginResponse(
        message=message,
        token=create_access_token(user_id, role),
        user=Principal(id=user_id, name=name, email=email, role=role),
    )


@router.post("/register", response_model=LoginResponse, status_code=201)
async def register(
    request: RegisterRequest,
    session: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    """Create a normal user account and sign it in."""
    user = await create_user(
        session,
        name=request.name,
        email=request.email,
        password=request.password,
        address=request.address,
        role=Role.USER,
    )
    return _login_response("User registered successfully", user.id, user.name, user.email, user.role)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    """Return a bearer token for valid credentials."""
    user = await authenticate(session, request.email, request.password)
    return _login_response("Login successful", user.id, user.name, user.email, user.role)


@router.post("/logout", response_model=MessageResponse)
async def logout() -> MessageResponse:
    """Tokens are stateless; the client discards its copy."""
    return MessageResponse(message="Logged out successfully")


@router.put("/update-password", response_model=MessageResponse)
async def update_password(
    request: UpdatePasswordRequest,
    principal: Principal = Depends(require(Permission.UPDATE_OWN_PASSWORD)),
    session: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """Change the caller's password."""
    await change_password(session, principal.id, request.current_password, request.new_password)
    return MessageResponse(message="Password updated successfully")


@router.get("/me", response_model=Principal)
async def me(principal: Principal = Depends(get_principal)) -> Principal:
    """The authenticated caller."""
    return principal
