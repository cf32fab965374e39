"""FastAPI endpoints for identity: registration, login and the user's own account."""

from fastapi import APIRouter, Depends, Response
from protean.utils.globals import current_domain

from storefront.identity.addresses import AddAddress, RemoveAddress, SetDefaultAddress
from storefront.identity.api.dependencies import SESSION_COOKIE, admin_session, current_session
from storefront.identity.api.schemas import (
    AddAddressRequest,
    AddressIdResponse,
    AddressResponse,
    ChangeRoleRequest,
    LogInRequest,
    RegisterUserRequest,
    SessionResponse,
    StatusResponse,
    TokenResponse,
    UpdateProfileRequest,
    UserIdResponse,
    UserResponse,
)
from storefront.identity.authentication import LogIn
from storefront.identity.profile import ChangeRole, UpdateProfile
from storefront.identity.registration import RegisterUser
from storefront.identity.tokens import SessionClaims, token_ttl
from storefront.identity.user import User

auth_router = APIRouter(prefix="/auth", tags=["auth"])
user_router = APIRouter(prefix="/users", tags=["users"])


def _user_response(user) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        role=user.role,
        phone=user.phone,
        avatar=user.avatar,
        addresses=[
            AddressResponse(
                id=str(a.id),
                street=a.street,
                city=a.city,
                state=a.state,
                zip_code=a.zip_code,
                country=a.country,
                is_default=bool(a.is_default),
            )
            for a in user.addresses
        ],
    )


@auth_router.post("/register", status_code=201, response_model=UserIdResponse)
async def register(body: RegisterUserRequest) -> UserIdResponse:
    command = RegisterUser(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        password=body.password,
        phone=body.phone,
    )
    result = current_domain.process(command, asynchronous=False)
    return UserIdResponse(user_id=result)


@auth_router.post("/login", response_model=TokenResponse)
async def log_in(body: LogInRequest, response: Response) -> TokenResponse:
    token = current_domain.process(LogIn(email=body.email, password=body.password), asynchronous=False)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=int(token_ttl().total_seconds()),
        httponly=True,
        samesite="lax",
    )
    return TokenResponse(access_token=token)


@auth_router.post("/logout", response_model=StatusResponse)
async def log_out(response: Response) -> StatusResponse:
    response.delete_cookie(SESSION_COOKIE)
    return StatusResponse()


@auth_router.get("/session", response_model=SessionResponse)
async def session(claims: SessionClaims = Depends(current_session)) -> SessionResponse:
    return SessionResponse(user_id=claims.user_id, email=claims.email, role=claims.role)


@user_router.get("/me", response_model=UserResponse)
async def me(claims: SessionClaims = Depends(current_session)) -> UserResponse:
    user = current_domain.repository_for(User).get(claims.user_id)
    return _user_response(user)


@user_router.put("/me/profile", response_model=StatusResponse)
async def update_profile(
    body: UpdateProfileRequest, claims: SessionClaims = Depends(current_session)
) -> StatusResponse:
    command = UpdateProfile(
        user_id=claims.user_id,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        avatar=body.avatar,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@user_router.post("/me/addresses", status_code=201, response_model=AddressIdResponse)
async def add_address(
    body: AddAddressRequest, claims: SessionClaims = Depends(current_session)
) -> AddressIdResponse:
    command = AddAddress(
        user_id=claims.user_id,
        street=body.street,
        city=body.city,
        state=body.state,
        zip_code=body.zip_code,
        country=body.country,
        is_default=body.is_default,
    )
    result = current_domain.process(command, asynchronous=False)
    return AddressIdResponse(address_id=result)


@user_router.delete("/me/addresses/{address_id}", response_model=StatusResponse)
async def remove_address(address_id: str, claims: SessionClaims = Depends(current_session)) -> StatusResponse:
    command = RemoveAddress(user_id=claims.user_id, address_id=address_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@user_router.put("/me/addresses/{address_id}/default", response_model=StatusResponse)
async def set_default_address(
    address_id: str, claims: SessionClaims = Depends(current_session)
) -> StatusResponse:
    command = SetDefaultAddress(user_id=claims.user_id, address_id=address_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@user_router.put("/{user_id}/role", response_model=StatusResponse)
async def change_role(
    user_id: str, body: ChangeRoleRequest, claims: SessionClaims = Depends(admin_session)
) -> StatusResponse:
    command = ChangeRole(
        user_id=user_id,
        role=body.role,
        actor_id=claims.user_id,
        actor_role=claims.role,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
