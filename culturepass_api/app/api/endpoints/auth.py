"""
Authentication endpoints.

Register, login and Google sign‑in answer with the account and set the
HTTP‑only session cookie; logout deletes the server‑side session and
clears the cookie.  Forgot/reset password work without a session.
"""

from fastapi import APIRouter, Depends, Response, status

from culturepass_api.app.core.errors import ValidationError
from culturepass_api.app.core.security import (
    SessionContext,
    clear_session_cookie,
    get_session,
    require_session,
    set_session_cookie,
)
from culturepass_api.app.schemas.common import OkResponse
from culturepass_api.app.schemas.user import (
    AccountRead,
    ForgotPasswordRequest,
    GoogleLoginRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
)
from culturepass_api.app.services.auth_service import AuthService
from culturepass_api.app.services.federated import TokenVerifier, get_token_verifier
from culturepass_api.app.services.password_reset_service import (
    PasswordResetService,
    ResetNotifier,
    get_reset_notifier,
)

router = APIRouter()

RESET_REQUESTED_MESSAGE = "If that email exists, a reset link has been sent."


@router.post("/register", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, response: Response) -> AccountRead:
    """Create an account and sign it in.

    Responds 409 when the username is taken.  An unknown
    ``referralCode`` is ignored.
    """
    profile = data.model_dump(exclude={"username", "password", "referral_code"})
    account, session_id = await AuthService.register(
        data.username, data.password, profile, referral_code=data.referral_code
    )
    set_session_cookie(response, session_id)
    return account


@router.post("/login", response_model=AccountRead)
async def login(data: LoginRequest, response: Response) -> AccountRead:
    account, session_id = await AuthService.login(data.username, data.password)
    set_session_cookie(response, session_id)
    return account


@router.post("/google", response_model=AccountRead)
async def login_google(
    data: GoogleLoginRequest,
    response: Response,
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> AccountRead:
    """Sign in with a Google ID token, creating the account on first use."""
    account, session_id = await AuthService.login_federated(data.id_token, verifier)
    set_session_cookie(response, session_id)
    return account


@router.post("/logout", response_model=OkResponse)
async def logout(
    response: Response,
    context: SessionContext = Depends(get_session),
    account: AccountRead = Depends(require_session),
) -> OkResponse:
    await AuthService.logout(context.session_id)
    clear_session_cookie(response)
    return OkResponse()


@router.get("/me", response_model=AccountRead)
async def me(account: AccountRead = Depends(require_session)) -> AccountRead:
    return account


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    notifier: ResetNotifier = Depends(get_reset_notifier),
) -> MessageResponse:
    """Send a reset link.  The answer is the same whether or not the
    address belongs to an account."""
    await PasswordResetService.request_reset(data.email, notifier)
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password", response_model=OkResponse)
async def reset_password(data: ResetPasswordRequest) -> OkResponse:
    """Set a new password with a token from the reset link.

    Responds 400 for a mismatched confirmation or an unknown, used or
    expired token.  All sessions of the account are ended.
    """
    if data.password != data.confirm_password:
        raise ValidationError("Passwords do not match")
    await PasswordResetService.reset_password(data.token, data.password)
    return OkResponse()
