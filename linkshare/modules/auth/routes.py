from fastapi import APIRouter, Depends
from linkshare.core.dependencies import get_auth_service
from linkshare.core.state import ChatState, get_chat_state
from linkshare.modules.auth.schemas import LoginRequest, RegisterRequest, SessionResponse
from linkshare.modules.auth.service import AuthService

router = APIRouter(prefix="/session", tags=["session"])


def _session_response(state: ChatState) -> SessionResponse:
    snapshot = state.snapshot
    return SessionResponse(
        user=snapshot.user,
        profile=snapshot.profile,
        loading=snapshot.loading,
        error=snapshot.error,
        groups=list(snapshot.groups),
        active_group_id=snapshot.active_group_id,
    )


@router.get("", response_model=SessionResponse)
async def get_session_state(state: ChatState = Depends(get_chat_state)):
    """Current principal, profile, cached groups, selection and last error"""
    return _session_response(state)


@router.post("/login", response_model=SessionResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    state: ChatState = Depends(get_chat_state)
):
    """Sign in with email and password"""
    service.sign_in(login_data.email, login_data.password)
    return _session_response(state)


@router.post("/register", response_model=SessionResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
    state: ChatState = Depends(get_chat_state)
):
    """Create an account and its profile"""
    service.sign_up(register_data.email, register_data.password, register_data.nickname)
    return _session_response(state)


@router.post("/logout", status_code=204)
async def logout(service: AuthService = Depends(get_auth_service)):
    service.logout()
    return None
