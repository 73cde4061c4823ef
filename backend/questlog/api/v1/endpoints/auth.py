import structlog
from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import select

from questlog.api.deps import CurrentPlayer, DBSession, commit_or_conflict
from questlog.core.config import Settings
from questlog.core.security import create_access_token, hash_password, verify_password
from questlog.db.models import AuthCredential, Player
from questlog.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from questlog.schemas.player import PlayerRead

router = APIRouter(prefix="/auth", tags=["auth"])
logger = structlog.get_logger(__name__)


def _issue_token(player: Player, settings: Settings) -> TokenResponse:
    token = create_access_token(
        subject=player.id,
        secret_key=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.access_token_expire_minutes,
        email=player.email,
        name=player.name,
    )
    return TokenResponse(
        access_token=token,
        expires_in=settings.access_token_expire_minutes * 60,
        player=PlayerRead.model_validate(player),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    request: Request,
    db: DBSession,
) -> TokenResponse:
    email = payload.email.lower()
    existing = await db.scalar(select(Player).where(Player.email == email))
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    player = Player(email=email, name=payload.name.strip())
    credential = AuthCredential(
        player=player,
        password_hash=hash_password(payload.password),
    )
    db.add_all([player, credential])
    await commit_or_conflict(db, "Email already registered")
    await db.refresh(player)

    logger.info("player registered", player_id=player.id)
    return _issue_token(player, request.app.state.settings)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    db: DBSession,
) -> TokenResponse:
    player = await db.scalar(select(Player).where(Player.email == payload.email.lower()))
    if not player:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    credential = await db.scalar(
        select(AuthCredential).where(AuthCredential.player_id == player.id)
    )
    if not credential or not verify_password(payload.password, credential.password_hash):
        logger.warning("login rejected", player_id=player.id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return _issue_token(player, request.app.state.settings)


@router.get("/me", response_model=PlayerRead)
async def me(current_player: CurrentPlayer) -> PlayerRead:
    return PlayerRead.model_validate(current_player)
