import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .auth import get_current_user
from .config import CLIENT_ORIGIN, COOKIE_SECURE, LOG_LEVEL, SESSION_COOKIE
from .credentials import CredentialStore
from .db import Card, get_db, init_db
from .errors import KanbanError, ValidationError
from .models import UserPublic
from .schemas import CardIn, CardOut, CardPatch, ErrorOut, Health, LoginIn, Ok, RegisterIn, UserOut
from .security import SESSION_TTL, issue_token
from .storage import CardRepository

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("life_kanban.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Creating database tables")
    init_db()
    yield


app = FastAPI(title="Life Kanban API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[CLIENT_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# === Error mapping ===


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorOut(error=message).model_dump())


@app.exception_handler(KanbanError)
async def kanban_error_handler(request: Request, exc: KanbanError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return error_response(ValidationError.status_code, ValidationError.default_message)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Store error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


# Runs in the server error middleware, outside CORS: these responses carry no
# Access-Control-Allow-* headers and browsers report them as network errors.
@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


# === Helpers ===


def user_out(user: UserPublic) -> UserOut:
    return UserOut(id=user.id, email=user.email)


def card_out(card: Card) -> CardOut:
    return CardOut(
        id=card.id,
        userId=card.owner_id,
        title=card.title,
        notes=card.notes,
        tag=card.tag,
        status=card.status,
        createdAt=card.created_at,
        updatedAt=card.updated_at,
    )


# === Health ===


@app.get("/health", response_model=Health)
def health():
    return Health()


# === Auth endpoints ===


@app.post("/auth/register", response_model=UserOut)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    user = CredentialStore(db).register(payload.email, payload.password)
    return user_out(user)


@app.post("/auth/login", response_model=UserOut)
def login(payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    try:
        user = CredentialStore(db).verify(payload.email, payload.password)
    except KanbanError:
        logger.info("Failed login attempt")
        raise
    response.set_cookie(
        SESSION_COOKIE,
        issue_token(user.id),
        max_age=int(SESSION_TTL.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=COOKIE_SECURE,
    )
    logger.info("User %s logged in", user.id)
    return user_out(user)


@app.post("/auth/logout", response_model=Ok)
def logout(response: Response):
    # the token itself stays valid until it expires
    response.delete_cookie(SESSION_COOKIE, httponly=True, samesite="lax", secure=COOKIE_SECURE)
    return Ok()


# === Protected endpoints ===

protected = APIRouter(dependencies=[Depends(get_current_user)])


@protected.get("/me", response_model=UserOut)
def me(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_out(CredentialStore(db).get(user_id))


@protected.get("/cards", response_model=list[CardOut])
def list_cards(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return [card_out(c) for c in CardRepository(db).list(user_id)]


@protected.post("/cards", response_model=CardOut)
def create_card(
    payload: CardIn,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    card = CardRepository(db).create(user_id, payload.title, payload.notes, payload.tag)
    return card_out(card)


@protected.get("/cards/{card_id}", response_model=CardOut)
def get_card(card_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return card_out(CardRepository(db).get(user_id, card_id))


@protected.patch("/cards/{card_id}", response_model=CardOut)
def update_card(
    card_id: str,
    payload: CardPatch,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    card = CardRepository(db).update(user_id, card_id, payload.to_changes())
    return card_out(card)


@protected.delete("/cards/{card_id}", response_model=Ok)
def delete_card(card_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    CardRepository(db).delete(user_id, card_id)
    return Ok()


app.include_router(protected)
