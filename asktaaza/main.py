import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware

from .auth import get_current_user, get_is_admin, hash_password, require_admin, require_user, verify_password
from .config import get_settings
from .db import get_session, init_db
from .logging_config import configure_logging
from .models import OptionType, Question, User
from .schemas import (
    AdminQuestionOut,
    CompanyCount,
    Credentials,
    LimitsOut,
    OptionIn,
    OptionOut,
    QuestionFilter,
    QuestionOut,
    QuestionSubmission,
    TopicCount,
)
from .services import options as option_service
from .services import questions as question_service
from .services.guard import SubmissionGuard, is_valid_question
from .services.store import ClientStore, client_id_for
from .services.text import format_questions, highlight_keywords
from .services.trust import calculate_confidence, confidence_label, contributor_type


logger = logging.getLogger(__name__)


def get_guard(request: Request, db: Session = Depends(get_session)) -> SubmissionGuard:
    # cookie holds only the client id; the history itself stays server-side
    return SubmissionGuard(ClientStore(db, client_id_for(request.session)))


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _question_out(q: Question, search: Optional[str] = None) -> QuestionOut:
    out = QuestionOut.model_validate(q)
    out.confidence = calculate_confidence(q)
    out.confidence_label = confidence_label(out.confidence)
    out.items = format_questions(q.content)
    if search:
        out.highlighted = highlight_keywords(q.content, search)
    return out


def create_app(init_database: bool = True) -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        if init_database:
            init_db()
        logger.info("AskTaaza started")
        yield

    app = FastAPI(title="AskTaaza", version="0.1.0", lifespan=lifespan)
    app.add_middleware(SessionMiddleware, secret_key=settings.secret_key)

    @app.exception_handler(RequestValidationError)
    async def _validation_failed(request: Request, exc: RequestValidationError):
        return _error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation failed. Please check all required fields.",
            details=jsonable_encoder(exc.errors()),
        )

    @app.exception_handler(SQLAlchemyError)
    async def _database_failed(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error. Please try again.")

    # --- auth ---
    @app.post("/auth/signup", status_code=status.HTTP_201_CREATED)
    async def signup(request: Request, creds: Credentials, db: Session = Depends(get_session)):
        email = creds.email.strip().lower()
        if db.query(User).filter(User.email == email).first():
            return _error(status.HTTP_400_BAD_REQUEST, "An account with this email already exists")
        user = User(
            email=email,
            name=(creds.name or email.split("@")[0]).strip()[:100],
            password_hash=hash_password(creds.password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        request.session["user_id"] = int(user.id)
        return {"id": user.id, "email": user.email, "name": user.name}

    @app.post("/auth/login")
    async def login(request: Request, creds: Credentials, db: Session = Depends(get_session)):
        user = db.query(User).filter(User.email == creds.email.strip().lower()).first()
        if not user or not verify_password(creds.password, user.password_hash):
            return _error(status.HTTP_400_BAD_REQUEST, "Invalid email or password")
        request.session["user_id"] = int(user.id)
        return {"id": user.id, "email": user.email, "name": user.name}

    @app.post("/auth/logout")
    async def logout(request: Request):
        # keep the submission history; it belongs to the browser, not the account
        request.session.pop("user_id", None)
        return {"success": True}

    @app.get("/auth/status")
    async def auth_status(
        user: Optional[User] = Depends(get_current_user),
        is_admin: bool = Depends(get_is_admin),
        guard: SubmissionGuard = Depends(get_guard),
    ):
        return {
            "authenticated": user is not None,
            "is_admin": is_admin,
            "contributor": contributor_type(guard.submission_count()),
        }

    # --- questions ---
    @app.get("/questions", response_model=list[QuestionOut])
    async def list_questions(filters: QuestionFilter = Depends(), db: Session = Depends(get_session)):
        return [_question_out(q, filters.search) for q in question_service.get_ranked_questions(db, filters)]

    @app.get("/questions/{qid}", response_model=QuestionOut)
    async def question_detail(qid: int, db: Session = Depends(get_session)):
        q = question_service.get_question_by_id(db, qid)
        if not q:
            return _error(status.HTTP_404_NOT_FOUND, "Question not found")
        return _question_out(q)

    @app.get("/submissions/limits", response_model=LimitsOut)
    async def submission_limits(guard: SubmissionGuard = Depends(get_guard)):
        return LimitsOut(**vars(guard.check_limits()))

    @app.post("/questions", status_code=status.HTTP_201_CREATED, response_model=QuestionOut)
    async def submit_question(
        submission: QuestionSubmission,
        db: Session = Depends(get_session),
        user: User = Depends(require_user),
        guard: SubmissionGuard = Depends(get_guard),
    ):
        limits = guard.check_limits()
        if not limits.can_submit:
            return _error(
                status.HTTP_429_TOO_MANY_REQUESTS,
                limits.reason or "Submission limit reached. Please try again later.",
                time_until_next=limits.time_until_next,
            )
        if not is_valid_question(submission.content):
            return _error(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "Please provide a valid question. Avoid repetitive characters or very short text.",
            )
        if not submission.confirm_duplicate and guard.check_duplicate(submission.content):
            return _error(
                status.HTTP_409_CONFLICT,
                "This looks like a question you already submitted. Resubmit with confirm_duplicate to post it anyway.",
            )
        q = question_service.create_question(db, user, submission)
        guard.record_submission(submission.content)
        return _question_out(q)

    @app.get("/trending", response_model=list[TopicCount])
    async def trending(db: Session = Depends(get_session)):
        return question_service.get_trending_topics(db)

    @app.get("/companies/top", response_model=list[CompanyCount])
    async def top_companies(db: Session = Depends(get_session)):
        return question_service.get_top_companies(db)

    # --- admin (requires ASKTAAZA_ADMIN_EMAILS to contain the user's email) ---
    @app.get("/admin/questions", response_model=list[AdminQuestionOut])
    async def admin_questions(db: Session = Depends(get_session), user=Depends(require_admin)):
        return question_service.get_all_questions_for_admin(db)

    @app.post("/admin/questions/{qid}/flag")
    async def admin_flag(qid: int, db: Session = Depends(get_session), user=Depends(require_admin)):
        if not question_service.flag_question(db, qid):
            return _error(status.HTTP_404_NOT_FOUND, "Question not found")
        return {"success": True}

    @app.post("/admin/questions/{qid}/approve")
    async def admin_approve(qid: int, db: Session = Depends(get_session), user=Depends(require_admin)):
        if not question_service.approve_question(db, qid):
            return _error(status.HTTP_404_NOT_FOUND, "Question not found")
        return {"success": True}

    @app.delete("/admin/questions/{qid}")
    async def admin_delete(qid: int, db: Session = Depends(get_session), user=Depends(require_admin)):
        if not question_service.delete_question(db, qid):
            return _error(status.HTTP_404_NOT_FOUND, "Question not found")
        return {"success": True}

    # --- interview detail options (company / technology pick lists) ---
    @app.get("/options/{option_type}", response_model=list[str])
    async def list_options(option_type: OptionType, db: Session = Depends(get_session)):
        return option_service.get_options(db, option_type)

    @app.get("/admin/options/{option_type}", response_model=list[OptionOut])
    async def admin_list_options(option_type: OptionType, db: Session = Depends(get_session), user=Depends(require_admin)):
        return option_service.get_options_for_admin(db, option_type)

    @app.post("/admin/options/{option_type}", status_code=status.HTTP_201_CREATED, response_model=OptionOut)
    async def admin_add_option(option_type: OptionType, body: OptionIn, db: Session = Depends(get_session), user=Depends(require_admin)):
        opt = option_service.add_option(db, option_type, body.value)
        if opt is None:
            return _error(status.HTTP_400_BAD_REQUEST, "Value is required and must not already be listed.")
        return opt

    @app.delete("/admin/options/{option_id}")
    async def admin_remove_option(option_id: int, db: Session = Depends(get_session), user=Depends(require_admin)):
        if not option_service.remove_option(db, option_id):
            return _error(status.HTTP_404_NOT_FOUND, "Option not found")
        return {"success": True}

    return app


app = create_app()
