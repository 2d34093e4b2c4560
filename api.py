#!/usr/bin/env python3
"""
FastAPI service for the TOEFL prep app.

Exposes the JSON-file store in storage.py as a REST API under /api. Users log
in with a signed session cookie; every content endpoint checks ownership and
public visibility before it reads or writes a collection.
"""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator
from pydantic.alias_generators import to_camel
from starlette.middleware.sessions import SessionMiddleware

import sharing
import storage

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("SECRET_KEY", "change-me-toefl-prep-session-key")
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

FolderType = Literal["passage", "vocabulary"]
TargetType = Literal["passage", "vocabulary", "writing", "speaking"]
FeedbackTargetType = Literal["writing", "speaking"]
MoodType = Literal["motivated", "happy", "neutral", "tired", "frustrated"]
AchievementType = Literal["completion", "streak", "mastery", "excellence", "champion", "legend"]
Reactions = Dict[str, NonNegativeInt]

app = FastAPI(
    title="TOEFL Prep API",
    description="Reading passages, vocabulary, writing and speaking practice for TOEFL study.",
    version="0.1.0",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SessionMiddleware, secret_key=SECRET_KEY, same_site="lax")


def _init_storage(store: storage.JsonStore) -> None:
    store.ensure_data_dir()
    if ADMIN_USERNAME and ADMIN_PASSWORD:
        storage.ensure_admin_user(store, ADMIN_USERNAME, ADMIN_PASSWORD)


STORE = storage.JsonStore(storage.DATA_DIR)
_init_storage(STORE)


def get_store() -> storage.JsonStore:
    return STORE


def get_current_user(request: Request, store: storage.JsonStore = Depends(get_store)) -> Dict[str, Any]:
    user_id = request.session.get("user_id")
    if user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    user = storage.get_user(store, user_id)
    if not user:
        request.session.clear()
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def require_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if not user.get("isAdmin"):
        raise HTTPException(status_code=403, detail="Forbidden: Admin access required")
    return user


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request data", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(storage.StorageError)
async def storage_error_handler(request: Request, exc: storage.StorageError) -> JSONResponse:
    logger.exception("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Credentials(CamelModel):
    username: str = Field(..., min_length=1, max_length=120)
    password: str = Field(..., min_length=1)


class UserOut(CamelModel):
    id: int
    username: str
    telegram_channel_id: Optional[str] = None
    is_admin: bool = False


class FolderCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: FolderType
    is_public: bool = False


class FolderOut(CamelModel):
    id: int
    name: str
    user_id: int
    type: FolderType
    is_public: bool


class PassageCreate(CamelModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    folder_id: Optional[int] = None
    is_public: bool = False


class PassageOut(CamelModel):
    id: int
    title: str
    content: str
    user_id: int
    folder_id: Optional[int] = None
    reactions: Dict[str, int] = Field(default_factory=dict)
    is_public: bool


class VocabularyCreate(CamelModel):
    word: str = Field(..., min_length=1)
    definition: str = Field(..., min_length=1)
    example: Optional[str] = None
    folder_id: Optional[int] = None
    is_public: bool = False


class VocabularyOut(CamelModel):
    id: int
    word: str
    definition: str
    example: Optional[str] = None
    user_id: int
    folder_id: Optional[int] = None
    reactions: Dict[str, int] = Field(default_factory=dict)
    is_public: bool


class WritingCreate(CamelModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    is_public: bool = False


class WritingOut(CamelModel):
    id: int
    title: str
    content: str
    user_id: int
    reactions: Dict[str, int] = Field(default_factory=dict)
    is_public: bool


class SpeakingCreate(CamelModel):
    title: str = Field(..., min_length=1)
    audio_url: str
    is_public: bool = False


class SpeakingOut(CamelModel):
    id: int
    title: str
    audio_url: str
    user_id: int
    reactions: Dict[str, int] = Field(default_factory=dict)
    is_public: bool


class FeedbackCreate(CamelModel):
    content: str = Field(..., min_length=1)
    target_type: FeedbackTargetType
    target_id: int


class FeedbackOut(CamelModel):
    id: int
    content: str
    user_id: int
    target_type: str
    target_id: int


class MoodCreate(CamelModel):
    mood: MoodType
    note: Optional[str] = None


class MoodOut(CamelModel):
    id: int
    user_id: int
    mood: str
    note: Optional[str] = None
    timestamp: datetime


class AchievementCreate(CamelModel):
    type: AchievementType
    label: str = Field(..., min_length=1)


class AchievementOut(CamelModel):
    id: int
    user_id: int
    type: str
    label: str
    earned_at: datetime


class Question(CamelModel):
    text: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=4, max_length=4)
    correct_answer: int = Field(..., ge=0, le=3)


class LessonCreate(CamelModel):
    title: str = Field(..., min_length=1)
    transcription: str = Field(..., min_length=1)
    questions: List[Question] = Field(..., min_length=1)
    audio_url: Optional[str] = None

    @field_validator("questions", mode="before")
    @classmethod
    def parse_questions(cls, value: Any) -> Any:
        # The listening form posts the question list as a JSON string.
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError("questions must be a JSON array") from exc
        return value


class LessonOut(CamelModel):
    id: int
    user_id: int
    title: str
    transcription: str
    questions: List[Question]
    audio_url: Optional[str] = None


class LessonAttempt(CamelModel):
    answers: List[int] = Field(default_factory=list)


class LessonResult(CamelModel):
    score: int
    total: int


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1)
    target_type: TargetType
    target_id: int
    is_public: bool = False


class CommentOut(CamelModel):
    id: int
    user_id: int
    content: str
    target_type: str
    target_id: int
    created_at: datetime
    is_public: bool


class TelegramChannelUpdate(CamelModel):
    channel_id: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def ensure_folder(store: storage.JsonStore, user: Dict[str, Any], folder_id: Optional[int], folder_type: str) -> None:
    if folder_id is None:
        return
    folder = storage.get_folder(store, folder_id)
    if not folder or folder.get("type") != folder_type or not storage.is_visible(folder, user["id"]):
        raise HTTPException(status_code=400, detail="Folder does not exist")


def ensure_target(store: storage.JsonStore, user: Dict[str, Any], target_type: str, target_id: int) -> None:
    target = storage.get_target(store, target_type, target_id)
    if not target or not storage.is_visible(target, user["id"]):
        raise HTTPException(status_code=404, detail="Target not found")


def replace_reactions(
    store: storage.JsonStore,
    user: Dict[str, Any],
    collection: str,
    record_id: int,
    reactions: Dict[str, int],
    not_found: str,
) -> Dict[str, bool]:
    record = store.get(collection, record_id)
    if not record or not storage.is_visible(record, user["id"]):
        raise HTTPException(status_code=404, detail=not_found)
    if storage.update_reactions(store, collection, record_id, reactions) is None:
        raise HTTPException(status_code=404, detail=not_found)
    return {"success": True}


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

@app.get("/")
def root() -> Dict[str, str]:
    return {"message": "TOEFL Prep API is running.", "data_dir": str(STORE.data_dir)}


@app.post("/api/register", response_model=UserOut, status_code=201)
def register(payload: Credentials, request: Request, store: storage.JsonStore = Depends(get_store)) -> Dict[str, Any]:
    try:
        user = storage.create_user(store, payload.username, payload.password)
    except storage.DuplicateUsernameError:
        raise HTTPException(status_code=400, detail="Username already taken")
    request.session["user_id"] = user["id"]
    return user


@app.post("/api/login", response_model=UserOut)
def login(payload: Credentials, request: Request, store: storage.JsonStore = Depends(get_store)) -> Dict[str, Any]:
    user = storage.get_user_by_username(store, payload.username)
    if not user or not storage.verify_password(user.get("password", ""), payload.password):
        raise HTTPException(status_code=401, detail="Invalid username or password")
    request.session["user_id"] = user["id"]
    return user


@app.post("/api/logout")
def logout(request: Request) -> Dict[str, bool]:
    request.session.clear()
    return {"success": True}


@app.get("/api/user", response_model=UserOut)
def current_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user


@app.post("/api/users/telegram-channel")
def set_telegram_channel(
    payload: TelegramChannelUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, bool]:
    storage.update_user_telegram_channel(store, user["id"], payload.channel_id)
    return {"success": True}


@app.post("/api/admin/users/{user_id}/make-admin")
def make_admin(
    user_id: int,
    admin: Dict[str, Any] = Depends(require_admin),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, bool]:
    if storage.set_user_as_admin(store, user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("User %d promoted user %d to admin", admin["id"], user_id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Folders
# ---------------------------------------------------------------------------

@app.post("/api/folders", response_model=FolderOut, status_code=201)
def create_folder(
    payload: FolderCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    return storage.create_folder(store, user["id"], payload.name, payload.type, payload.is_public)


@app.get("/api/folders/{folder_type}", response_model=List[FolderOut])
def list_folders(
    folder_type: FolderType,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return storage.get_folders(store, user["id"], folder_type)


# ---------------------------------------------------------------------------
# Passages
# ---------------------------------------------------------------------------

@app.post("/api/passages", response_model=PassageOut, status_code=201)
def create_passage(
    payload: PassageCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    ensure_folder(store, user, payload.folder_id, "passage")
    return storage.create_passage(
        store,
        user["id"],
        payload.title,
        payload.content,
        folder_id=payload.folder_id,
        is_public=payload.is_public,
    )


@app.get("/api/passages", response_model=List[PassageOut])
def list_passages(
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return storage.get_passages(store, user["id"])


@app.get("/api/passages/{folder_id}", response_model=List[PassageOut])
def list_folder_passages(
    folder_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return storage.get_passages(store, user["id"], folder_id)


@app.post("/api/passages/{passage_id}/reactions")
def react_to_passage(
    passage_id: int,
    reactions: Reactions = Body(...),
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, bool]:
    return replace_reactions(store, user, "passages", passage_id, reactions, "Passage not found")


@app.post("/api/passages/{passage_id}/share")
def share_passage(
    passage_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, bool]:
    passage = storage.get_passage(store, passage_id)
    if not passage or not storage.is_visible(passage, user["id"]):
        raise HTTPException(status_code=404, detail="Passage not found")
    channel_id = user.get("telegramChannelId")
    if not channel_id:
        raise HTTPException(status_code=400, detail="No Telegram channel ID configured")
    try:
        sharing.share_passage(passage, channel_id)
    except sharing.ShareError:
        raise HTTPException(status_code=500, detail="Failed to share to Telegram")
    return {"success": True}


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

@app.post("/api/vocabulary", response_model=VocabularyOut, status_code=201)
def create_vocabulary(
    payload: VocabularyCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    ensure_folder(store, user, payload.folder_id, "vocabulary")
    return storage.create_vocabulary(
        store,
        user["id"],
        payload.word,
        payload.definition,
        example=payload.example,
        folder_id=payload.folder_id,
        is_public=payload.is_public,
    )


@app.get("/api/vocabulary", response_model=List[VocabularyOut])
def list_vocabulary(
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return storage.get_vocabulary(store, user["id"])


@app.get("/api/vocabulary/{folder_id}", response_model=List[VocabularyOut])
def list_folder_vocabulary(
    folder_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return storage.get_vocabulary(store, user["id"], folder_id)


@app.post("/api/vocabulary/{vocabulary_id}/reactions")
def react_to_vocabulary(
    vocabulary_id: int,
    reactions: Reactions = Body(...),
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, bool]:
    return replace_reactions(store, user, "vocabulary", vocabulary_id, reactions, "Vocabulary not found")


# ---------------------------------------------------------------------------
# Writing and speaking
# ---------------------------------------------------------------------------

@app.post("/api/writings", response_model=WritingOut, status_code=201)
def create_writing(
    payload: WritingCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    return storage.create_writing(store, user["id"], payload.title, payload.content, payload.is_public)


@app.get("/api/writings", response_model=List[WritingOut])
def list_writings(
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return storage.get_writings(store, user["id"])


@app.get("/api/writings/{writing_id}", response_model=WritingOut)
def writing_detail(
    writing_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    writing = storage.get_writing(store, writing_id)
    if not writing or not storage.is_visible(writing, user["id"]):
        raise HTTPException(status_code=404, detail="Writing not found")
    return writing


@app.post("/api/writings/{writing_id}/reactions")
def react_to_writing(
    writing_id: int,
    reactions: Reactions = Body(...),
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, bool]:
    return replace_reactions(store, user, "writing", writing_id, reactions, "Writing not found")


@app.post("/api/speaking", response_model=SpeakingOut, status_code=201)
def create_speaking(
    payload: SpeakingCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    return storage.create_speaking(store, user["id"], payload.title, payload.audio_url, payload.is_public)


@app.get("/api/speaking", response_model=List[SpeakingOut])
def list_speaking(
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return storage.get_speakings(store, user["id"])


@app.get("/api/speaking/{speaking_id}", response_model=SpeakingOut)
def speaking_detail(
    speaking_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    speaking = storage.get_speaking(store, speaking_id)
    if not speaking or not storage.is_visible(speaking, user["id"]):
        raise HTTPException(status_code=404, detail="Speaking practice not found")
    return speaking


@app.post("/api/speaking/{speaking_id}/reactions")
def react_to_speaking(
    speaking_id: int,
    reactions: Reactions = Body(...),
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, bool]:
    return replace_reactions(store, user, "speaking", speaking_id, reactions, "Speaking practice not found")


# ---------------------------------------------------------------------------
# Feedback, moods, achievements
# ---------------------------------------------------------------------------

@app.post("/api/feedback", response_model=FeedbackOut, status_code=201)
def create_feedback(
    payload: FeedbackCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    ensure_target(store, user, payload.target_type, payload.target_id)
    return storage.create_feedback(store, user["id"], payload.content, payload.target_type, payload.target_id)


@app.get("/api/feedback/{target_type}/{target_id}", response_model=List[FeedbackOut])
def list_feedback(
    target_type: FeedbackTargetType,
    target_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    ensure_target(store, user, target_type, target_id)
    return storage.get_feedback(store, target_type, target_id)


@app.post("/api/moods", response_model=MoodOut, status_code=201)
def create_mood(
    payload: MoodCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    return storage.create_mood(store, user["id"], payload.mood, payload.note)


@app.get("/api/moods", response_model=List[MoodOut])
def list_moods(
    limit: int = Query(default=storage.DEFAULT_MOOD_LIMIT, ge=0),
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return storage.get_moods(store, user["id"], limit)


@app.post("/api/achievements", response_model=AchievementOut, status_code=201)
def create_achievement(
    payload: AchievementCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    return storage.create_achievement(store, user["id"], payload.type, payload.label)


@app.get("/api/achievements", response_model=List[AchievementOut])
def list_achievements(
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return storage.get_achievements(store, user["id"])


# ---------------------------------------------------------------------------
# Listening lessons
# ---------------------------------------------------------------------------

@app.post("/api/lessons", response_model=LessonOut, status_code=201)
def create_lesson(
    payload: LessonCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    questions = [q.model_dump(by_alias=True) for q in payload.questions]
    return storage.create_lesson(
        store,
        user["id"],
        payload.title,
        payload.transcription,
        questions,
        audio_url=payload.audio_url,
    )


@app.get("/api/lessons", response_model=List[LessonOut])
def list_lessons(
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return storage.get_lessons(store, user["id"])


def _own_lesson(store: storage.JsonStore, user: Dict[str, Any], lesson_id: int) -> Dict[str, Any]:
    lesson = storage.get_lesson(store, lesson_id)
    if not lesson or lesson.get("userId") != user["id"]:
        raise HTTPException(status_code=404, detail="Lesson not found")
    return lesson


@app.get("/api/lessons/{lesson_id}", response_model=LessonOut)
def lesson_detail(
    lesson_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    return _own_lesson(store, user, lesson_id)


@app.post("/api/lessons/{lesson_id}/attempts", response_model=LessonResult)
def submit_lesson_attempt(
    lesson_id: int,
    payload: LessonAttempt,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> LessonResult:
    lesson = _own_lesson(store, user, lesson_id)
    score, total = storage.score_lesson(lesson, payload.answers)
    return LessonResult(score=score, total=total)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

@app.post("/api/comments", response_model=CommentOut, status_code=201)
def create_comment(
    payload: CommentCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, Any]:
    ensure_target(store, user, payload.target_type, payload.target_id)
    return storage.create_comment(
        store,
        user["id"],
        payload.content,
        payload.target_type,
        payload.target_id,
        is_public=payload.is_public,
    )


@app.get("/api/comments/{target_type}/{target_id}", response_model=List[CommentOut])
def list_comments(
    target_type: TargetType,
    target_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    ensure_target(store, user, target_type, target_id)
    return storage.get_comments(store, target_type, target_id, user["id"])


@app.delete("/api/comments/{comment_id}")
def delete_comment(
    comment_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    store: storage.JsonStore = Depends(get_store),
) -> Dict[str, bool]:
    comment = storage.get_comment(store, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    if comment.get("userId") != user["id"] and not user.get("isAdmin"):
        raise HTTPException(status_code=403, detail="You can only delete your own comments")
    storage.delete_comment(store, comment_id)
    return {"success": True}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
