#!/usr/bin/env python3
"""
JSON-file document store for the TOEFL prep service.

Every entity collection lives in its own JSON document inside DATA_DIR, shaped
``{"<collection>": [...], "lastId": N}``. Each operation loads the whole file,
changes it in memory and writes it back, so the files on disk are always the
single source of truth.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from werkzeug.security import check_password_hash, generate_password_hash

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))

COLLECTIONS = (
    "users",
    "folders",
    "passages",
    "vocabulary",
    "writing",
    "speaking",
    "feedback",
    "moods",
    "lessons",
    "achievements",
    "comments",
)
DATE_FIELDS = ("timestamp", "createdAt", "earnedAt")

FOLDER_TYPES = ("passage", "vocabulary")
REACTABLE_COLLECTIONS = ("passages", "vocabulary", "writing", "speaking")
TARGET_COLLECTIONS = {
    "passage": "passages",
    "vocabulary": "vocabulary",
    "writing": "writing",
    "speaking": "speaking",
}
FEEDBACK_TARGET_TYPES = ("writing", "speaking")
MOOD_OPTIONS = ("motivated", "happy", "neutral", "tired", "frustrated")
ACHIEVEMENT_TYPES = ("completion", "streak", "mastery", "excellence", "champion", "legend")
DEFAULT_MOOD_LIMIT = 30

Record = Dict[str, Any]


class StorageError(Exception):
    """A collection file could not be read, parsed or written."""


class DuplicateUsernameError(ValueError):
    pass


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    # Files written by older clients use a trailing "Z".
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _load_dates(record: Record) -> Record:
    loaded = dict(record)
    for field in DATE_FIELDS:
        if loaded.get(field) is not None:
            loaded[field] = parse_timestamp(loaded[field])
    return loaded


def _dump_dates(record: Record) -> Record:
    dumped = dict(record)
    for field in DATE_FIELDS:
        if isinstance(dumped.get(field), datetime):
            dumped[field] = dumped[field].isoformat()
    return dumped


class JsonStore:
    """Read-modify-write access to the per-collection JSON files."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        self._locks = {name: threading.RLock() for name in COLLECTIONS}

    def ensure_data_dir(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        if name not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {name}")
        return self.data_dir / f"{name}.json"

    def lock(self, name: str) -> threading.RLock:
        return self._locks[name]

    def read(self, name: str) -> Tuple[List[Record], int]:
        path = self.path_for(name)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return [], 0
        except OSError as exc:
            logger.error("Could not read %s: %s", path, exc)
            raise StorageError(f"Could not read {path.name}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Corrupt collection file %s: %s", path, exc)
            raise StorageError(f"{path.name} is not valid JSON") from exc
        if not isinstance(data, dict):
            raise StorageError(f"{path.name} must contain a JSON object")

        raw_records = data.get(name) or []
        if not isinstance(raw_records, list):
            raise StorageError(f"{path.name}: {name!r} must be a list")
        try:
            records = [_load_dates(r) for r in raw_records]
            last_id = int(data.get("lastId") or 0)
            if records:
                last_id = max(last_id, max(int(r["id"]) for r in records))
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Malformed record in %s: %s", path, exc)
            raise StorageError(f"{path.name} holds a malformed record") from exc
        return records, last_id

    def write(self, name: str, records: Sequence[Record], last_id: int) -> None:
        path = self.path_for(name)
        payload = {name: [_dump_dates(r) for r in records], "lastId": last_id}
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self.ensure_data_dir()
            tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.error("Could not write %s: %s", path, exc)
            raise StorageError(f"Could not write {path.name}") from exc
        logger.debug("Wrote %d records to %s (lastId=%d)", len(records), path.name, last_id)

    def insert(self, name: str, fields: Record) -> Record:
        with self._locks[name]:
            records, last_id = self.read(name)
            record = {"id": last_id + 1, **fields}
            records.append(record)
            self.write(name, records, record["id"])
        return record

    def find(self, name: str, predicate: Optional[Callable[[Record], bool]] = None) -> List[Record]:
        records, _ = self.read(name)
        if predicate is None:
            return records
        return [r for r in records if predicate(r)]

    def get(self, name: str, record_id: int) -> Optional[Record]:
        records, _ = self.read(name)
        for record in records:
            if record["id"] == record_id:
                return record
        return None

    def update(self, name: str, record_id: int, changes: Record) -> Optional[Record]:
        with self._locks[name]:
            records, last_id = self.read(name)
            for record in records:
                if record["id"] == record_id:
                    record.update(changes)
                    self.write(name, records, last_id)
                    return record
        return None

    def delete(self, name: str, record_id: int) -> bool:
        with self._locks[name]:
            records, last_id = self.read(name)
            remaining = [r for r in records if r["id"] != record_id]
            if len(remaining) == len(records):
                return False
            self.write(name, remaining, last_id)
        return True


def is_visible(record: Record, user_id: int) -> bool:
    return record.get("userId") == user_id or bool(record.get("isPublic"))


def newest_first(records: List[Record], field: str) -> List[Record]:
    return sorted(records, key=lambda r: parse_timestamp(r[field]), reverse=True)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    return generate_password_hash(password, method="scrypt")


def verify_password(stored: str, supplied: str) -> bool:
    if not stored:
        return False
    return check_password_hash(stored, supplied)


def get_user(store: JsonStore, user_id: int) -> Optional[Record]:
    return store.get("users", user_id)


def get_user_by_username(store: JsonStore, username: str) -> Optional[Record]:
    matches = store.find("users", lambda u: u.get("username") == username)
    return matches[0] if matches else None


def create_user(
    store: JsonStore,
    username: str,
    password: str,
    is_admin: bool = False,
    telegram_channel_id: Optional[str] = None,
) -> Record:
    with store.lock("users"):
        if get_user_by_username(store, username):
            raise DuplicateUsernameError("Username already taken")
        user = store.insert(
            "users",
            {
                "username": username,
                "password": hash_password(password),
                "telegramChannelId": telegram_channel_id,
                "isAdmin": is_admin,
            },
        )
    logger.info("Registered user %s (id=%d)", username, user["id"])
    return user


def update_user_telegram_channel(store: JsonStore, user_id: int, channel_id: str) -> Optional[Record]:
    return store.update("users", user_id, {"telegramChannelId": channel_id})


def is_user_admin(store: JsonStore, user_id: int) -> bool:
    user = get_user(store, user_id)
    return bool(user and user.get("isAdmin"))


def set_user_as_admin(store: JsonStore, user_id: int) -> Optional[Record]:
    user = store.update("users", user_id, {"isAdmin": True})
    if user:
        logger.info("Granted admin rights to user %d", user_id)
    return user


def ensure_admin_user(store: JsonStore, username: str, password: str) -> Record:
    user = get_user_by_username(store, username)
    if user:
        if not user.get("isAdmin"):
            user = set_user_as_admin(store, user["id"]) or user
        return user
    return create_user(store, username, password, is_admin=True)


# ---------------------------------------------------------------------------
# Folders and folder content
# ---------------------------------------------------------------------------

def create_folder(store: JsonStore, user_id: int, name: str, folder_type: str, is_public: bool = False) -> Record:
    return store.insert(
        "folders",
        {"name": name, "userId": user_id, "type": folder_type, "isPublic": is_public},
    )


def get_folder(store: JsonStore, folder_id: int) -> Optional[Record]:
    return store.get("folders", folder_id)


def get_folders(store: JsonStore, user_id: int, folder_type: str) -> List[Record]:
    return store.find(
        "folders",
        lambda f: f.get("type") == folder_type and is_visible(f, user_id),
    )


def create_passage(
    store: JsonStore,
    user_id: int,
    title: str,
    content: str,
    folder_id: Optional[int] = None,
    is_public: bool = False,
) -> Record:
    return store.insert(
        "passages",
        {
            "title": title,
            "content": content,
            "userId": user_id,
            "folderId": folder_id,
            "reactions": {},
            "isPublic": is_public,
        },
    )


def get_passage(store: JsonStore, passage_id: int) -> Optional[Record]:
    return store.get("passages", passage_id)


def get_passages(store: JsonStore, user_id: int, folder_id: Optional[int] = None) -> List[Record]:
    def matches(passage: Record) -> bool:
        if folder_id is not None and passage.get("folderId") != folder_id:
            return False
        return is_visible(passage, user_id)

    return store.find("passages", matches)


def create_vocabulary(
    store: JsonStore,
    user_id: int,
    word: str,
    definition: str,
    example: Optional[str] = None,
    folder_id: Optional[int] = None,
    is_public: bool = False,
) -> Record:
    return store.insert(
        "vocabulary",
        {
            "word": word,
            "definition": definition,
            "example": example,
            "userId": user_id,
            "folderId": folder_id,
            "reactions": {},
            "isPublic": is_public,
        },
    )


def get_vocabulary(store: JsonStore, user_id: int, folder_id: Optional[int] = None) -> List[Record]:
    """Vocabulary visible to ``user_id``.

    A folder listing also carries public words from other folders so shared
    word lists show up next to the user's own.
    """

    def matches(vocab: Record) -> bool:
        if not is_visible(vocab, user_id):
            return False
        return folder_id is None or vocab.get("folderId") == folder_id or bool(vocab.get("isPublic"))

    return store.find("vocabulary", matches)


# ---------------------------------------------------------------------------
# Writing and speaking practice
# ---------------------------------------------------------------------------

def create_writing(store: JsonStore, user_id: int, title: str, content: str, is_public: bool = False) -> Record:
    return store.insert(
        "writing",
        {"title": title, "content": content, "userId": user_id, "reactions": {}, "isPublic": is_public},
    )


def get_writing(store: JsonStore, writing_id: int) -> Optional[Record]:
    return store.get("writing", writing_id)


def get_writings(store: JsonStore, user_id: int) -> List[Record]:
    return store.find("writing", lambda w: is_visible(w, user_id))


def create_speaking(store: JsonStore, user_id: int, title: str, audio_url: str, is_public: bool = False) -> Record:
    return store.insert(
        "speaking",
        {"title": title, "audioUrl": audio_url, "userId": user_id, "reactions": {}, "isPublic": is_public},
    )


def get_speaking(store: JsonStore, speaking_id: int) -> Optional[Record]:
    return store.get("speaking", speaking_id)


def get_speakings(store: JsonStore, user_id: int) -> List[Record]:
    return store.find("speaking", lambda s: is_visible(s, user_id))


def update_reactions(store: JsonStore, collection: str, record_id: int, reactions: Dict[str, int]) -> Optional[Record]:
    """Replace the whole reactions map of one record.

    The map is stored as given; counts are not merged with what is on disk.
    """
    if collection not in REACTABLE_COLLECTIONS:
        raise KeyError(f"{collection} records have no reactions")
    return store.update(collection, record_id, {"reactions": dict(reactions)})


def get_target(store: JsonStore, target_type: str, target_id: int) -> Optional[Record]:
    collection = TARGET_COLLECTIONS.get(target_type)
    if collection is None:
        return None
    return store.get(collection, target_id)


# ---------------------------------------------------------------------------
# Feedback, moods, achievements
# ---------------------------------------------------------------------------

def create_feedback(store: JsonStore, user_id: int, content: str, target_type: str, target_id: int) -> Record:
    return store.insert(
        "feedback",
        {"content": content, "userId": user_id, "targetType": target_type, "targetId": target_id},
    )


def get_feedback(store: JsonStore, target_type: str, target_id: int) -> List[Record]:
    return store.find(
        "feedback",
        lambda f: f.get("targetType") == target_type and f.get("targetId") == target_id,
    )


def create_mood(store: JsonStore, user_id: int, mood: str, note: Optional[str] = None) -> Record:
    return store.insert("moods", {"userId": user_id, "mood": mood, "note": note, "timestamp": now_utc()})


def get_moods(store: JsonStore, user_id: int, limit: int = DEFAULT_MOOD_LIMIT) -> List[Record]:
    moods = store.find("moods", lambda m: m.get("userId") == user_id)
    return newest_first(moods, "timestamp")[:limit]


def create_achievement(store: JsonStore, user_id: int, achievement_type: str, label: str) -> Record:
    return store.insert(
        "achievements",
        {"userId": user_id, "type": achievement_type, "label": label, "earnedAt": now_utc()},
    )


def get_achievements(store: JsonStore, user_id: int) -> List[Record]:
    achievements = store.find("achievements", lambda a: a.get("userId") == user_id)
    return newest_first(achievements, "earnedAt")


# ---------------------------------------------------------------------------
# Listening lessons
# ---------------------------------------------------------------------------

def create_lesson(
    store: JsonStore,
    user_id: int,
    title: str,
    transcription: str,
    questions: List[Dict[str, Any]],
    audio_url: Optional[str] = None,
) -> Record:
    return store.insert(
        "lessons",
        {
            "userId": user_id,
            "title": title,
            "transcription": transcription,
            "questions": questions,
            "audioUrl": audio_url,
        },
    )


def get_lesson(store: JsonStore, lesson_id: int) -> Optional[Record]:
    return store.get("lessons", lesson_id)


def get_lessons(store: JsonStore, user_id: int) -> List[Record]:
    return store.find("lessons", lambda lesson: lesson.get("userId") == user_id)


def score_lesson(lesson: Record, answers: Sequence[int]) -> Tuple[int, int]:
    questions = lesson.get("questions") or []
    score = 0
    for i, question in enumerate(questions):
        if i < len(answers) and answers[i] == question.get("correctAnswer"):
            score += 1
    return score, len(questions)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

def create_comment(
    store: JsonStore,
    user_id: int,
    content: str,
    target_type: str,
    target_id: int,
    is_public: bool = False,
) -> Record:
    return store.insert(
        "comments",
        {
            "userId": user_id,
            "content": content,
            "targetType": target_type,
            "targetId": target_id,
            "createdAt": now_utc(),
            "isPublic": is_public,
        },
    )


def get_comment(store: JsonStore, comment_id: int) -> Optional[Record]:
    return store.get("comments", comment_id)


def get_comments(store: JsonStore, target_type: str, target_id: int, user_id: int) -> List[Record]:
    comments = store.find(
        "comments",
        lambda c: c.get("targetType") == target_type
        and c.get("targetId") == target_id
        and is_visible(c, user_id),
    )
    return newest_first(comments, "createdAt")


def delete_comment(store: JsonStore, comment_id: int) -> bool:
    return store.delete("comments", comment_id)


# ---------------------------------------------------------------------------
# Maintenance CLI
# ---------------------------------------------------------------------------

def collection_stats(store: JsonStore) -> Dict[str, Tuple[int, int]]:
    stats: Dict[str, Tuple[int, int]] = {}
    for name in COLLECTIONS:
        records, last_id = store.read(name)
        stats[name] = (len(records), last_id)
    return stats


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Maintenance commands for the TOEFL prep data files.")
    parser.add_argument("--data-dir", default=str(DATA_DIR), help="directory holding the collection files")
    sub = parser.add_subparsers(dest="command", required=True)
    promote = sub.add_parser("promote", help="grant admin rights to a user")
    promote.add_argument("username")
    sub.add_parser("stats", help="show record counts per collection")
    args = parser.parse_args(argv)

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    store = JsonStore(Path(args.data_dir))

    if args.command == "promote":
        user = get_user_by_username(store, args.username)
        if not user:
            print(f"No user named {args.username!r}.")
            return 1
        set_user_as_admin(store, user["id"])
        print(f"{args.username} is now an admin.")
        return 0

    for name, (count, last_id) in collection_stats(store).items():
        print(f"{name:<13} {count:>6} records  lastId={last_id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
