import json
from datetime import datetime, timedelta, timezone

import sharing
import storage


class FakeResponse:
    def __init__(self, ok=True, status_code=200, text="{}"):
        self.ok = ok
        self.status_code = status_code
        self.text = text


def test_unauthenticated_requests_are_rejected(make_client):
    client = make_client()
    assert client.get("/api/user").status_code == 401
    assert client.get("/api/folders/passage").status_code == 401
    assert client.post("/api/passages", json={"title": "t", "content": "c"}).status_code == 401


def test_register_and_duplicate_username(make_client, app_store):
    client = make_client()
    r = client.post("/api/register", json={"username": "ana", "password": "x"})
    assert r.status_code == 201
    body = r.json()
    assert body["id"] == 1
    assert body["username"] == "ana"
    assert body["isAdmin"] is False
    assert "password" not in body

    r = make_client().post("/api/register", json={"username": "ana", "password": "x"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Username already taken"
    assert len(app_store.find("users")) == 1


def test_register_rejects_invalid_payload(make_client):
    r = make_client().post("/api/register", json={"username": "ana"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid request data"


def test_login_logout_round_trip(make_client):
    make_client("ana", password="pw")
    client = make_client()

    assert client.post("/api/login", json={"username": "ana", "password": "wrong"}).status_code == 401
    r = client.post("/api/login", json={"username": "ana", "password": "pw"})
    assert r.status_code == 200
    assert client.get("/api/user").json()["username"] == "ana"

    assert client.post("/api/logout").status_code == 200
    assert client.get("/api/user").status_code == 401


def test_private_folder_hidden_from_other_users(make_client):
    ana = make_client("ana")
    ben = make_client("ben")

    r = ana.post("/api/folders", json={"name": "SAT Words", "type": "vocabulary", "isPublic": False})
    assert r.status_code == 201
    folder = r.json()
    assert folder["userId"] == 1

    assert folder["id"] not in [f["id"] for f in ben.get("/api/folders/vocabulary").json()]
    assert folder["id"] in [f["id"] for f in ana.get("/api/folders/vocabulary").json()]
    assert ana.get("/api/folders/passage").json() == []


def test_public_folder_visible_to_everyone(make_client):
    ana = make_client("ana")
    ben = make_client("ben")
    folder = ana.post("/api/folders", json={"name": "Shared", "type": "passage", "isPublic": True}).json()
    assert [f["id"] for f in ben.get("/api/folders/passage").json()] == [folder["id"]]


def test_invalid_folder_type_is_400(make_client):
    ana = make_client("ana")
    assert ana.post("/api/folders", json={"name": "X", "type": "notes"}).status_code == 400
    assert ana.get("/api/folders/notes").status_code == 400


def test_passage_round_trip_and_folder_listing(make_client):
    ana = make_client("ana")
    folder = ana.post("/api/folders", json={"name": "Reading", "type": "passage"}).json()

    r = ana.post("/api/passages", json={"title": "Volcanoes", "content": "Lava...", "folderId": folder["id"]})
    assert r.status_code == 201
    created = r.json()
    assert created["reactions"] == {}
    assert created["isPublic"] is False
    ana.post("/api/passages", json={"title": "Loose", "content": "No folder"})

    listed = ana.get(f"/api/passages/{folder['id']}").json()
    assert listed == [created]
    assert len(ana.get("/api/passages").json()) == 2


def test_passage_with_unknown_folder_is_rejected(make_client, app_store):
    ana = make_client("ana")
    vocab_folder = ana.post("/api/folders", json={"name": "Words", "type": "vocabulary"}).json()

    r = ana.post("/api/passages", json={"title": "T", "content": "C", "folderId": 99})
    assert r.status_code == 400
    r = ana.post("/api/passages", json={"title": "T", "content": "C", "folderId": vocab_folder["id"]})
    assert r.status_code == 400
    assert app_store.find("passages") == []


def test_private_passages_not_listed_for_others(make_client):
    ana = make_client("ana")
    ben = make_client("ben")
    ana.post("/api/passages", json={"title": "Private", "content": "p"})
    public = ana.post("/api/passages", json={"title": "Public", "content": "p", "isPublic": True}).json()

    assert [p["id"] for p in ben.get("/api/passages").json()] == [public["id"]]


def test_passage_reactions_replace_map(make_client, app_store):
    ana = make_client("ana")
    passage = ana.post("/api/passages", json={"title": "T", "content": "C"}).json()
    url = f"/api/passages/{passage['id']}/reactions"

    assert ana.post(url, json={"star": 1, "thumbsUp": 2}).status_code == 200
    assert ana.post(url, json={"star": 0}).status_code == 200
    assert storage.get_passage(app_store, passage["id"])["reactions"] == {"star": 0}

    assert ana.post(url, json={"star": -1}).status_code == 400
    assert ana.post("/api/passages/99/reactions", json={"star": 1}).status_code == 404


def test_vocabulary_reaction_set_to_zero_keeps_key(make_client):
    ana = make_client("ana")
    vocab = ana.post("/api/vocabulary", json={"word": "ubiquitous", "definition": "everywhere"}).json()
    assert vocab["example"] is None

    url = f"/api/vocabulary/{vocab['id']}/reactions"
    ana.post(url, json={"helpful": 1})
    ana.post(url, json={"helpful": 0})

    listed = ana.get("/api/vocabulary").json()
    assert listed[0]["reactions"] == {"helpful": 0}


def test_vocabulary_folder_listing(make_client):
    ana = make_client("ana")
    folder = ana.post("/api/folders", json={"name": "SAT", "type": "vocabulary"}).json()
    inside = ana.post(
        "/api/vocabulary",
        json={"word": "terse", "definition": "brief", "example": "A terse reply.", "folderId": folder["id"]},
    ).json()
    ana.post("/api/vocabulary", json={"word": "verbose", "definition": "wordy"})

    assert [v["id"] for v in ana.get(f"/api/vocabulary/{folder['id']}").json()] == [inside["id"]]


def test_reacting_to_hidden_record_is_404(make_client):
    ana = make_client("ana")
    ben = make_client("ben")
    writing = ana.post("/api/writings", json={"title": "Essay", "content": "..."}).json()
    assert ben.post(f"/api/writings/{writing['id']}/reactions", json={"star": 1}).status_code == 404
    assert ben.get(f"/api/writings/{writing['id']}").status_code == 404


def test_writings_and_speaking(make_client):
    ana = make_client("ana")
    writing = ana.post("/api/writings", json={"title": "Essay", "content": "Body"}).json()
    speaking = ana.post("/api/speaking", json={"title": "Task 1", "audioUrl": "blob:rec"}).json()

    assert ana.get("/api/writings").json() == [writing]
    assert ana.get(f"/api/speaking/{speaking['id']}").json()["audioUrl"] == "blob:rec"

    r = ana.post(f"/api/speaking/{speaking['id']}/reactions", json={"star": 3})
    assert r.json() == {"success": True}
    assert ana.get("/api/speaking").json()[0]["reactions"] == {"star": 3}


def test_feedback_requires_existing_target(make_client):
    ana = make_client("ana")
    writing = ana.post("/api/writings", json={"title": "Essay", "content": "Body"}).json()

    r = ana.post("/api/feedback", json={"content": "Good", "targetType": "writing", "targetId": writing["id"]})
    assert r.status_code == 201
    assert ana.post("/api/feedback", json={"content": "?", "targetType": "writing", "targetId": 42}).status_code == 404
    assert ana.post("/api/feedback", json={"content": "?", "targetType": "passage", "targetId": 1}).status_code == 400

    listed = ana.get(f"/api/feedback/writing/{writing['id']}").json()
    assert [f["content"] for f in listed] == ["Good"]


def test_feedback_on_private_writing_hidden_from_others(make_client):
    ana = make_client("ana")
    ben = make_client("ben")
    writing = ana.post("/api/writings", json={"title": "Draft", "content": "Body"}).json()
    ana.post("/api/feedback", json={"content": "Tighten the intro", "targetType": "writing", "targetId": writing["id"]})

    assert ben.get(f"/api/feedback/writing/{writing['id']}").status_code == 404
    assert [f["content"] for f in ana.get(f"/api/feedback/writing/{writing['id']}").json()] == ["Tighten the intro"]


def test_moods_default_limit_and_order(make_client, app_store):
    ana = make_client("ana")
    assert ana.post("/api/moods", json={"mood": "happy", "note": "good day"}).status_code == 201
    assert ana.post("/api/moods", json={"mood": "sleepy"}).status_code == 400

    base = datetime(2020, 1, 1, tzinfo=timezone.utc)
    for i in range(35):
        app_store.insert("moods", {"userId": 1, "mood": "tired", "note": None, "timestamp": base + timedelta(days=i)})

    moods = ana.get("/api/moods").json()
    assert len(moods) == 30
    assert moods[0]["note"] == "good day"
    assert ana.get("/api/moods?limit=5").json()[1]["timestamp"].startswith("2020-02-04")
    assert ana.get("/api/moods?limit=abc").status_code == 400
    assert ana.get("/api/moods?limit=0").json() == []
    assert ana.get("/api/moods?limit=-1").status_code == 400


def test_achievements(make_client):
    ana = make_client("ana")
    r = ana.post("/api/achievements", json={"type": "completion", "label": "First Steps"})
    assert r.status_code == 201
    assert "earnedAt" in r.json()
    assert ana.post("/api/achievements", json={"type": "guru", "label": "?"}).status_code == 400
    assert [a["label"] for a in ana.get("/api/achievements").json()] == ["First Steps"]


QUESTIONS = [
    {"text": "What is the talk about?", "options": ["Labs", "Library", "Dorms", "Food"], "correctAnswer": 1},
    {"text": "Why does the woman call?", "options": ["a", "b", "c", "d"], "correctAnswer": 3},
]


def test_lesson_accepts_questions_as_json_string(make_client):
    ana = make_client("ana")
    r = ana.post(
        "/api/lessons",
        json={"title": "Campus", "transcription": "...", "questions": json.dumps(QUESTIONS), "audioUrl": None},
    )
    assert r.status_code == 201
    assert r.json()["questions"] == QUESTIONS

    r = ana.post("/api/lessons", json={"title": "Lecture", "transcription": "...", "questions": QUESTIONS})
    assert r.status_code == 201
    assert [lesson["title"] for lesson in ana.get("/api/lessons").json()] == ["Campus", "Lecture"]


def test_lesson_validation(make_client, app_store):
    ana = make_client("ana")
    bad = [{"text": "Q", "options": ["a", "b"], "correctAnswer": 0}]
    assert ana.post("/api/lessons", json={"title": "T", "transcription": "x", "questions": bad}).status_code == 400
    assert ana.post("/api/lessons", json={"title": "T", "transcription": "x", "questions": "[oops"}).status_code == 400
    assert ana.post("/api/lessons", json={"title": "T", "transcription": "x", "questions": []}).status_code == 400
    assert app_store.find("lessons") == []


def test_lesson_attempt_scoring_and_ownership(make_client):
    ana = make_client("ana")
    ben = make_client("ben")
    lesson = ana.post("/api/lessons", json={"title": "T", "transcription": "x", "questions": QUESTIONS}).json()

    r = ana.post(f"/api/lessons/{lesson['id']}/attempts", json={"answers": [1, 0]})
    assert r.json() == {"score": 1, "total": 2}
    assert ben.get(f"/api/lessons/{lesson['id']}").status_code == 404
    assert ben.post(f"/api/lessons/{lesson['id']}/attempts", json={"answers": [1, 3]}).status_code == 404


def test_comment_missing_content_is_400_without_write(make_client, app_store):
    ana = make_client("ana")
    passage = ana.post("/api/passages", json={"title": "T", "content": "C"}).json()

    r = ana.post("/api/comments", json={"targetType": "passage", "targetId": passage["id"]})
    assert r.status_code == 400
    assert r.json()["details"]
    assert not (app_store.data_dir / "comments.json").exists()


def test_comments_newest_first_and_delete(make_client, app_store):
    ana = make_client("ana")
    ben = make_client("ben")
    passage = ana.post("/api/passages", json={"title": "T", "content": "C", "isPublic": True}).json()
    target = {"targetType": "passage", "targetId": passage["id"]}

    first = ana.post("/api/comments", json={"content": "first", "isPublic": True, **target}).json()
    second = ben.post("/api/comments", json={"content": "second", "isPublic": True, **target}).json()
    ben.post("/api/comments", json={"content": "ben only", **target})
    app_store.update("comments", first["id"], {"createdAt": datetime(2020, 1, 1, tzinfo=timezone.utc)})
    app_store.update("comments", second["id"], {"createdAt": datetime(2021, 1, 1, tzinfo=timezone.utc)})

    url = f"/api/comments/passage/{passage['id']}"
    assert [c["content"] for c in ana.get(url).json()] == ["second", "first"]
    assert [c["content"] for c in ben.get(url).json()] == ["ben only", "second", "first"]

    assert ana.delete(f"/api/comments/{second['id']}").status_code == 403
    assert ben.delete(f"/api/comments/{second['id']}").status_code == 200
    assert ben.delete(f"/api/comments/{second['id']}").status_code == 404
    assert [c["id"] for c in app_store.find("comments")] == [first["id"], 3]


def test_comment_on_missing_target_is_404(make_client):
    ana = make_client("ana")
    r = ana.post("/api/comments", json={"content": "hi", "targetType": "speaking", "targetId": 5})
    assert r.status_code == 404


def test_comments_on_private_passage_hidden_from_others(make_client):
    ana = make_client("ana")
    ben = make_client("ben")
    passage = ana.post("/api/passages", json={"title": "Private", "content": "C"}).json()
    target = {"targetType": "passage", "targetId": passage["id"]}
    ana.post("/api/comments", json={"content": "note to self", "isPublic": True, **target})

    assert ben.get(f"/api/comments/passage/{passage['id']}").status_code == 404
    assert len(ana.get(f"/api/comments/passage/{passage['id']}").json()) == 1


def test_admin_can_promote_users(make_client, app_store):
    admin = make_client("root", admin=True)
    ana = make_client("ana")

    assert ana.post("/api/admin/users/1/make-admin").status_code == 403
    assert admin.post("/api/admin/users/2/make-admin").status_code == 200
    assert storage.is_user_admin(app_store, 2)
    assert admin.post("/api/admin/users/99/make-admin").status_code == 404


def test_admin_can_delete_any_comment(make_client):
    admin = make_client("root", admin=True)
    ana = make_client("ana")
    passage = ana.post("/api/passages", json={"title": "T", "content": "C"}).json()
    comment = ana.post(
        "/api/comments", json={"content": "spam", "targetType": "passage", "targetId": passage["id"]}
    ).json()
    assert admin.delete(f"/api/comments/{comment['id']}").status_code == 200


def test_share_requires_channel(make_client):
    ana = make_client("ana")
    passage = ana.post("/api/passages", json={"title": "T", "content": "C"}).json()

    r = ana.post(f"/api/passages/{passage['id']}/share")
    assert r.status_code == 400
    assert r.json()["detail"] == "No Telegram channel ID configured"
    assert ana.post("/api/passages/99/share").status_code == 404


def test_share_posts_to_telegram(make_client, monkeypatch):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json))
        return FakeResponse()

    monkeypatch.setattr(sharing, "TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setattr(sharing.requests, "post", fake_post)

    ana = make_client("ana")
    assert ana.post("/api/users/telegram-channel", json={"channelId": "@toefl"}).status_code == 200
    assert ana.get("/api/user").json()["telegramChannelId"] == "@toefl"
    passage = ana.post("/api/passages", json={"title": "Volcanoes", "content": "Lava"}).json()

    assert ana.post(f"/api/passages/{passage['id']}/share").status_code == 200
    url, payload = calls[0]
    assert url.endswith("/bot123:abc/sendMessage")
    assert payload["chat_id"] == "@toefl"
    assert "*Volcanoes*" in payload["text"]


def test_share_reports_telegram_failure(make_client, monkeypatch):
    monkeypatch.setattr(sharing, "TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setattr(sharing.requests, "post", lambda *a, **kw: FakeResponse(ok=False, status_code=403))

    ana = make_client("ana")
    ana.post("/api/users/telegram-channel", json={"channelId": "@toefl"})
    passage = ana.post("/api/passages", json={"title": "T", "content": "C"}).json()

    r = ana.post(f"/api/passages/{passage['id']}/share")
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to share to Telegram"


def test_corrupt_collection_is_500(make_client, app_store):
    ana = make_client("ana")
    (app_store.data_dir / "writing.json").write_text("not json", encoding="utf-8")
    r = ana.get("/api/writings")
    assert r.status_code == 500
    assert r.json()["detail"] == "Internal server error"
