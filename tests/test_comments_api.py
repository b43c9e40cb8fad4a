"""Comment endpoints: create, list, own list, replace, patch, soft delete."""

import base64

import pytest

from models.fields import MAX_INT

from conftest import auth, b64_image, png_header_only


def _post(client, token=None, **body):
    if token is None:
        body.setdefault("userName", "Guest")
        body.setdefault("email", "guest@example.com")
    return client.post("/v1/comments", json=body, headers=auth(token) if token else {})


def _list(client, query="", token=None):
    return client.get(f"/v1/comments{query}", headers=auth(token) if token else {})


# ==================== create ====================


def test_anonymous_text_comment_round_trip(client):
    resp = _post(client, text="Hello there", homePage="https://example.com", data={"lang": "en"})
    assert resp.status_code == 201
    created = resp.json()["payload"]
    assert created["text"] == "Hello there"
    assert created["image"] is None
    assert created["data"] == {"lang": "en"}
    assert created["replied"] is None

    body = _list(client).json()
    assert body["count"] == 1
    assert body["payload"][0] == created


def test_data_defaults_to_empty_object(client):
    assert _post(client, text="x").json()["payload"]["data"] == {}


def test_image_comment(client):
    resp = _post(client, image=b64_image((640, 480)))
    assert resp.status_code == 201
    payload = resp.json()["payload"]
    assert payload["text"] is None
    assert payload["image"].startswith("data:image/png;base64,")


@pytest.mark.parametrize(
    "body, message",
    [
        ({"text": "hi", "image": b64_image()}, "Only text or image is allowed, not both"),
        ({}, "Either text or image is required"),
        ({"text": ""}, "Either text or image is required"),
        ({"text": "a" * 102401}, "Text is too large"),
    ],
)
def test_text_xor_image(client, body, message):
    resp = _post(client, **body)
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == message
    assert _list(client).json()["count"] == 0


def test_undecodable_image_is_422(client):
    assert _post(client, image="bm90IGFuIGltYWdl").status_code == 422


def test_anonymous_author_fields_required(client):
    resp = client.post("/v1/comments", json={"text": "hi"})
    assert resp.status_code == 422
    assert resp.json()["error"]["message"] == "Missing required fields"


def test_home_page_must_be_http(client):
    assert _post(client, text="hi", homePage="ftp://example.com").status_code == 422


def test_signed_in_author_comes_from_account(client, user_token):
    resp = _post(client, user_token, text="mine", userName="Someone Else", email="else@example.com")
    assert resp.status_code == 201
    payload = resp.json()["payload"]
    assert payload["userName"] == "Alice"
    assert payload["email"] == "alice@example.com"


# ==================== replies ====================


def test_reply_to_missing_comment_is_rejected(client):
    resp = _post(client, text="reply", replied=999)
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Comment does not exist"
    assert _list(client).json()["count"] == 0


def test_reply_to_existing_comment(client):
    parent = _post(client, text="parent").json()["payload"]
    resp = _post(client, text="child", replied=parent["id"])
    assert resp.status_code == 201
    assert resp.json()["payload"]["replied"] == parent["id"]


def test_reply_to_deleted_comment_is_rejected(client, admin_token):
    parent = _post(client, text="parent").json()["payload"]
    client.delete(f"/v1/comments/{parent['id']}", headers=auth(admin_token))
    assert _post(client, text="child", replied=parent["id"]).status_code == 400


# ==================== listing ====================


def test_list_order_and_pagination(client):
    for i in range(3):
        _post(client, text=f"c{i}")

    assert [c["text"] for c in _list(client).json()["payload"]] == ["c2", "c1", "c0"]
    assert [c["text"] for c in _list(client, "?reverse=true").json()["payload"]] == ["c0", "c1", "c2"]

    page2 = _list(client, "?page=2").json()
    assert page2["payload"] == []
    assert page2["count"] == 3
    assert page2["page"] == 2


def test_deleted_view_requires_admin(client, user_token, admin_token):
    comment = _post(client, text="doomed").json()["payload"]
    client.delete(f"/v1/comments/{comment['id']}", headers=auth(admin_token))

    assert _list(client, "?deleted=true").status_code == 401
    resp = _list(client, "?deleted=true", user_token)
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Regular users cannot view deleted comments"

    resp = _list(client, "?deleted=true", admin_token)
    assert resp.status_code == 200
    assert [c["id"] for c in resp.json()["payload"]] == [comment["id"]]
    assert _list(client).json()["count"] == 0


def test_my_comments(client, user_token, other_token):
    _post(client, user_token, text="alice 1")
    _post(client, other_token, text="bob 1")
    _post(client, user_token, text="alice 2")

    resp = client.get("/v1/comments/me", headers=auth(user_token))
    assert resp.status_code == 200
    assert [c["text"] for c in resp.json()["payload"]] == ["alice 2", "alice 1"]

    assert client.get("/v1/comments/me").status_code == 401
    assert client.get("/v1/comments/me?deleted=true", headers=auth(user_token)).status_code == 403


# ==================== patch ====================


def test_owner_patches_text(client, user_token):
    comment = _post(client, user_token, text="first").json()["payload"]
    resp = client.patch(f"/v1/comments/{comment['id']}", json={"text": "second"}, headers=auth(user_token))
    assert resp.status_code == 200
    assert resp.json()["payload"]["text"] == "second"


def test_patch_switches_between_text_and_image(client, user_token, png_b64):
    comment = _post(client, user_token, text="words").json()["payload"]
    url = f"/v1/comments/{comment['id']}"

    payload = client.patch(url, json={"image": png_b64}, headers=auth(user_token)).json()["payload"]
    assert payload["text"] is None
    assert payload["image"].startswith("data:image/png;base64,")

    payload = client.patch(url, json={"text": "words again"}, headers=auth(user_token)).json()["payload"]
    assert payload["text"] == "words again"
    assert payload["image"] is None


def test_patch_cannot_leave_comment_empty(client, user_token):
    comment = _post(client, user_token, text="words").json()["payload"]
    resp = client.patch(f"/v1/comments/{comment['id']}", json={"text": None}, headers=auth(user_token))
    assert resp.status_code == 400


def test_patch_nothing_to_patch(client, user_token):
    comment = _post(client, user_token, text="words").json()["payload"]
    resp = client.patch(f"/v1/comments/{comment['id']}", json={}, headers=auth(user_token))
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Nothing to patch"


def test_patch_by_someone_else(client, user_token, other_token, admin_token):
    comment = _post(client, user_token, text="words").json()["payload"]
    url = f"/v1/comments/{comment['id']}"

    resp = client.patch(url, json={"text": "hijack"}, headers=auth(other_token))
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Access denied"

    assert client.patch(url, json={"text": "moderated"}, headers=auth(admin_token)).status_code == 200
    assert client.patch(url, json={"text": "x"}).status_code == 401


def test_owner_cannot_change_email(client, user_token, admin_token):
    comment = _post(client, user_token, text="words").json()["payload"]
    url = f"/v1/comments/{comment['id']}"

    assert client.patch(url, json={"email": "x@example.com"}, headers=auth(user_token)).status_code == 403

    resp = client.patch(url, json={"email": "X@example.com"}, headers=auth(admin_token))
    assert resp.status_code == 200
    assert resp.json()["payload"]["email"] == "x@example.com"


def test_patch_missing_comment(client, admin_token):
    assert client.patch("/v1/comments/999", json={"text": "x"}, headers=auth(admin_token)).status_code == 404


def test_patch_reply_to_self_is_rejected(client, admin_token):
    comment = _post(client, text="loop").json()["payload"]
    url = f"/v1/comments/{comment['id']}"
    assert client.patch(url, json={"replied": comment["id"]}, headers=auth(admin_token)).status_code == 400


# ==================== put / delete ====================


def test_put_replaces_comment(client, admin_token, user_token):
    comment = _post(client, text="original", data={"k": 1}, homePage="https://a.example").json()["payload"]
    body = {"userName": "Edited", "email": "edited@example.com", "text": "replaced"}

    assert client.put(f"/v1/comments/{comment['id']}", json=body, headers=auth(user_token)).status_code == 403

    resp = client.put(f"/v1/comments/{comment['id']}", json=body, headers=auth(admin_token))
    assert resp.status_code == 200
    payload = resp.json()["payload"]
    assert payload["userName"] == "Edited"
    assert payload["text"] == "replaced"
    assert payload["homePage"] is None
    assert payload["data"] == {}
    assert payload["created"] == comment["created"]


def test_put_validates_body(client, admin_token):
    comment = _post(client, text="original").json()["payload"]
    url = f"/v1/comments/{comment['id']}"
    body = {"userName": "E", "email": "e@example.com"}

    assert client.put(url, json=body, headers=auth(admin_token)).status_code == 400
    assert client.put(url, json={"text": "no author"}, headers=auth(admin_token)).status_code == 422


def test_delete_is_admin_only_and_soft(client, admin_token, user_token):
    comment = _post(client, user_token, text="bye").json()["payload"]
    url = f"/v1/comments/{comment['id']}"

    assert client.delete(url, headers=auth(user_token)).status_code == 403
    assert client.delete(url).status_code == 401

    resp = client.delete(url, headers=auth(admin_token))
    assert resp.status_code == 200
    assert resp.json()["payload"]["deleted"] is not None

    assert client.delete("/v1/comments/999", headers=auth(admin_token)).status_code == 404


def test_delete_twice_keeps_first_timestamp(client, admin_token):
    comment = _post(client, text="once").json()["payload"]
    url = f"/v1/comments/{comment['id']}"

    first = client.delete(url, headers=auth(admin_token)).json()["payload"]["deleted"]
    resp = client.delete(url, headers=auth(admin_token))
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Comment is already deleted"

    listed = _list(client, "?deleted=true", admin_token).json()["payload"]
    assert listed[0]["deleted"] == first


# ==================== input bounds ====================


def test_page_beyond_integer_range_is_422(client):
    assert _list(client, f"?page={10**20}").status_code == 422
    assert _list(client, f"?page={MAX_INT + 1}").status_code == 422

    resp = _list(client, f"?page={MAX_INT}")
    assert resp.status_code == 200
    assert resp.json()["payload"] == []


@pytest.mark.parametrize("replied", [10**20, MAX_INT + 1, 0, -1])
def test_replied_out_of_range_is_422(client, replied):
    assert _post(client, text="reply", replied=replied).status_code == 422
    assert _list(client).json()["count"] == 0


def test_comment_id_beyond_integer_range_is_422(client, admin_token):
    big = 10**20
    assert client.patch(f"/v1/comments/{big}", json={"text": "x"}, headers=auth(admin_token)).status_code == 422
    assert client.delete(f"/v1/comments/{big}", headers=auth(admin_token)).status_code == 422
    body = {"userName": "E", "email": "e@example.com", "text": "x"}
    assert client.put(f"/v1/comments/{big}", json=body, headers=auth(admin_token)).status_code == 422


def test_image_with_huge_dimensions_is_422(client):
    bomb = base64.b64encode(png_header_only(20000, 20000)).decode("ascii")
    resp = _post(client, image=bomb)
    assert resp.status_code == 422
    assert resp.json()["error"]["message"] == "Image dimensions are too large"
