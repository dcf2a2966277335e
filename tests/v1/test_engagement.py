"""HTTP tests for the read endpoints and the mutation aliases."""

import pytest
from fastapi.testclient import TestClient

from ideas_hub.core.settings import Settings
from ideas_hub.services.ideas import IdeaStore


@pytest.fixture()
def public_comments(test_settings: Settings) -> Settings:
    test_settings.public_comments = True
    return test_settings


def create_idea(client: TestClient, owner_headers: dict[str, str], **fields) -> dict:
    payload = {"title": "EURUSD breakout", **fields}
    response = client.post("/ideas", json=payload, headers=owner_headers)
    assert response.status_code == 201
    return response.json()


def test_create_requires_owner(client: TestClient, store: IdeaStore) -> None:
    response = client.post("/ideas", json={"title": "nope"})
    assert response.status_code == 401
    assert response.json() == {"detail": "unauthorized"}
    assert store.list() == []


def test_create_accepts_api_token_header(client: TestClient, owner_token: str) -> None:
    response = client.post("/api/ideas", json={"title": "x"}, headers={"X-Api-Token": owner_token})
    assert response.status_code == 201


def test_create_returns_camel_case_projection(client: TestClient, owner_headers) -> None:
    idea = create_idea(client, owner_headers, symbol="eurusd", levelText="1.1000")
    assert idea["id"].startswith("idea_")
    assert idea["symbol"] == "EURUSD"
    assert idea["likeCount"] == 0
    assert idea["commentCount"] == 0
    assert idea["levelText"] == "1.1000"
    assert "comments" not in idea
    assert "likes" not in idea


def test_create_without_title_is_rejected(client: TestClient, owner_headers) -> None:
    response = client.post("/ideas", json={"symbol": "EURUSD"}, headers=owner_headers)
    assert response.status_code == 400
    assert response.json() == {"detail": "title required"}


def test_invalid_json_is_rejected(client: TestClient, owner_headers) -> None:
    response = client.post(
        "/ideas",
        content=b"{broken",
        headers={**owner_headers, "Content-Type": "application/json"},
    )
    assert response.status_code == 400


def test_list_is_newest_first_with_limit(client: TestClient, owner_headers) -> None:
    first = create_idea(client, owner_headers, title="first")
    second = create_idea(client, owner_headers, title="second")
    ids = [idea["id"] for idea in client.get("/ideas").json()]
    assert ids == [second["id"], first["id"]]
    assert len(client.get("/api/v1/ideas", params={"limit": 1}).json()) == 1
    assert client.get("/ideas", params={"limit": 0}).status_code == 422


def test_latest(client: TestClient, owner_headers) -> None:
    assert client.get("/ideas/latest").status_code == 204
    created = create_idea(client, owner_headers)
    response = client.get("/api/ideas/latest")
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]


def test_unknown_idea_is_404(client: TestClient) -> None:
    response = client.get("/ideas/idea_missing")
    assert response.status_code == 404
    assert response.json() == {"detail": "idea not found"}


def test_like_set_is_idempotent_over_http(client: TestClient, idea) -> None:
    for _ in range(2):
        response = client.post(f"/ideas/{idea.id}/like")
        assert response.status_code == 200
        assert response.json() == {"id": idea.id, "liked": True, "likeCount": 1}
    assert client.get(f"/ideas/{idea.id}").json()["likeCount"] == 1


def test_like_aliases_share_one_ledger_slot(client: TestClient, idea) -> None:
    assert client.post("/api/likes/toggle", json={"ideaId": idea.id}).json()["liked"] is True
    assert client.post(f"/api/v1/ideas/{idea.id}/toggle-like").json()["likeCount"] == 0
    assert client.put(f"/likes/{idea.id}", json={"delta": 1}).json()["likeCount"] == 1
    assert client.delete(f"/ideas/{idea.id}/like").json()["likeCount"] == 0


def test_form_encoded_like(client: TestClient, idea) -> None:
    client.post(f"/ideas/{idea.id}/like")
    response = client.post(f"/ideas/{idea.id}/likes", data={"liked": "false"})
    assert response.status_code == 200
    assert response.json()["liked"] is False


def test_like_state_for_caller(client: TestClient, idea) -> None:
    client.post(f"/ideas/{idea.id}/like", headers={"X-User-Id": "trader-1"})
    mine = client.get(f"/ideas/{idea.id}/likes", headers={"X-User-Id": "trader-1"}).json()
    theirs = client.get(f"/ideas/{idea.id}/likes", headers={"X-User-Id": "trader-2"}).json()
    assert mine == {"id": idea.id, "liked": True, "likeCount": 1}
    assert theirs == {"id": idea.id, "liked": False, "likeCount": 1}


def test_distinct_users_like_separately(client: TestClient, idea) -> None:
    client.post(f"/ideas/{idea.id}/like", headers={"X-User-Id": "a"})
    response = client.post(f"/ideas/{idea.id}/like", headers={"X-User-Id": "b"})
    assert response.json()["likeCount"] == 2


def test_non_public_likes_share_anonymous_slot(client: TestClient, test_settings, idea) -> None:
    test_settings.public_likes = False
    client.post(f"/ideas/{idea.id}/like", headers={"X-User-Id": "a"})
    response = client.post(f"/ideas/{idea.id}/like", headers={"X-User-Id": "b"})
    assert response.json()["likeCount"] == 1


def test_owner_likes_under_owner_key(client: TestClient, owner_headers, idea) -> None:
    client.post(f"/ideas/{idea.id}/like", headers=owner_headers)
    client.post(f"/ideas/{idea.id}/like", headers={**owner_headers, "X-User-Id": "other"})
    assert client.get(f"/ideas/{idea.id}").json()["likeCount"] == 1


def test_like_unknown_idea(client: TestClient) -> None:
    response = client.post("/ideas/idea_missing/like")
    assert response.status_code == 404


def test_like_with_bad_delta(client: TestClient, idea) -> None:
    response = client.post(f"/ideas/{idea.id}/likes", json={"delta": "up"})
    assert response.status_code == 400
    assert response.json() == {"detail": "delta must be a number"}


def test_comments_require_owner_by_default(client: TestClient, idea) -> None:
    response = client.post(f"/ideas/{idea.id}/comments", json={"text": "hi"})
    assert response.status_code == 401


def test_public_comments(client: TestClient, public_comments, idea) -> None:
    response = client.post(
        f"/ideas/{idea.id}/comments",
        json={"text": "nice setup"},
        headers={"X-User-Name": "Ana", "X-User-Id": "u-ana"},
    )
    assert response.status_code == 201
    comment = response.json()
    assert comment["authorName"] == "Ana"
    assert comment["authorId"] == "u-ana"
    assert comment["id"].startswith("cmt_")


def test_comment_lifecycle_and_ordering(client: TestClient, owner_headers, idea) -> None:
    first = client.post(
        "/comments", json={"ideaId": idea.id, "text": "first"}, headers=owner_headers
    ).json()
    second = client.post(
        f"/api/ideas/{idea.id}/comment", json={"text": "second"}, headers=owner_headers
    ).json()

    asc = [c["id"] for c in client.get(f"/ideas/{idea.id}/comments").json()]
    desc = [c["id"] for c in client.get(f"/ideas/{idea.id}/comments?order=desc").json()]
    assert asc == [first["id"], second["id"]]
    assert desc == [second["id"], first["id"]]

    edited = client.patch(
        f"/ideas/{idea.id}/comments/{first['id']}", json={"text": "edited"}, headers=owner_headers
    )
    assert edited.status_code == 200
    assert edited.json()["text"] == "edited"

    deleted = client.delete(f"/comments/{second['id']}?ideaId={idea.id}", headers=owner_headers)
    assert deleted.status_code == 204

    embedded = client.get(f"/ideas/{idea.id}", params={"comments": "true"}).json()
    assert embedded["commentCount"] == 1
    assert [c["text"] for c in embedded["comments"]] == ["edited"]


def test_blank_comment_is_rejected(client: TestClient, owner_headers, idea) -> None:
    response = client.post(f"/ideas/{idea.id}/comments", json={"text": "  "}, headers=owner_headers)
    assert response.status_code == 400
    assert client.get(f"/ideas/{idea.id}").json()["commentCount"] == 0


def test_unknown_comment_is_404(client: TestClient, owner_headers, idea) -> None:
    response = client.delete(f"/ideas/{idea.id}/comments/cmt_missing", headers=owner_headers)
    assert response.status_code == 404
    assert response.json() == {"detail": "comment not found"}


def test_update_and_delete_idea(client: TestClient, owner_headers, idea) -> None:
    updated = client.post(f"/ideas/{idea.id}/update", json={"take": "Flat"}, headers=owner_headers)
    assert updated.status_code == 200
    assert updated.json()["take"] == "Flat"
    assert updated.json()["title"] == idea.title

    assert client.patch(f"/ideas/{idea.id}", json={"take": "x"}).status_code == 401
    assert client.delete(f"/api/v1/ideas/{idea.id}", headers=owner_headers).status_code == 204
    assert client.get(f"/ideas/{idea.id}").status_code == 404
    assert client.get(f"/ideas/{idea.id}/comments").status_code == 404


def test_wrong_method_on_known_path_is_405(client: TestClient, idea) -> None:
    response = client.post(f"/ideas/{idea.id}")
    assert response.status_code == 405
    assert set(response.headers["allow"].split(", ")) == {"DELETE", "PATCH", "PUT"}


def test_unknown_path_is_404(client: TestClient) -> None:
    assert client.post("/nowhere", json={}).status_code == 404
    assert client.get("/api/nowhere").status_code == 404


@pytest.mark.parametrize(
    "authorization",
    ["Basic test-owner-token", "Bearer wrong-token", "test-owner-token"],
)
def test_rejects_non_bearer_or_wrong_credentials(client: TestClient, authorization: str) -> None:
    response = client.post("/ideas", json={"title": "x"}, headers={"Authorization": authorization})
    assert response.status_code == 401


def test_bearer_scheme_is_case_insensitive(client: TestClient, owner_token: str) -> None:
    response = client.post(
        "/ideas", json={"title": "x"}, headers={"Authorization": f"bearer {owner_token}"}
    )
    assert response.status_code == 201


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ({"json": {"liked": 0}}, False),
        ({"data": {"liked": "0"}}, False),
        ({"json": {"liked": 1}}, True),
        ({"data": {"liked": "1"}}, True),
    ],
)
def test_numeric_like_flag_is_set_in_any_encoding(client: TestClient, idea, body, expected) -> None:
    client.post(f"/ideas/{idea.id}/like")
    for _ in range(2):
        response = client.post(f"/ideas/{idea.id}/likes", **body)
        assert response.status_code == 200
        assert response.json()["liked"] is expected
    assert response.json()["likeCount"] == (1 if expected else 0)


def test_numeric_like_flag_out_of_range(client: TestClient, idea) -> None:
    response = client.post(f"/ideas/{idea.id}/likes", json={"liked": 2})
    assert response.status_code == 400
    assert response.json() == {"detail": "like flag must be a boolean"}
