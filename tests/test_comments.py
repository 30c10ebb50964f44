import pytest
from blogapi.core.errors import AuthorizationError, NotFoundError, ValidationError
from blogapi.services.comments import CommentManager
from blogapi.services.posts import PostLifecycleManager

@pytest.fixture
def post_id(authenticated_client):
    response = authenticated_client.post("/api/posts", json={
        "title": "Test Post",
        "body": "Body",
        "tags": ["comments"]
    })
    return response.json()["data"]["post"]["id"]

@pytest.fixture
def test_comment_data():
    return {
        "body": "Test comment"
    }

class TestCommentManager:
    @pytest.fixture
    def author(self, make_user):
        return make_user("alice")

    @pytest.fixture
    def post(self, session, clock, author):
        return PostLifecycleManager(session, clock=clock).create("Title", "Body", ["a"], author.id)

    def test_list_is_newest_first(self, session, clock, author, post):
        comments = CommentManager(session, clock=clock)
        first = comments.create(post.id, "first", author.id)
        clock.advance(seconds=1)
        second = comments.create(post.id, "second", author.id)

        listed = comments.list_by_post(post.id)
        assert [c.id for c in listed] == [second.id, first.id]
        assert listed[0].author.name == "alice"

    def test_create_on_missing_post(self, session, author):
        with pytest.raises(NotFoundError):
            CommentManager(session).create("missing", "hello", author.id)

    def test_update_requires_body(self, session, author, post):
        comments = CommentManager(session)
        comment = comments.create(post.id, "hello", author.id)
        with pytest.raises(ValidationError):
            comments.update(comment.id, "   ", actor_id=author.id)
        assert comments.get(comment.id).body == "hello"

    def test_only_author_can_modify(self, session, author, post, make_user):
        intruder = make_user("mallory")
        comments = CommentManager(session)
        comment = comments.create(post.id, "hello", author.id)

        with pytest.raises(AuthorizationError):
            comments.update(comment.id, "changed", actor_id=intruder.id)
        with pytest.raises(AuthorizationError):
            comments.delete(comment.id, actor_id=intruder.id)

        assert comments.update(comment.id, "changed", actor_id=author.id).body == "changed"
        assert comments.delete(comment.id, actor_id=author.id) is True
        assert comments.delete(comment.id) is False

    def test_comments_of_missing_authors_are_skipped(self, session, clock, author, post, make_user):
        ghost = make_user("ghost")
        comments = CommentManager(session, clock=clock)
        comments.create(post.id, "visible", author.id)
        clock.advance(seconds=1)
        comments.create(post.id, "orphaned", ghost.id)

        session.delete(ghost)
        session.commit()

        assert [c.body for c in comments.list_by_post(post.id)] == ["visible"]

class TestCommentAPI:
    def test_create_comment(self, authenticated_client, post_id, test_comment_data):
        """测试创建评论"""
        response = authenticated_client.post(f"/api/posts/{post_id}/comments", json=test_comment_data)
        assert response.status_code == 201
        comment = response.json()["data"]["comment"]
        assert comment["body"] == test_comment_data["body"]
        assert comment["post_id"] == post_id
        assert comment["author"]["name"] == "testuser"

    def test_create_comment_on_missing_post(self, authenticated_client, test_comment_data):
        response = authenticated_client.post("/api/posts/missing/comments", json=test_comment_data)
        assert response.status_code == 404

    def test_create_comment_unauthenticated(self, client, post_id, test_comment_data):
        response = client.post(f"/api/posts/{post_id}/comments", json=test_comment_data)
        assert response.status_code == 401

    def test_list_comments(self, client, authenticated_client, post_id):
        authenticated_client.post(f"/api/posts/{post_id}/comments", json={"body": "one"})
        authenticated_client.post(f"/api/posts/{post_id}/comments", json={"body": "two"})

        response = client.get(f"/api/posts/{post_id}/comments")
        assert response.status_code == 200
        assert {c["body"] for c in response.json()["data"]["comments"]} == {"one", "two"}
        assert client.get(f"/api/posts/{post_id}").json()["data"]["post"]["comment_count"] == 2

    def test_update_comment(self, authenticated_client, post_id, test_comment_data):
        comment_id = authenticated_client.post(
            f"/api/posts/{post_id}/comments", json=test_comment_data
        ).json()["data"]["comment"]["id"]

        response = authenticated_client.put(f"/api/comments/{comment_id}", json={"body": "Edited"})
        assert response.status_code == 200
        assert response.json()["data"]["comment"]["body"] == "Edited"

        response = authenticated_client.put(f"/api/comments/{comment_id}", json={"body": ""})
        assert response.status_code == 422

    def test_other_user_cannot_modify_comment(self, authenticated_client, other_client, post_id, test_comment_data):
        comment_id = authenticated_client.post(
            f"/api/posts/{post_id}/comments", json=test_comment_data
        ).json()["data"]["comment"]["id"]

        assert other_client.put(f"/api/comments/{comment_id}", json={"body": "Mine"}).status_code == 403
        assert other_client.delete(f"/api/comments/{comment_id}").status_code == 403

    def test_delete_comment(self, client, authenticated_client, post_id, test_comment_data):
        comment_id = authenticated_client.post(
            f"/api/posts/{post_id}/comments", json=test_comment_data
        ).json()["data"]["comment"]["id"]

        response = authenticated_client.delete(f"/api/comments/{comment_id}")
        assert response.status_code == 200
        assert client.get(f"/api/posts/{post_id}/comments").json()["data"]["comments"] == []
        assert authenticated_client.delete(f"/api/comments/{comment_id}").status_code == 404
