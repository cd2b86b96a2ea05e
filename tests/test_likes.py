"""
Tests for like toggles and counts.
"""
from blogapi.models.like import PostLike, CommentLike
from blogapi.models.post import Post


class TestPostLikes:
    """Test liking posts."""

    def test_toggle_twice_restores_state(self, client, published_post, auth_headers, db):
        url = f"/api/v1/posts/{published_post.id}/like"

        liked = client.post(url, headers=auth_headers)
        assert liked.status_code == 200
        assert liked.json()["data"] == {"is_liked": True, "likes_count": 1}
        assert db.query(PostLike).count() == 1

        unliked = client.post(url, headers=auth_headers).json()["data"]
        assert unliked == {"is_liked": False, "likes_count": 0}
        assert db.query(PostLike).count() == 0

        db.expire_all()
        assert db.query(Post).filter(Post.id == published_post.id).first().likes_count == 0

    def test_likes_from_different_users(self, client, published_post, auth_headers, other_headers):
        url = f"/api/v1/posts/{published_post.id}/like"
        client.post(url, headers=auth_headers)
        client.post(url, headers=other_headers)

        response = client.get(f"/api/v1/posts/{published_post.id}/likes")
        assert response.json()["data"] == {"count": 2}

    def test_post_shows_is_liked(self, client, published_post, auth_headers):
        client.post(f"/api/v1/posts/{published_post.id}/like", headers=auth_headers)

        mine = client.get(f"/api/v1/posts/{published_post.slug}", headers=auth_headers).json()["data"]
        anonymous = client.get(f"/api/v1/posts/{published_post.slug}").json()["data"]
        listed = client.get("/api/v1/posts", headers=auth_headers).json()["data"]

        assert mine["is_liked"] is True
        assert mine["likes_count"] == 1
        assert anonymous["is_liked"] is False
        assert listed[0]["is_liked"] is True

    def test_like_missing_post(self, client, auth_headers):
        assert client.post("/api/v1/posts/999/like", headers=auth_headers).status_code == 404
        assert client.get("/api/v1/posts/999/likes").status_code == 404

    def test_like_requires_auth(self, client, published_post):
        response = client.post(f"/api/v1/posts/{published_post.id}/like")
        assert response.status_code == 401


class TestCommentLikes:
    """Test liking comments."""

    def test_toggle_comment_like(self, client, published_post, auth_headers, other_headers, db):
        comment = client.post(
            f"/api/v1/posts/{published_post.slug}/comments",
            json={"content": "likeable"},
            headers=auth_headers,
        ).json()["data"]
        url = f"/api/v1/comments/{comment['id']}/like"

        assert client.post(url, headers=other_headers).json()["data"] == {"is_liked": True, "likes_count": 1}
        assert client.get(f"/api/v1/comments/{comment['id']}/likes").json()["data"] == {"count": 1}
        assert client.post(url, headers=other_headers).json()["data"] == {"is_liked": False, "likes_count": 0}
        assert db.query(CommentLike).count() == 0

    def test_like_missing_comment(self, client, auth_headers):
        assert client.post("/api/v1/comments/999/like", headers=auth_headers).status_code == 404
        assert client.get("/api/v1/comments/999/likes").status_code == 404
