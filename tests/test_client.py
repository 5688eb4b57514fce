import pytest

from blog_api.client import AuthContext, BlogApiError, BlogClient


def test_auth_context_lifecycle():
    auth = AuthContext()
    assert not auth.is_authenticated
    assert auth.headers() == {}

    auth.set("abc")
    assert auth.is_authenticated
    assert auth.headers() == {"Authorization": "Bearer abc"}

    auth.clear()
    assert auth.token is None
    assert auth.headers() == {}


def test_signup_writes_token_into_context(client):
    auth = AuthContext()
    api = BlogClient(client, auth)
    api.signup("ann@example.com", "pw", "Ann")

    assert auth.is_authenticated
    assert api.profile()["email"] == "ann@example.com"


def test_full_flow_through_client(client):
    ann = BlogClient(client, AuthContext())
    bob = BlogClient(client, AuthContext())
    ann.signup("ann@example.com", "pw", "Ann")
    bob.signup("bob@example.com", "pw", "Bob")

    post = ann.create_post("Hello", "World", published=True)
    bob.add_comment(post["id"], "Nice")
    bob.like(post["id"])

    assert [p["id"] for p in bob.list_posts()] == [post["id"]]
    assert bob.like_status(post["id"]) == {"liked": True, "likeCount": 1}
    assert [c["content"] for c in ann.list_comments(post["id"])] == ["Nice"]

    updated = ann.update_post(post["id"], title="Hello again", image_url="https://cdn/x.png")
    assert updated["imageUrl"] == "https://cdn/x.png"

    with pytest.raises(BlogApiError) as excinfo:
        bob.delete_post(post["id"])
    assert excinfo.value.status_code == 404

    assert ann.delete_post(post["id"]) == {"success": True}


def test_signout_clears_context(client):
    api = BlogClient(client, AuthContext())
    api.signup("ann@example.com", "pw", "Ann")
    api.signout()

    with pytest.raises(BlogApiError) as excinfo:
        api.profile()
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "unauthorized"


def test_rejected_token_clears_context(client):
    auth = AuthContext(token="stale-token")
    api = BlogClient(client, auth)

    with pytest.raises(BlogApiError):
        api.create_post("T", "C")
    assert auth.token is None


def test_signin_failure_reports_error_message(client):
    api = BlogClient(client, AuthContext())
    api.signup("ann@example.com", "pw", "Ann")
    api.signout()

    with pytest.raises(BlogApiError) as excinfo:
        api.signin("ann@example.com", "wrong")
    assert excinfo.value.message == "Invalid password"
    assert not api.auth.is_authenticated


def test_upload_image_through_client(client, image_provider):
    api = BlogClient(client, AuthContext())
    api.signup("ann@example.com", "pw", "Ann")
    url = api.upload_image("pic.gif", b"GIF89a", "image/gif")
    assert url == "https://cdn.images.test/medium-blog/abc123.png"
