import pytest

from socialsphere.auth.users import get_user, register_user
from socialsphere.errors import NotFound
from socialsphere.services.post_service import (
    create_post,
    get_post,
    list_posts_for_user,
    toggle_like,
    update_post_content,
)


@pytest.fixture()
def author(store):
    return register_user(store, username="alice", name="Alice", email="a@x.com", age=30, password="p")


def test_create_post_links_post_to_author(store, author):
    post = create_post(store, author, "hello")
    assert post.user == author.id
    assert post.username == "alice"
    assert post.likes == ()
    assert get_user(store, author.id).posts == (post.id,)


def test_like_then_unlike_restores_like_set(store, author):
    post = create_post(store, author, "hello")
    assert toggle_like(store, post.id, "u1").likes == ("u1",)
    assert toggle_like(store, post.id, "u1").likes == ()


def test_like_set_never_holds_duplicates(store, author):
    post = create_post(store, author, "hello")
    for actor in ["u1", "u2", "u1", "u1", "u2", "u3"]:
        likes = toggle_like(store, post.id, actor).likes
        assert len(likes) == len(set(likes))
    assert set(get_post(store, post.id).likes) == {"u1", "u3"}


def test_update_replaces_content(store, author):
    post = create_post(store, author, "old")
    assert update_post_content(store, post.id, "new").content == "new"
    assert get_post(store, post.id).content == "new"


def test_missing_posts_raise_not_found(store):
    with pytest.raises(NotFound):
        get_post(store, "missing")
    with pytest.raises(NotFound):
        toggle_like(store, "missing", "u1")
    with pytest.raises(NotFound):
        update_post_content(store, "missing", "x")


def test_posts_listed_by_owner_even_if_user_list_was_not_updated(store, author):
    create_post(store, author, "linked")
    # A post whose second write (append to the user's list) never happened.
    store.create("posts", {"user": author.id, "username": "alice", "content": "orphan", "likes": []})
    contents = {p.content for p in list_posts_for_user(store, author.id)}
    assert contents == {"linked", "orphan"}
