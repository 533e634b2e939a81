import pytest

from socialsphere.auth.passwords import verify_password
from socialsphere.auth.users import authenticate, get_user, register_user, set_profile_picture
from socialsphere.errors import DuplicateUser, InvalidCredentials, NotFound, UserNotFound


def _register(store, **overrides):
    kwargs = dict(username="alice", name="Alice", email="a@x.com", age=30, password="p")
    kwargs.update(overrides)
    return register_user(store, **kwargs)


def test_register_stores_hash_not_plaintext(store):
    user = _register(store)
    assert user.password_hash != "p"
    assert verify_password(user.password_hash, "p")
    assert user.posts == ()
    assert user.profile_picture is None


def test_duplicate_email_is_rejected_without_second_record(store):
    _register(store)
    with pytest.raises(DuplicateUser):
        _register(store, username="other", email=" A@X.com ")
    assert len(store.find_many("users")) == 1


def test_duplicate_is_detected_before_hashing(store, monkeypatch):
    _register(store)

    def _boom(plain):
        raise AssertionError("hash_password must not run for a duplicate email")

    monkeypatch.setattr("socialsphere.auth.users.hash_password", _boom)
    with pytest.raises(DuplicateUser):
        _register(store)


def test_authenticate(store):
    user = _register(store)
    assert authenticate(store, "a@x.com", "p").id == user.id
    with pytest.raises(InvalidCredentials):
        authenticate(store, "a@x.com", "wrong")
    with pytest.raises(UserNotFound):
        authenticate(store, "nobody@x.com", "p")


def test_profile_picture_and_lookup(store):
    user = _register(store)
    assert set_profile_picture(store, user.id, "abc.png").profile_picture == "abc.png"
    assert get_user(store, user.id).profile_picture == "abc.png"
    with pytest.raises(NotFound):
        get_user(store, "missing")
    with pytest.raises(NotFound):
        set_profile_picture(store, "missing", "abc.png")
