from kupong import auth
from kupong.auth import admin_enabled, hash_password, verify_admin


def test_no_credential_disables_admin(monkeypatch):
    monkeypatch.delenv("KUPONG_ADMIN_PASSWORD_HASH", raising=False)
    monkeypatch.delenv("KUPONG_ADMIN_PASSWORD", raising=False)
    assert not admin_enabled()
    assert verify_admin("anything") is False


def test_hash_from_environment(monkeypatch):
    monkeypatch.delenv("KUPONG_ADMIN_PASSWORD", raising=False)
    monkeypatch.setenv("KUPONG_ADMIN_PASSWORD_HASH", hash_password("hemmelig"))
    assert admin_enabled()
    assert verify_admin("hemmelig") is True
    assert verify_admin("feil") is False
    assert verify_admin("") is False


def test_plain_password_is_hashed_once(monkeypatch):
    monkeypatch.delenv("KUPONG_ADMIN_PASSWORD_HASH", raising=False)
    monkeypatch.setenv("KUPONG_ADMIN_PASSWORD", "1886")
    monkeypatch.setattr(auth, "_plain_password_hash", None)
    assert verify_admin("1886") is True
    cached = auth._plain_password_hash
    assert cached and cached != "1886"
    assert verify_admin("0000") is False
    assert auth._plain_password_hash == cached


def test_malformed_hash_is_rejected(monkeypatch):
    monkeypatch.setenv("KUPONG_ADMIN_PASSWORD_HASH", "not-a-hash")
    assert verify_admin("whatever") is False
