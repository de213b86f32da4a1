from datetime import timedelta

from app.config.security import load_secret_key
from app.utils.auth import verify_token
from app.utils.security import create_access_token, hash_password, verify_password


def test_secret_key_from_environment(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "from-env")
    assert load_secret_key() == "from-env"


def test_missing_secret_key_is_random(monkeypatch, caplog):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    first, second = load_secret_key(), load_secret_key()
    assert first != second
    assert len(first) >= 32
    assert "SECRET_KEY is not set" in caplog.text


def test_password_round_trip():
    hashed = hash_password("secret123")
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_token_carries_subject():
    token = create_access_token({"sub": "alice"})
    assert verify_token(token)["sub"] == "alice"


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "alice"}, expires_delta=timedelta(minutes=-1))
    assert verify_token(token) is None
    assert verify_token("not-a-token") is None
