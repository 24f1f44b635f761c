import time

from jose import jwt

from app.features.notes.security import PasswordGuard
from app.features.notes.tokens import OWNER_SCOPE, OwnerTokens


async def test_hash_is_salted_and_verifiable(guard):
    first = await guard.hash("hunter22")
    second = await guard.hash("hunter22")

    assert first != second
    assert "hunter22" not in first
    assert first.startswith("$2")
    assert await guard.verify("hunter22", first)
    assert await guard.verify("hunter22", second)


async def test_hash_embeds_cost_factor():
    guard = PasswordGuard(rounds=5, failure_delay=0)

    password_hash = await guard.hash("secret")

    assert password_hash.split("$")[2] == "05"


async def test_wrong_password_does_not_verify(guard):
    password_hash = await guard.hash("1234")

    assert not await guard.verify("4321", password_hash)


async def test_malformed_hash_counts_as_mismatch(guard):
    assert not await guard.verify("1234", "not-a-bcrypt-hash")


async def test_mismatch_waits_failure_delay():
    guard = PasswordGuard(rounds=4, failure_delay=0.05)
    password_hash = await guard.hash("right")

    started = time.monotonic()
    assert not await guard.verify("wrong", password_hash)
    assert time.monotonic() - started >= 0.05

    started = time.monotonic()
    assert await guard.verify("right", password_hash)
    assert time.monotonic() - started < 0.05


async def test_long_passwords_beyond_bcrypt_limit_still_hash(guard):
    password = "p" * 100

    password_hash = await guard.hash(password)

    assert await guard.verify(password, password_hash)


def test_owner_token_is_bound_to_note(tokens):
    token = tokens.issue("note-a")

    assert tokens.verify(token, "note-a")
    assert not tokens.verify(token, "note-b")


def test_owner_token_rejects_tampering_and_foreign_secrets(tokens):
    token = tokens.issue("note-a")
    forged = OwnerTokens(secret="another-secret").issue("note-a")

    assert not tokens.verify(token[:-2] + "xx", "note-a")
    assert not tokens.verify(forged, "note-a")
    assert not tokens.verify(None, "note-a")


def test_owner_token_requires_owner_scope(tokens):
    token = jwt.encode({"sub": "note-a", "scope": "something-else"}, tokens.secret, algorithm="HS256")

    assert not tokens.verify(token, "note-a")
    assert jwt.decode(tokens.issue("note-a"), tokens.secret, algorithms=["HS256"])["scope"] == OWNER_SCOPE


def test_owner_tokens_disabled_without_secret():
    disabled = OwnerTokens(secret=None)

    assert not disabled.enabled
    assert disabled.issue("note-a") is None
    assert not disabled.verify("anything", "note-a")
