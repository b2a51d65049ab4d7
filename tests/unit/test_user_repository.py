"""Unit tests for UserRepository against a mocked AsyncCollection."""

from datetime import datetime, timezone

import pytest
from bson import ObjectId
from pymongo import DESCENDING

from repositories.user_repository import UserRepository, _identity_filter
from schemas.models.user import UserDoc


@pytest.fixture
def col(mocker):
    col = mocker.MagicMock()
    col.find_one = mocker.AsyncMock(return_value=None)
    col.count_documents = mocker.AsyncMock(return_value=0)
    col.insert_one = mocker.AsyncMock()
    col.update_one = mocker.AsyncMock()
    col.create_index = mocker.AsyncMock()
    return col


@pytest.fixture
def db(mocker, col):
    db = mocker.MagicMock()
    db.__getitem__ = mocker.MagicMock(return_value=col)
    return db


@pytest.fixture
def repo(db):
    return UserRepository(db)


def _raw_user(**overrides):
    base = {
        "_id": ObjectId(),
        "name": "Asha",
        "email": "asha@example.com",
        "phone": "+919812345678",
        "account_verified": False,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    base.update(overrides)
    return base


class TestIdentityFilter:
    def test_both(self):
        assert _identity_filter("a@x.com", "+919812345678", verified=True) == {
            "$or": [
                {"email": "a@x.com", "account_verified": True},
                {"phone": "+919812345678", "account_verified": True},
            ]
        }

    def test_phone_only(self):
        assert _identity_filter(None, "+919812345678", verified=False) == {
            "$or": [{"phone": "+919812345678", "account_verified": False}]
        }

    def test_neither_raises(self):
        with pytest.raises(ValueError):
            _identity_filter(None, "", verified=True)


def test_uses_users_collection(repo, db):
    db.__getitem__.assert_called_once_with("users")


async def test_ensure_indexes(repo, col):
    await repo.ensure_indexes()
    assert col.create_index.await_count == 4
    for call in col.create_index.await_args_list:
        assert call.kwargs.get("unique") is not True


class TestFindById:
    async def test_found(self, repo, col):
        raw = _raw_user()
        col.find_one.return_value = raw
        user = await repo.find_by_id(str(raw["_id"]))
        assert isinstance(user, UserDoc)
        assert user.id == raw["_id"]
        col.find_one.assert_awaited_once_with({"_id": raw["_id"]}, {"password_hash": 0})

    async def test_invalid_id_skips_query(self, repo, col):
        assert await repo.find_by_id("not-an-id") is None
        col.find_one.assert_not_awaited()


async def test_find_verified_by_email_or_phone(repo, col):
    await repo.find_verified_by_email_or_phone("a@x.com", "+919812345678")
    query, projection = col.find_one.await_args.args
    assert query == _identity_filter("a@x.com", "+919812345678", verified=True)
    assert projection == {"password_hash": 0}


async def test_count_unverified_attempts(repo, col):
    col.count_documents.return_value = 2
    assert await repo.count_unverified_attempts("a@x.com", "+919812345678") == 2
    col.count_documents.assert_awaited_once_with(
        _identity_filter("a@x.com", "+919812345678", verified=False)
    )


async def test_find_latest_unverified_sorts_newest_first(repo, col):
    col.find_one.return_value = _raw_user(verification_code=12345)
    user = await repo.find_latest_unverified(None, "+919812345678")
    assert user.verification_code == 12345
    assert col.find_one.await_args.kwargs["sort"] == [("created_at", DESCENDING)]


class TestFindVerifiedByEmail:
    async def test_excludes_password_by_default(self, repo, col):
        await repo.find_verified_by_email("a@x.com")
        col.find_one.assert_awaited_once_with(
            {"email": "a@x.com", "account_verified": True}, {"password_hash": 0}
        )

    async def test_include_password(self, repo, col):
        col.find_one.return_value = _raw_user(account_verified=True, password_hash="h")
        user = await repo.find_verified_by_email("a@x.com", include_password=True)
        assert user.password_hash == "h"
        assert col.find_one.await_args.args[1] is None


async def test_find_by_reset_token_requires_unexpired(repo, col):
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert await repo.find_by_reset_token("digest", now) is None
    query = col.find_one.await_args.args[0]
    assert query == {
        "reset_password_token": "digest",
        "reset_password_expire": {"$gt": now},
    }


async def test_create_sets_id_and_timestamps(mocker, repo, col):
    new_id = ObjectId()
    col.insert_one.return_value = mocker.MagicMock(inserted_id=new_id)
    user = UserDoc(name="Asha", email="a@x.com", phone="+919812345678")
    created = await repo.create(user)
    assert created.id == new_id
    assert created.created_at is not None
    assert created.updated_at is not None
    inserted = col.insert_one.await_args.args[0]
    assert "_id" not in inserted
    assert inserted["email"] == "a@x.com"


class TestUpdate:
    async def test_set_and_unset(self, mocker, repo, col):
        col.update_one.return_value = mocker.MagicMock(matched_count=1)
        uid = ObjectId()
        ok = await repo.update(
            uid,
            set_fields={"account_verified": True},
            unset_fields=("verification_code", "verification_code_expire"),
        )
        assert ok is True
        query, update = col.update_one.await_args.args
        assert query == {"_id": uid}
        assert update["$set"]["account_verified"] is True
        assert "updated_at" in update["$set"]
        assert update["$unset"] == {
            "verification_code": "",
            "verification_code_expire": "",
        }

    async def test_no_unset_key_when_nothing_to_clear(self, mocker, repo, col):
        col.update_one.return_value = mocker.MagicMock(matched_count=0)
        ok = await repo.update(ObjectId(), set_fields={"password_hash": "h"})
        assert ok is False
        assert "$unset" not in col.update_one.await_args.args[1]
