import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from aedura.directory import UserDirectory, normalize_email
from aedura.errors import DuplicateEmail, TransientStorageError
from aedura.models.user import User

ADVISORY = {
    "positionTitle": "Dean",
    "experienceYears": "18",
    "domain": "Higher Ed",
    "lmsFeatures": "Analytics dashboards",
}


def _create(directory, email="a@b.com", **overrides):
    fields = dict(
        name="A",
        email=email,
        password_hash="$argon2id$fake",
        role_type="advisory",
        advisory_profile=ADVISORY,
    )
    fields.update(overrides)
    return directory.create(**fields)


def test_normalize_email():
    assert normalize_email("  Jane@Demo.COM ") == "jane@demo.com"


def test_create_assigns_id_and_timestamps(directory):
    user = _create(directory, email=" A@B.com ")
    assert user.id and len(user.id) == 32
    assert user.email == "a@b.com"
    assert user.created_at is not None and user.updated_at is not None
    assert user.contributor_profile is None
    assert user.profile == ADVISORY


def test_find_by_email_normalizes(directory):
    created = _create(directory)
    assert directory.find_by_email("  A@B.COM").id == created.id
    assert directory.find_by_email("nobody@b.com") is None


def test_case_variant_is_duplicate(directory):
    _create(directory, email="a@b.com")
    with pytest.raises(DuplicateEmail):
        _create(directory, email="A@B.com")
    assert directory.session.query(User).count() == 1


def test_concurrent_insert_loses_to_unique_index(session_local):
    first, second = UserDirectory(session_local()), UserDirectory(session_local())
    # both requests pass the existence check before either writes
    assert first.find_by_email("a@b.com") is None
    assert second.find_by_email("a@b.com") is None

    _create(first)
    with pytest.raises(DuplicateEmail):
        _create(second, email="A@b.com")

    check = session_local()
    assert check.query(User).count() == 1
    check.close()


def test_both_profiles_are_rejected_by_storage(directory):
    with pytest.raises(IntegrityError):
        _create(directory, contributor_profile={"role": "educator"})
    assert directory.session.query(User).count() == 0


def test_profile_must_match_role_type(directory):
    with pytest.raises(IntegrityError):
        _create(directory, role_type="contributor")


def test_unreachable_storage_is_transient(directory, monkeypatch):
    def down(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(directory.session, "query", down)
    with pytest.raises(TransientStorageError):
        directory.find_by_email("a@b.com")
