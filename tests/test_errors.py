"""Tests for the typed failures and driver-error translation."""
import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from heart.errors import (
    AuthorizationError,
    ConflictError,
    HeartError,
    NotFoundError,
    TransientStorageError,
    ValidationError,
    storage_errors,
)


def _driver_error(cls, message):
    return cls("INSERT INTO matches ...", {}, Exception(message))


class TestStorageErrors:

    def test_operational_error_becomes_transient(self):
        with pytest.raises(TransientStorageError) as excinfo:
            with storage_errors("match creation"):
                raise _driver_error(OperationalError, "could not connect to 10.0.0.5")

        assert excinfo.value.status_code == 500
        assert "match creation" in excinfo.value.detail
        assert "10.0.0.5" not in excinfo.value.detail
        assert isinstance(excinfo.value.__cause__, OperationalError)

    def test_integrity_error_passes_through(self):
        with pytest.raises(IntegrityError):
            with storage_errors("registration"):
                raise _driver_error(IntegrityError, "UNIQUE constraint failed: users.email")

    def test_other_exceptions_untouched(self):
        with pytest.raises(KeyError):
            with storage_errors("message listing"):
                raise KeyError("content")

    def test_clean_block_is_transparent(self):
        with storage_errors("user lookup"):
            value = 1
        assert value == 1


class TestHeartErrors:

    @pytest.mark.parametrize(
        "cls, status_code",
        [
            (ValidationError, 400),
            (AuthorizationError, 403),
            (NotFoundError, 404),
            (ConflictError, 409),
            (TransientStorageError, 500),
        ],
    )
    def test_status_codes(self, cls, status_code):
        err = cls()
        assert isinstance(err, HeartError)
        assert err.status_code == status_code
        assert err.detail == cls.default_detail

    def test_custom_detail(self):
        assert str(NotFoundError("User 4 not found.")) == "User 4 not found."
