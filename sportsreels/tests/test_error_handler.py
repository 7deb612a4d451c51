import pytest

from sportsreels.exceptions import ProviderException, ValidationException
from sportsreels.utils import error_handler
from sportsreels.utils.error_handler import convert_exceptions, handle_exceptions, retry_delay


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(error_handler.asyncio, "sleep", fake_sleep)
    return delays


async def test_retries_until_success(no_sleep):
    calls = []

    @handle_exceptions(retries=3, exceptions=(ConnectionError,))
    async def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise ConnectionError("reset")
        return "ok"

    assert await flaky() == "ok"
    assert len(calls) == 3
    assert no_sleep == [1.0, 2.0]


async def test_last_error_is_raised_after_all_attempts():
    @handle_exceptions(retries=2, exceptions=(ConnectionError,))
    async def broken():
        raise ConnectionError("still down")

    with pytest.raises(ConnectionError):
        await broken()


async def test_validation_errors_are_not_retried():
    calls = []

    @handle_exceptions(retries=3)
    async def invalid():
        calls.append(1)
        raise ValidationException("bad input", field="title")

    with pytest.raises(ValidationException):
        await invalid()
    assert len(calls) == 1


async def test_fallback_is_returned():
    @handle_exceptions(retries=2, fallback=[])
    async def broken():
        raise RuntimeError("boom")

    assert await broken() == []


async def test_third_party_errors_are_converted():
    @convert_exceptions({OSError: ProviderException})
    async def read():
        raise FileNotFoundError("missing.mp4")

    with pytest.raises(ProviderException) as exc_info:
        await read()
    assert exc_info.value.details["original_exception"] == "FileNotFoundError"
    assert isinstance(exc_info.value.__cause__, FileNotFoundError)


async def test_own_errors_pass_through():
    @convert_exceptions({Exception: ProviderException})
    async def invalid():
        raise ValidationException("bad input")

    with pytest.raises(ValidationException):
        await invalid()


def test_retry_delay_is_capped():
    assert retry_delay(0) == 1.0
    assert retry_delay(3) == 8.0
    assert retry_delay(10, max_delay=30.0) == 30.0
