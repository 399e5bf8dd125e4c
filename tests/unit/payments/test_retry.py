"""Unit tests for RetryExecutor."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from modules.payments.exceptions import PaymentProviderUnavailable, PaymentRejected
from modules.payments.retry import RetryExecutor

pytestmark = pytest.mark.unit


@pytest.fixture()
def sleep():
    return MagicMock()


def test_success_on_first_attempt(sleep):
    executor = RetryExecutor(attempts=3, base_delay=0.3, sleep=sleep)

    assert executor.run(lambda: "ok") == "ok"
    sleep.assert_not_called()


def test_transient_errors_are_retried_with_backoff(sleep):
    operation = MagicMock(
        side_effect=[requests.ConnectionError("reset"), requests.Timeout("slow"), {"id": "X"}]
    )
    executor = RetryExecutor(attempts=3, base_delay=0.3, sleep=sleep)

    assert executor.run(operation) == {"id": "X"}
    assert operation.call_count == 3
    assert [c.args[0] for c in sleep.call_args_list] == pytest.approx([0.3, 0.6])


def test_exhaustion_raises_provider_unavailable(sleep):
    operation = MagicMock(side_effect=requests.Timeout("slow"))
    executor = RetryExecutor(attempts=3, base_delay=0.1, sleep=sleep)

    with pytest.raises(PaymentProviderUnavailable) as excinfo:
        executor.run(operation, name="paypal.capture_order")

    assert operation.call_count == 3
    assert sleep.call_count == 2
    assert isinstance(excinfo.value.__cause__, requests.Timeout)


def test_rejections_are_not_retried(sleep):
    operation = MagicMock(side_effect=PaymentRejected("422", status_code=422))
    executor = RetryExecutor(attempts=3, sleep=sleep)

    with pytest.raises(PaymentRejected):
        executor.run(operation)

    operation.assert_called_once()
    sleep.assert_not_called()


def test_delay_doubles_per_retry():
    executor = RetryExecutor(base_delay=0.3)
    assert executor.delay_for(1) == pytest.approx(0.3)
    assert executor.delay_for(2) == pytest.approx(0.6)
    assert executor.delay_for(3) == pytest.approx(1.2)


def test_attempts_must_be_positive():
    with pytest.raises(ValueError):
        RetryExecutor(attempts=0)
