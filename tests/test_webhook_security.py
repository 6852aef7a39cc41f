import hashlib
import hmac

import pytest

from appointly.webhook_security import constant_time_compare, sign_payment, verify_payment_signature

SECRET = "rzp_test_secret"
ORDER_ID = "order_NFxqR5XwP1"
PAYMENT_ID = "pay_NFxqZ7b9Qd"


def mutate(value: str, index: int) -> str:
    index %= len(value)
    replacement = "0" if value[index] != "0" else "1"
    return value[:index] + replacement + value[index + 1 :]


def test_signature_is_hmac_sha256_of_order_and_payment():
    expected = hmac.new(SECRET.encode(), f"{ORDER_ID}|{PAYMENT_ID}".encode(), hashlib.sha256).hexdigest()
    assert sign_payment(SECRET, ORDER_ID, PAYMENT_ID) == expected


def test_valid_signature_verifies():
    signature = sign_payment(SECRET, ORDER_ID, PAYMENT_ID)
    assert verify_payment_signature(SECRET, ORDER_ID, PAYMENT_ID, signature) is True


@pytest.mark.parametrize("index", [0, 17, 63])
def test_mutated_signature_fails(index):
    signature = sign_payment(SECRET, ORDER_ID, PAYMENT_ID)
    assert verify_payment_signature(SECRET, ORDER_ID, PAYMENT_ID, mutate(signature, index)) is False


@pytest.mark.parametrize("index", [0, 6, -1])
def test_mutated_ids_fail(index):
    signature = sign_payment(SECRET, ORDER_ID, PAYMENT_ID)
    assert verify_payment_signature(SECRET, mutate(ORDER_ID, index), PAYMENT_ID, signature) is False
    assert verify_payment_signature(SECRET, ORDER_ID, mutate(PAYMENT_ID, index), signature) is False


def test_wrong_secret_fails():
    signature = sign_payment("another-secret", ORDER_ID, PAYMENT_ID)
    assert verify_payment_signature(SECRET, ORDER_ID, PAYMENT_ID, signature) is False


def test_uppercase_hex_is_not_accepted():
    signature = sign_payment(SECRET, ORDER_ID, PAYMENT_ID).upper()
    assert verify_payment_signature(SECRET, ORDER_ID, PAYMENT_ID, signature) is False


def test_empty_values_never_compare_equal():
    assert constant_time_compare("", "") is False
    assert constant_time_compare("abc", None) is False
