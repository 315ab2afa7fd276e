"""
Random identifiers shown to humans: order numbers, delivery codes and
generated voucher codes. All randomness comes from ``secrets``.
"""
import secrets
import string

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("number must be non-negative")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def random_base36(length: int) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))
