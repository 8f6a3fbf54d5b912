"""
Base58 encoding cho keys và addresses (bảng chữ cái Bitcoin/Solana)
"""

import base58

from .Stealth_Config import KEY_LENGTH
from .Stealth_Errors import InvalidFormat, InvalidKeyLength


def encode_base58(data):
    """bytes → base58 str"""
    return base58.b58encode(bytes(data)).decode('ascii')


def decode_base58(text, length=KEY_LENGTH):
    """
    base58 str → bytes, kiểm tra độ dài

    Args:
        text: base58 string
        length: số bytes yêu cầu (None để bỏ qua kiểm tra)

    Raises:
        InvalidFormat: ký tự không thuộc bảng base58
        InvalidKeyLength: độ dài sau decode khác length
    """
    if not isinstance(text, str) or not text:
        raise InvalidFormat("Expected a non-empty base58 string")

    try:
        data = base58.b58decode(text)
    except ValueError as e:
        raise InvalidFormat(f"Invalid base58 string: {e}") from e

    if length is not None and len(data) != length:
        raise InvalidKeyLength(f"Decoded key must be {length} bytes, got {len(data)}")

    return data


def as_key_bytes(value, length=KEY_LENGTH):
    """
    Chấp nhận bytes/bytearray hoặc base58 str, trả về bytes đúng độ dài
    """
    if isinstance(value, str):
        return decode_base58(value, length)

    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidFormat("Key must be bytes or a base58 string")

    data = bytes(value)
    if len(data) != length:
        raise InvalidKeyLength(f"Key must be {length} bytes, got {len(data)}")
    return data
