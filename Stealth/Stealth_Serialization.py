"""
Stealth Key Serialization
StealthKeyPair <-> bốn chuỗi base58 (view/spend, private/public)

Pure, không I/O; lưu trữ là trách nhiệm của caller.
"""

from .Stealth_Address import get_meta_address, format_meta_address
from .Stealth_Encoding import encode_base58, decode_base58
from .Stealth_Errors import InvalidFormat
from .Stealth_KeyGen import KeyPair, StealthKeyPair

_FIELDS = ("viewPrivateKey", "viewPublicKey", "spendPrivateKey", "spendPublicKey")


class SerializedStealthKeys:
    """
    Bốn key dạng base58
    """

    def __init__(self, view_private_key, view_public_key, spend_private_key, spend_public_key):
        self.view_private_key = view_private_key
        self.view_public_key = view_public_key
        self.spend_private_key = spend_private_key
        self.spend_public_key = spend_public_key

    def to_dict(self):
        return dict(zip(_FIELDS, (self.view_private_key, self.view_public_key,
                                  self.spend_private_key, self.spend_public_key)))

    @staticmethod
    def from_dict(data):
        """
        Raises:
            InvalidFormat: thiếu field
        """
        missing = [name for name in _FIELDS if not data.get(name)]
        if missing:
            raise InvalidFormat(f"Missing serialized key fields: {', '.join(missing)}")
        return SerializedStealthKeys(*(data[name] for name in _FIELDS))

    def __eq__(self, other):
        if not isinstance(other, SerializedStealthKeys):
            return False
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"SerializedStealthKeys(view_public_key={self.view_public_key!r}, "
                f"spend_public_key={self.spend_public_key!r})")


def serialize_stealth_keys(keys):
    """
    StealthKeyPair → SerializedStealthKeys
    """
    return SerializedStealthKeys(
        view_private_key=encode_base58(keys.view_key.private_key),
        view_public_key=encode_base58(keys.view_key.public_key),
        spend_private_key=encode_base58(keys.spend_key.private_key),
        spend_public_key=encode_base58(keys.spend_key.public_key),
    )


def deserialize_stealth_keys(serialized):
    """
    SerializedStealthKeys (hoặc dict) → StealthKeyPair

    Không derive lại public keys; chỉ kiểm tra mỗi key đúng 32 bytes.

    Raises:
        InvalidFormat, InvalidKeyLength
    """
    if isinstance(serialized, dict):
        serialized = SerializedStealthKeys.from_dict(serialized)

    return StealthKeyPair(
        KeyPair(decode_base58(serialized.view_private_key), decode_base58(serialized.view_public_key)),
        KeyPair(decode_base58(serialized.spend_private_key), decode_base58(serialized.spend_public_key)),
    )


def export_keys(keys, wallet_address=None):
    """
    Bundle hex để người dùng backup, kèm meta-address

    Returns:
        dict
    """
    return {
        'viewPrivateKey': bytes(keys.view_key.private_key).hex(),
        'viewPublicKey': keys.view_key.public_key.hex(),
        'spendPrivateKey': bytes(keys.spend_key.private_key).hex(),
        'spendPublicKey': keys.spend_key.public_key.hex(),
        'metaAddress': format_meta_address(get_meta_address(keys)),
        'walletAddress': wallet_address,
    }
