"""
sm2cipher — SM2 Public-Key Encryption
Hybrid encryption to an elliptic-curve public key (GB/T 32918.4).

The sender masks the message with a KDF stream derived from an ephemeral
Diffie-Hellman point and binds it with a hash tag. The ciphertext is
self-describing given the agreed parameters:

    C1 (ephemeral point) || C2 (masked payload) || C3 (tag)

Only the holder of the matching private key can rebuild the mask and
the tag. A wrong key or any tampering with C2/C3 fails authentication;
no plaintext is ever released on failure.

Usage:
    from sm2cipher import SM2P256V1, generate_private_key, encrypt, decrypt
    key = generate_private_key(SM2P256V1)
    blob = encrypt(b"hello", key.public_key)
    assert decrypt(blob, key) == b"hello"
"""

import logging

from sm2cipher.cipher import SM2Cipher, encrypt, decrypt
from sm2cipher.ciphertext import CiphertextValue, required_size, encode, decode
from sm2cipher.config import CipherConfig
from sm2cipher.curves import (
    ECGroup, WeierstrassCurve, Point, PointForm, INFINITY,
    SM2P256V1, SECP256R1, SECP256K1, get_curve,
)
from sm2cipher.decryptor import Decryptor
from sm2cipher.encryptor import Encryptor
from sm2cipher.errors import (
    SM2Error, DomainError, InvalidPublicKey, InvalidPrivateKey, KdfUnavailable,
    EncryptionFailed, DecryptionFailed, InvalidCiphertext, AuthenticationFailed,
    BufferTooSmall,
)
from sm2cipher.kdf import KdfStream, is_all_zero
from sm2cipher.keys import PublicKey, PrivateKey, generate_private_key

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "SM2Cipher",
    "encrypt",
    "decrypt",
    "CipherConfig",
    "CiphertextValue",
    "required_size",
    "encode",
    "decode",
    "Encryptor",
    "Decryptor",
    "KdfStream",
    "is_all_zero",
    "ECGroup",
    "WeierstrassCurve",
    "Point",
    "PointForm",
    "INFINITY",
    "SM2P256V1",
    "SECP256R1",
    "SECP256K1",
    "get_curve",
    "PublicKey",
    "PrivateKey",
    "generate_private_key",
    "SM2Error",
    "DomainError",
    "InvalidPublicKey",
    "InvalidPrivateKey",
    "KdfUnavailable",
    "EncryptionFailed",
    "DecryptionFailed",
    "InvalidCiphertext",
    "AuthenticationFailed",
    "BufferTooSmall",
]
