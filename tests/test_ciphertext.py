"""
Tests for the ciphertext value and its C1 || C2 || C3 wire layout.
"""

import dataclasses
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sm2cipher.ciphertext import (
    CiphertextValue, decode, encode, encode_into, payload_size, required_size,
)
from sm2cipher.curves import PointForm, SECP256R1, SM2P256V1
from sm2cipher.errors import BufferTooSmall, DecryptionFailed, InvalidCiphertext


def _sample_value(curve=SM2P256V1, payload_len=20, tag_len=32) -> CiphertextValue:
    point = curve.multiply(0x1234567, curve.generator)
    return CiphertextValue(
        ephemeral_point=point,
        payload=os.urandom(payload_len),
        tag=os.urandom(tag_len),
    )


def test_required_size():
    """Point length + plaintext length + digest size."""
    print("Testing required_size...", end=" ")
    assert required_size(SM2P256V1, PointForm.UNCOMPRESSED, 10, 32) == 65 + 10 + 32
    assert required_size(SM2P256V1, PointForm.COMPRESSED, 10, 32) == 33 + 10 + 32
    assert required_size(SM2P256V1, PointForm.HYBRID, 0, 64) == 65 + 64
    assert payload_size(SM2P256V1, PointForm.UNCOMPRESSED, 65 + 32 + 7, 32) == 7
    print("PASS")


def test_encode_layout():
    """Encoding is the point, then the payload, then the tag, nothing else."""
    print("Testing wire layout...", end=" ")
    value = _sample_value()
    for form in PointForm:
        blob = encode(value, SM2P256V1, form)
        point_len = SM2P256V1.point_length(form)
        assert len(blob) == required_size(SM2P256V1, form, len(value.payload), len(value.tag))
        assert blob[:point_len] == SM2P256V1.point_to_octets(value.ephemeral_point, form)
        assert blob[point_len:point_len + 20] == value.payload
        assert blob[-32:] == value.tag
    print("PASS")


def test_decode_restores_value():
    """Decoding an encoded value gives the same three fields back."""
    print("Testing decode...", end=" ")
    value = _sample_value(curve=SECP256R1, payload_len=1, tag_len=48)
    blob = encode(value, SECP256R1, PointForm.COMPRESSED)
    restored = decode(SECP256R1, PointForm.COMPRESSED, 48, blob)
    assert restored == value
    assert encode(restored, SECP256R1, PointForm.COMPRESSED) == blob
    print("PASS")


def test_decode_rejects_short_input():
    """Anything not longer than point + tag is rejected."""
    print("Testing short input rejection...", end=" ")
    limit = SM2P256V1.point_length(PointForm.UNCOMPRESSED) + 32
    for length in range(limit + 1):
        try:
            decode(SM2P256V1, PointForm.UNCOMPRESSED, 32, bytes(length))
            assert False, f"should have rejected length {length}"
        except InvalidCiphertext:
            pass
    print(f"PASS ({limit + 1} lengths)")


def test_decode_rejects_bad_point():
    """A payload-bearing blob whose C1 is not on the curve is rejected."""
    print("Testing bad point rejection...", end=" ")
    blob = encode(_sample_value(), SM2P256V1, PointForm.UNCOMPRESSED)
    corrupted = blob[:1] + bytes([blob[1] ^ 0xFF]) + blob[2:]
    wrong_prefix = b"\x02" + blob[1:]
    for data in (corrupted, wrong_prefix):
        try:
            decode(SM2P256V1, PointForm.UNCOMPRESSED, 32, data)
            assert False, "should have raised InvalidCiphertext"
        except InvalidCiphertext as exc:
            assert isinstance(exc, DecryptionFailed)
            assert str(exc) == "decryption failed"
            assert exc.reason
    print("PASS")


def test_encode_into_buffer():
    """Writes into an exact or larger buffer; refuses a short one untouched."""
    print("Testing encode_into...", end=" ")
    value = _sample_value()
    expected = encode(value, SM2P256V1, PointForm.UNCOMPRESSED)

    exact = bytearray(len(expected))
    assert encode_into(value, SM2P256V1, PointForm.UNCOMPRESSED, exact) == len(expected)
    assert bytes(exact) == expected

    larger = bytearray(len(expected) + 10)
    assert encode_into(value, SM2P256V1, PointForm.UNCOMPRESSED, larger) == len(expected)
    assert bytes(larger[:len(expected)]) == expected
    assert bytes(larger[len(expected):]) == bytes(10)

    short = bytearray(len(expected) - 1)
    try:
        encode_into(value, SM2P256V1, PointForm.UNCOMPRESSED, short)
        assert False, "should have raised BufferTooSmall"
    except BufferTooSmall as exc:
        assert exc.required_size == len(expected)
        assert exc.available == len(expected) - 1
    assert bytes(short) == bytes(len(expected) - 1)
    print("PASS")


def test_value_owns_its_buffers():
    """The value copies its inputs and cannot be reassigned."""
    print("Testing value ownership...", end=" ")
    payload = bytearray(b"masked payload")
    tag = bytearray(32)
    value = CiphertextValue(SM2P256V1.generator, payload, tag)
    payload[0] ^= 0xFF
    tag[0] = 1
    assert value.payload == b"masked payload"
    assert value.tag == bytes(32)
    assert isinstance(value.payload, bytes)
    try:
        value.payload = b"other"
        assert False, "should have raised FrozenInstanceError"
    except dataclasses.FrozenInstanceError:
        pass
    print("PASS")


def main():
    print("=" * 50)
    print("  sm2cipher — Ciphertext Codec Tests")
    print("=" * 50)
    print()

    tests = [
        test_required_size,
        test_encode_layout,
        test_decode_restores_value,
        test_decode_rejects_short_input,
        test_decode_rejects_bad_point,
        test_encode_into_buffer,
        test_value_owns_its_buffers,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"FAIL: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print()
    print(f"Results: {passed} passed, {failed} failed")
    return failed == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
