"""
Ciphertext
The SM2 ciphertext value and its wire layout.

Wire format (C1 || C2 || C3):

    +-----------------------+--------------------+-------------------+
    | encoded point C1      | masked payload C2  | tag C3            |
    | point_length(form)    | len(plaintext)     | MAC digest size   |
    +-----------------------+--------------------+-------------------+

No version byte and no length prefixes. Group, point form and MAC hash
are agreed out of band, so both field boundaries are implicit: the
payload is whatever lies between the point and the tag. A zero-length
payload cannot be told apart from a truncated blob, so the layout only
carries non-empty plaintexts.
"""

import logging
from dataclasses import dataclass

from sm2cipher.curves import ECGroup, Point, PointForm
from sm2cipher.errors import BufferTooSmall, DomainError, InvalidCiphertext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CiphertextValue:
    """
    Parsed ciphertext. Immutable once built.

    Attributes:
        ephemeral_point: C1 = k*G, the sender's one-time public key.
        payload: C2, the masked plaintext (same length as the plaintext).
        tag: C3 = Hash(x2 || M || y2).
    """
    ephemeral_point: Point
    payload: bytes
    tag: bytes

    def __post_init__(self):
        # Own private copies of the buffers
        object.__setattr__(self, "payload", bytes(self.payload))
        object.__setattr__(self, "tag", bytes(self.tag))


def required_size(group: ECGroup, point_form: PointForm, plaintext_length: int,
                  mac_digest_size: int) -> int:
    """Octet length of an encoded ciphertext, without building it."""
    if group is None:
        raise DomainError("A group is required")
    if plaintext_length < 0:
        raise DomainError("Plaintext length must be non-negative")
    return group.point_length(point_form) + plaintext_length + mac_digest_size


def payload_size(group: ECGroup, point_form: PointForm, ciphertext_length: int,
                 mac_digest_size: int) -> int:
    """
    Plaintext length carried by a ciphertext of the given total length.

    Raises:
        InvalidCiphertext: If the length leaves no room for a payload.
    """
    overhead = required_size(group, point_form, 0, mac_digest_size)
    if ciphertext_length <= overhead:
        raise InvalidCiphertext(
            f"ciphertext is {ciphertext_length} bytes, must exceed {overhead}"
        )
    return ciphertext_length - overhead


def encode(value: CiphertextValue, group: ECGroup,
           point_form: PointForm = PointForm.UNCOMPRESSED) -> bytes:
    """Serialize as encodedPoint(C1) || C2 || C3."""
    point_octets = group.point_to_octets(value.ephemeral_point, point_form)
    return point_octets + value.payload + value.tag


def encode_into(value: CiphertextValue, group: ECGroup, point_form: PointForm,
                buffer) -> int:
    """
    Serialize into a caller-supplied writable buffer.

    Returns:
        Number of bytes written.

    Raises:
        BufferTooSmall: If the buffer cannot hold the encoding. Nothing is
            written in that case.
    """
    size = required_size(group, point_form, len(value.payload), len(value.tag))
    view = memoryview(buffer)
    if view.nbytes < size:
        raise BufferTooSmall(size, view.nbytes)
    view = view.cast("B")
    view[:size] = encode(value, group, point_form)
    return size


def decode(group: ECGroup, point_form: PointForm, mac_digest_size: int,
           data: bytes) -> CiphertextValue:
    """
    Parse the wire layout back into a CiphertextValue.

    Raises:
        InvalidCiphertext: If the input is too short or C1 does not decode
            to a point on the curve.
    """
    data = bytes(data)
    point_length = group.point_length(point_form)
    payload_length = payload_size(group, point_form, len(data), mac_digest_size)

    try:
        point = group.octets_to_point(data[:point_length], point_form)
    except ValueError as exc:
        logger.debug("Ephemeral point rejected: %s", exc)
        raise InvalidCiphertext(f"bad ephemeral point: {exc}") from exc

    # payload_length was derived from the total, so the tag is exactly mac_digest_size
    payload = data[point_length:point_length + payload_length]
    tag = data[point_length + payload_length:]
    return CiphertextValue(ephemeral_point=point, payload=payload, tag=tag)
