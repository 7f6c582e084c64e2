"""
Key agreement helpers shared by the Encryptor and Decryptor.

Both sides compute the same shared point (k*P on the sender, d*C1 on the
receiver) and feed its coordinates to the KDF and the tag hash.
"""

from sm2cipher.curves import ECGroup, Point, PointForm
from sm2cipher.hashes import HashLike, digest


def shared_point_octets(group: ECGroup, scalar: int, point: Point) -> tuple[bytes, bytes]:
    """
    Multiply and return the shared point's coordinates (x2, y2).

    The uncompressed encoding is 04 || X || Y with each coordinate
    field_byte_length bytes long; X sits at [1, 1+f) and Y at [1+f, 1+2f).

    Raises:
        ValueError: If the product is the point at infinity.
    """
    shared = group.multiply(scalar, point)
    if group.is_infinity(shared):
        raise ValueError("Shared point is the point at infinity")

    size = group.field_byte_length
    encoded = group.point_to_octets(shared, PointForm.UNCOMPRESSED)
    return encoded[1:1 + size], encoded[1 + size:1 + 2 * size]


def compute_tag(mac_hash: HashLike, x2: bytes, message: bytes, y2: bytes) -> bytes:
    """C3 = Hash(x2 || M || y2)."""
    return digest(mac_hash, x2, message, y2)


def xor_bytes(data: bytes, mask: bytes) -> bytes:
    """XOR two equal-length byte strings."""
    if len(data) != len(mask):
        raise ValueError("Mask length must equal data length")
    if not data:
        return b""
    value = int.from_bytes(data, "big") ^ int.from_bytes(mask, "big")
    return value.to_bytes(len(data), "big")
