"""
Curves
The elliptic-curve group the encryption layer runs over.

The encryption code only talks to the ``ECGroup`` interface: scalar
multiplication, point <-> octet conversion, order, cofactor and field
size. ``WeierstrassCurve`` is a pure-Python implementation of that
interface for short-Weierstrass curves y^2 = x^3 + ax + b over GF(p),
using Jacobian coordinates so that a scalar multiplication needs a
single field inversion.

Point octets follow SEC 1 / GB/T 32918.1-2016 4.2.9:
  compressed    02|03 || X
  uncompressed  04 || X || Y
  hybrid        06|07 || X || Y
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from sm2cipher.errors import DomainError


class PointForm(Enum):
    """Octet encoding of a curve point on the wire."""
    COMPRESSED = "compressed"
    UNCOMPRESSED = "uncompressed"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class Point:
    """An affine curve point. ``x is None`` marks the point at infinity."""
    x: int | None
    y: int | None

    @property
    def is_infinity(self) -> bool:
        return self.x is None

    def __repr__(self) -> str:
        if self.is_infinity:
            return "Point(O)"
        return f"Point(x={self.x:x}, y={self.y:x})"


INFINITY = Point(None, None)


class ECGroup(ABC):
    """Abstract elliptic-curve group consumed by the Encryptor/Decryptor."""

    name: str = "unnamed"

    @property
    @abstractmethod
    def order(self) -> int:
        """Order n of the generator."""

    @property
    @abstractmethod
    def cofactor(self) -> int:
        """Cofactor h = #E / n."""

    @property
    @abstractmethod
    def field_byte_length(self) -> int:
        """Length in bytes of one field element."""

    @property
    @abstractmethod
    def generator(self) -> Point:
        """The base point G."""

    @abstractmethod
    def multiply(self, scalar: int, point: Point) -> Point:
        """Compute scalar * point."""

    @abstractmethod
    def contains(self, point: Point) -> bool:
        """Check the point satisfies the curve equation (O is contained)."""

    @abstractmethod
    def point_to_octets(self, point: Point, form: PointForm) -> bytes:
        """Encode a point. Raises ValueError for the point at infinity."""

    @abstractmethod
    def octets_to_point(self, data: bytes, form: PointForm) -> Point:
        """Decode a point. Raises ValueError for malformed or off-curve data."""

    def is_infinity(self, point: Point) -> bool:
        return point.is_infinity

    def point_length(self, form: PointForm) -> int:
        """Octet length of an encoded point in the given form."""
        form = PointForm(form)
        if form is PointForm.COMPRESSED:
            return 1 + self.field_byte_length
        return 1 + 2 * self.field_byte_length

    def multiply_generator(self, scalar: int) -> Point:
        return self.multiply(scalar, self.generator)


# Jacobian (X, Y, Z) represents affine (X/Z^2, Y/Z^3); Z == 0 is infinity
_J_INFINITY = (1, 1, 0)


def _sqrt_mod(value: int, p: int) -> int | None:
    """Square root modulo an odd prime, or None if value is a non-residue."""
    value %= p
    if value == 0:
        return 0
    if pow(value, (p - 1) // 2, p) != 1:
        return None

    if p % 4 == 3:
        return pow(value, (p + 1) // 4, p)

    # Tonelli-Shanks
    q, s = p - 1, 0
    while q % 2 == 0:
        q //= 2
        s += 1
    z = 2
    while pow(z, (p - 1) // 2, p) != p - 1:
        z += 1
    m, c, t, r = s, pow(z, q, p), pow(value, q, p), pow(value, (q + 1) // 2, p)
    while t != 1:
        i, t2 = 0, t
        while t2 != 1:
            t2 = (t2 * t2) % p
            i += 1
        b = pow(c, 1 << (m - i - 1), p)
        m, c = i, (b * b) % p
        t, r = (t * c) % p, (r * b) % p
    return r


class WeierstrassCurve(ECGroup):
    """
    Short-Weierstrass curve y^2 = x^3 + ax + b over GF(p).

    Args:
        name: Curve identifier.
        p: Field prime.
        a, b: Curve coefficients.
        gx, gy: Generator coordinates.
        order: Order n of the generator.
        cofactor: h = #E / n.

    Raises:
        DomainError: If the parameters do not describe a usable group.
    """

    def __init__(self, name: str, p: int, a: int, b: int, gx: int, gy: int,
                 order: int, cofactor: int = 1):
        if p <= 3 or p % 2 == 0:
            raise DomainError(f"{name}: field modulus must be an odd prime > 3")
        if (4 * a ** 3 + 27 * b ** 2) % p == 0:
            raise DomainError(f"{name}: singular curve")
        if order < 2:
            raise DomainError(f"{name}: group order must be at least 2")
        if cofactor < 1:
            raise DomainError(f"{name}: cofactor must be positive")

        self.name = name
        self.p = p
        self.a = a % p
        self.b = b % p
        self._order = order
        self._cofactor = cofactor
        self._field_bytes = (p.bit_length() + 7) // 8
        self._generator = Point(gx, gy)

        if not self.contains(self._generator):
            raise DomainError(f"{name}: generator is not on the curve")

    def __repr__(self) -> str:
        return f"WeierstrassCurve({self.name!r})"

    @property
    def order(self) -> int:
        return self._order

    @property
    def cofactor(self) -> int:
        return self._cofactor

    @property
    def field_byte_length(self) -> int:
        return self._field_bytes

    @property
    def generator(self) -> Point:
        return self._generator

    def contains(self, point: Point) -> bool:
        if point.is_infinity:
            return True
        x, y, p = point.x, point.y, self.p
        if not (0 <= x < p and 0 <= y < p):
            return False
        return (y * y - (x * x * x + self.a * x + self.b)) % p == 0

    # -- Jacobian arithmetic --------------------------------------------

    def _to_jacobian(self, point: Point) -> tuple[int, int, int]:
        if point.is_infinity:
            return _J_INFINITY
        return (point.x, point.y, 1)

    def _to_affine(self, jp: tuple[int, int, int]) -> Point:
        X, Y, Z = jp
        if Z == 0:
            return INFINITY
        p = self.p
        z_inv = pow(Z, -1, p)
        z_inv2 = (z_inv * z_inv) % p
        return Point((X * z_inv2) % p, (Y * z_inv2 * z_inv) % p)

    def _double(self, jp: tuple[int, int, int]) -> tuple[int, int, int]:
        X1, Y1, Z1 = jp
        p = self.p
        if Z1 == 0 or Y1 == 0:
            return _J_INFINITY
        Y1_2 = (Y1 * Y1) % p
        S = (4 * X1 * Y1_2) % p
        M = (3 * X1 * X1 + self.a * pow(Z1, 4, p)) % p
        X3 = (M * M - 2 * S) % p
        Y3 = (M * (S - X3) - 8 * Y1_2 * Y1_2) % p
        Z3 = (2 * Y1 * Z1) % p
        return (X3, Y3, Z3)

    def _add(self, jp: tuple[int, int, int], jq: tuple[int, int, int]) -> tuple[int, int, int]:
        X1, Y1, Z1 = jp
        X2, Y2, Z2 = jq
        if Z1 == 0:
            return jq
        if Z2 == 0:
            return jp
        p = self.p
        Z1_2 = (Z1 * Z1) % p
        Z2_2 = (Z2 * Z2) % p
        U1 = (X1 * Z2_2) % p
        U2 = (X2 * Z1_2) % p
        S1 = (Y1 * Z2_2 * Z2) % p
        S2 = (Y2 * Z1_2 * Z1) % p
        if U1 == U2:
            if S1 != S2:
                return _J_INFINITY
            return self._double(jp)
        H = (U2 - U1) % p
        R = (S2 - S1) % p
        H2 = (H * H) % p
        H3 = (H2 * H) % p
        U1H2 = (U1 * H2) % p
        X3 = (R * R - H3 - 2 * U1H2) % p
        Y3 = (R * (U1H2 - X3) - S1 * H3) % p
        Z3 = (H * Z1 * Z2) % p
        return (X3, Y3, Z3)

    def multiply(self, scalar: int, point: Point) -> Point:
        """
        Double-and-add, most significant bit first.

        The scalar is not reduced mod n: the cofactor check multiplies
        points that may lie outside the prime-order subgroup.
        """
        if scalar < 0:
            raise ValueError("Scalar must be non-negative")
        if scalar == 0 or point.is_infinity:
            return INFINITY

        base = self._to_jacobian(point)
        acc = _J_INFINITY
        for bit in bin(scalar)[2:]:
            acc = self._double(acc)
            if bit == "1":
                acc = self._add(acc, base)
        return self._to_affine(acc)

    # -- Octet conversion -----------------------------------------------

    def point_to_octets(self, point: Point, form: PointForm = PointForm.UNCOMPRESSED) -> bytes:
        form = PointForm(form)
        if point.is_infinity:
            raise ValueError("Cannot encode the point at infinity")

        size = self._field_bytes
        x_octets = point.x.to_bytes(size, "big")
        y_octets = point.y.to_bytes(size, "big")
        y_bit = point.y & 1

        if form is PointForm.COMPRESSED:
            return bytes([0x02 | y_bit]) + x_octets
        if form is PointForm.HYBRID:
            return bytes([0x06 | y_bit]) + x_octets + y_octets
        return b"\x04" + x_octets + y_octets

    def octets_to_point(self, data: bytes, form: PointForm = PointForm.UNCOMPRESSED) -> Point:
        form = PointForm(form)
        data = bytes(data)
        expected = self.point_length(form)
        if len(data) != expected:
            raise ValueError(f"{form.value} point must be {expected} bytes, got {len(data)}")

        size = self._field_bytes
        prefix = data[0]
        x = int.from_bytes(data[1:1 + size], "big")
        if x >= self.p:
            raise ValueError("x coordinate out of range")

        if form is PointForm.COMPRESSED:
            if prefix not in (0x02, 0x03):
                raise ValueError(f"Bad compressed point prefix {prefix:#04x}")
            y = _sqrt_mod(x * x * x + self.a * x + self.b, self.p)
            if y is None:
                raise ValueError("x coordinate has no point on the curve")
            if (y & 1) != (prefix & 1):
                if y == 0:
                    raise ValueError("y = 0 cannot carry an odd compressed prefix")
                y = self.p - y
            point = Point(x, y)
        else:
            y = int.from_bytes(data[1 + size:], "big")
            if form is PointForm.UNCOMPRESSED and prefix != 0x04:
                raise ValueError(f"Bad uncompressed point prefix {prefix:#04x}")
            if form is PointForm.HYBRID:
                if prefix not in (0x06, 0x07):
                    raise ValueError(f"Bad hybrid point prefix {prefix:#04x}")
                if (y & 1) != (prefix & 1):
                    raise ValueError("Hybrid point parity bit does not match y")
            point = Point(x, y)

        if not self.contains(point):
            raise ValueError("Point is not on the curve")
        return point


# GM/T 0003.5-2012 recommended curve
SM2P256V1 = WeierstrassCurve(
    name="sm2p256v1",
    p=0xFFFFFFFEFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF00000000FFFFFFFFFFFFFFFF,
    a=0xFFFFFFFEFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF00000000FFFFFFFFFFFFFFFC,
    b=0x28E9FA9E9D9F5E344D5A9E4BCF6509A7F39789F515AB8F92DDBCBD414D940E93,
    gx=0x32C4AE2C1F1981195F9904466A39C9948FE30BBFF2660BE1715A4589334C74C7,
    gy=0xBC3736A2F4F6779C59BDCEE36B692153D0A9877CC62A474002DF32E52139F0A0,
    order=0xFFFFFFFEFFFFFFFFFFFFFFFFFFFFFFFF7203DF6B21C6052B53BBF40939D54123,
)

# NIST P-256
SECP256R1 = WeierstrassCurve(
    name="secp256r1",
    p=0xFFFFFFFF00000001000000000000000000000000FFFFFFFFFFFFFFFFFFFFFFFF,
    a=0xFFFFFFFF00000001000000000000000000000000FFFFFFFFFFFFFFFFFFFFFFFC,
    b=0x5AC635D8AA3A93E7B3EBBD55769886BC651D06B0CC53B0F63BCE3C3E27D2604B,
    gx=0x6B17D1F2E12C4247F8BCE6E563A440F277037D812DEB33A0F4A13945D898C296,
    gy=0x4FE342E2FE1A7F9B8EE7EB4A7C0F9E162BCE33576B315ECECBB6406837BF51F5,
    order=0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551,
)

SECP256K1 = WeierstrassCurve(
    name="secp256k1",
    p=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F,
    a=0,
    b=7,
    gx=0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
    gy=0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
    order=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141,
)

CURVES = {
    curve.name: curve
    for curve in (SM2P256V1, SECP256R1, SECP256K1)
}


def get_curve(name: str) -> WeierstrassCurve:
    """Look up a named curve."""
    try:
        return CURVES[name.lower()]
    except KeyError:
        raise DomainError(f"Unknown curve {name!r}; known: {', '.join(sorted(CURVES))}") from None
