"""
Fixed-width limb decomposition of big integers.

Limbs are LIMB_BITS wide and ordered least significant first, which is the
layout the circuit's bignum library expects. A 2048 bit value takes 18 limbs.
"""
import logging

from dkim.crypto import str2int

from dkim_prover.errors import EncodingError

logger = logging.getLogger(__name__)

LIMB_BITS = 120
BIT_WIDTH = 2048

# the Barrett parameter is 2^(2k + 4) // n for a k bit n, so it needs k + 5 bits
BARRETT_OVERFLOW_BITS = 4


def limb_count(bits: int, limb_bits: int = LIMB_BITS) -> int:
    return -(-bits // limb_bits)


def split_limbs(value: int, bits: int = BIT_WIDTH, limb_bits: int = LIMB_BITS):
    """ Decompose value into limb_count(bits) limbs, zero extended.

    >>> split_limbs(1 << 120, 240)
    [0, 1]

    @param value: int
        unsigned integer, at most `bits` bits wide
    @return: list of int, least significant limb first
    @raise EncodingError: negative or wider than bits
    """
    if value < 0:
        raise EncodingError("cannot encode negative integer")
    if value.bit_length() > bits:
        raise EncodingError(
            "integer is %d bits, limb array holds %d" % (value.bit_length(), bits))
    mask = (1 << limb_bits) - 1
    return [(value >> (i * limb_bits)) & mask for i in range(limb_count(bits, limb_bits))]


def join_limbs(limbs, limb_bits: int = LIMB_BITS) -> int:
    """Inverse of split_limbs; accepts ints or hex strings."""
    value = 0
    for limb in reversed(limbs):
        if isinstance(limb, str):
            limb = int(limb, 16)
        value = (value << limb_bits) | limb
    return value


def hex_limbs(value: int, bits: int = BIT_WIDTH, limb_bits: int = LIMB_BITS):
    return [hex(limb) for limb in split_limbs(value, bits, limb_bits)]


def barrett_parameter(modulus: int) -> int:
    """Reduction parameter 2^(2k + 4) // modulus, k the bit length of modulus."""
    if modulus <= 0:
        raise EncodingError("modulus must be positive")
    k = modulus.bit_length()
    return (1 << (2 * k + BARRETT_OVERFLOW_BITS)) // modulus


def modulus_limbs(modulus: int, bits: int = BIT_WIDTH, limb_bits: int = LIMB_BITS):
    return hex_limbs(modulus, bits, limb_bits)


def redc_limbs(modulus: int, bits: int = BIT_WIDTH, limb_bits: int = LIMB_BITS):
    """ Limbs of the Barrett parameter for modulus.

    The parameter is at most k + 5 bits wide for a k bit modulus, so with
    k <= bits it fits in bits + 5 bits; for bits = 2048 that is still the
    same number of limbs as the modulus.
    """
    redc = barrett_parameter(modulus)
    limbs = hex_limbs(redc, bits + BARRETT_OVERFLOW_BITS + 1, limb_bits)
    logger.debug("redc parameter is %d bits, %d limbs", redc.bit_length(), len(limbs))
    return limbs


def signature_limbs(signature: bytes, bits: int = BIT_WIDTH, limb_bits: int = LIMB_BITS):
    """Limbs of the signature read as a big-endian unsigned integer."""
    return hex_limbs(str2int(signature), bits, limb_bits)
