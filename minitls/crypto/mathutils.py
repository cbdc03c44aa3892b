"""
Arbitrary-precision number theory used by the RSA and Diffie-Hellman layers.

- mod_pow(): square-and-multiply modular exponentiation
- is_probable_prime(): Miller-Rabin primality test
- generate_prime(): random full-width prime of a given bit length
- mod_inverse(): extended Euclidean algorithm
- random_big_integer(): uniform sample from an inclusive range

None of these use Python's three-argument pow(); every exponentiation goes
through mod_pow().
"""

import secrets

DEFAULT_PRIMALITY_ROUNDS = 10


def mod_pow(base: int, exponent: int, modulus: int) -> int:
    """
    Compute (base ** exponent) mod modulus by repeated squaring.

    Args:
        base: Base, reduced mod modulus before the loop
        exponent: Non-negative exponent
        modulus: Positive modulus

    Returns:
        int: Result in [0, modulus)

    Raises:
        ValueError: If modulus <= 0 or exponent < 0
    """
    if modulus <= 0:
        raise ValueError(f"Modulus must be positive, got {modulus}")
    if exponent < 0:
        raise ValueError(f"Exponent must be non-negative, got {exponent}")
    if modulus == 1:
        return 0

    result = 1
    base = base % modulus

    while exponent > 0:
        if exponent & 1:
            result = (result * base) % modulus
        exponent >>= 1
        base = (base * base) % modulus

    return result


def gcd(a: int, b: int) -> int:
    """Greatest common divisor by the Euclidean algorithm."""
    a, b = abs(a), abs(b)
    while b:
        a, b = b, a % b
    return a


def random_big_integer(minimum: int, maximum: int) -> int:
    """
    Uniform random integer in [minimum, maximum] inclusive.

    Samples range.bit_length() random bits and rejects values outside the
    range, so every value is equally likely.

    Raises:
        ValueError: If maximum < minimum
    """
    if maximum < minimum:
        raise ValueError(f"Empty range [{minimum}, {maximum}]")

    span = maximum - minimum + 1
    bits = span.bit_length()
    while True:
        candidate = secrets.randbits(bits)
        if candidate < span:
            return candidate + minimum


def is_probable_prime(n: int, iterations: int = DEFAULT_PRIMALITY_ROUNDS) -> bool:
    """
    Miller-Rabin primality test.

    Args:
        n: Candidate
        iterations: Number of independent random witnesses in [2, n-2]

    Returns:
        bool: False if some witness proves n composite, True otherwise
    """
    if n < 2:
        return False
    if n in (2, 3):
        return True
    if n % 2 == 0:
        return False

    # n - 1 = 2^r * d with d odd
    d = n - 1
    r = 0
    while d % 2 == 0:
        d //= 2
        r += 1

    for _ in range(iterations):
        a = random_big_integer(2, n - 2)
        x = mod_pow(a, d, n)

        if x == 1 or x == n - 1:
            continue

        for _ in range(r - 1):
            x = mod_pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False

    return True


def generate_prime(bit_length: int, iterations: int = DEFAULT_PRIMALITY_ROUNDS) -> int:
    """
    Generate a random probable prime with exactly bit_length bits.

    Candidates have the high bit set (full width) and the low bit set (odd).
    There is no iteration cap.

    Raises:
        ValueError: If bit_length < 2
    """
    if bit_length < 2:
        raise ValueError(f"Prime size must be at least 2 bits, got {bit_length}")

    while True:
        candidate = secrets.randbits(bit_length)
        candidate |= (1 << (bit_length - 1)) | 1
        if is_probable_prime(candidate, iterations):
            return candidate


def mod_inverse(a: int, m: int) -> int:
    """
    Modular inverse of a mod m by the iterative extended Euclidean algorithm.

    Returns:
        int: x in [0, m) with (a * x) % m == 1, or 0 when m == 1

    Raises:
        ValueError: If m <= 0 or gcd(a, m) != 1
    """
    if m <= 0:
        raise ValueError(f"Modulus must be positive, got {m}")
    if m == 1:
        return 0

    old_r, r = a % m, m
    old_s, s = 1, 0

    while r != 0:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s

    if old_r != 1:
        raise ValueError(f"No modular inverse: gcd({a}, {m}) = {old_r}")

    return old_s % m
