"""
ElGamal Decryption

Recovers the plaintext from a ciphertext pair using this round's secret:

    x = y2 * y1^(p-1-n) mod p

y1^(p-1-n) is the inverse of y1^n by Fermat, so no explicit inversion is
needed. The result is only meaningful when the endpoint encrypted under the
public contribution derived from the same n.
"""
from model import EncryptResponse
from service.crypto.modular import as_int64, mod_mul, mod_pow


def recover(response: EncryptResponse, p: int, n: int) -> int:
    exponent = p - 1 - n
    x = mod_mul(response.y2, mod_pow(response.y1, exponent, p), p)
    return as_int64(x)
