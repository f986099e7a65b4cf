# --------------------------------------------------------------
# File: crypto_sign.py
# Description: Plugins ECDSA P-256 y RSA-PSS para generar, cargar y verificar claves.
# --------------------------------------------------------------
"""Estrategias de firma intercambiables que encapsulan cada algoritmo.

Cada plugin sabe generar un par de claves a partir de una fuente de
entropía inyectada, interpretar su clave privada DER como `Signer`,
calcular el digest de un mensaje y verificar una firma contra una clave
pública SubjectPublicKeyInfo.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import Callable, Tuple, Type, Union

from Crypto.Hash import SHA256
from Crypto.PublicKey import ECC, RSA
from Crypto.Signature import DSS, pss
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)

from msgsign.encoding import DigestHash, RawKeyBytes, Signature
from msgsign.errors import (
    AlgorithmKeyMismatch,
    CryptoToolingError,
    InvalidKeyEncoding,
    InvalidSignatureEncoding,
    KeyGenerationFailed,
    SignatureVerificationFailed,
    SigningFailed,
)

__all__ = [
    "AlgorithmPlugin",
    "ECDSAPlugin",
    "ECDSASigner",
    "RSAPlugin",
    "RSASigner",
    "RandomSource",
    "Signer",
]

RandomSource = Callable[[int], bytes]
Message = Union[str, bytes]

# Orden del grupo de P-256 (FIPS 186-4, D.1.2.3).
_P256_ORDER = int(
    "ffffffff00000000ffffffffffffffffbce6faada7179e84f3b9cac2fc632551", 16
)
# 64 bits extra para que la reducción modular no introduzca sesgo (FIPS 186-4, B.4.1).
_P256_SEED_BYTES = (256 + 64) // 8


def _read_entropy(
    random_source: RandomSource,
    length: int,
    error: Type[CryptoToolingError] = KeyGenerationFailed,
) -> bytes:
    """Lee exactamente `length` bytes de la fuente inyectada."""

    try:
        data = random_source(length)
    except Exception as exc:
        raise error(f"Random source failed: {exc}") from exc
    if len(data) != length:
        raise error(
            f"Random source returned {len(data)} bytes, {length} were requested"
        )
    return data


def _message_bytes(message: Message) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    return bytes(message)


def _load_private_key(private_raw: RawKeyBytes):
    try:
        return serialization.load_der_private_key(bytes(private_raw), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyEncoding(f"Unable to parse private key: {exc}") from exc


def _load_public_key(public_raw: RawKeyBytes):
    try:
        return serialization.load_der_public_key(bytes(public_raw))
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyEncoding(f"Unable to parse public key: {exc}") from exc


class _PrehashedSHA256:
    """Digest SHA-256 ya calculado con la interfaz de hash de pycryptodome."""

    oid = SHA256.SHA256Hash.oid
    digest_size = SHA256.digest_size

    def __init__(self, digest: DigestHash) -> None:
        self._digest = bytes(digest)

    def digest(self) -> bytes:
        return self._digest

    @staticmethod
    def new(data=None):
        return SHA256.new(data)


class Signer(ABC):
    """Clave privada lista para firmar digests SHA-256."""

    @abstractmethod
    def sign(self, digest: DigestHash, random_source: RandomSource) -> Signature:
        """Firma un digest ya calculado.

        Args:
            digest (DigestHash): Digest SHA-256 del mensaje.
            random_source (RandomSource): Entropía para el nonce o la sal.

        Returns:
            Signature: Firma binaria.

        Raises:
            SigningFailed: Si la fuente falla o la clave no puede firmar.

        """


class ECDSASigner(Signer):
    """Firmante ECDSA; la firma resultante es DER (R, S)."""

    def __init__(self, private_key: ec.EllipticCurvePrivateKey) -> None:
        self._private_key = ECC.construct(
            curve=private_key.curve.name, d=private_key.private_numbers().private_value
        )

    def sign(self, digest: DigestHash, random_source: RandomSource) -> Signature:
        scheme = DSS.new(
            self._private_key,
            "fips-186-3",
            encoding="der",
            randfunc=lambda n: _read_entropy(random_source, n, SigningFailed),
        )
        try:
            return Signature(scheme.sign(_PrehashedSHA256(digest)))
        except (ValueError, TypeError) as exc:
            raise SigningFailed(f"ECDSA signing failed: {exc}") from exc


class RSASigner(Signer):
    """Firmante RSASSA-PSS con MGF1-SHA256 y sal de longitud máxima."""

    def __init__(self, private_key: rsa.RSAPrivateKey) -> None:
        numbers = private_key.private_numbers()
        self._private_key = RSA.construct(
            (
                numbers.public_numbers.n,
                numbers.public_numbers.e,
                numbers.d,
                numbers.p,
                numbers.q,
            )
        )

    def max_salt_length(self) -> int:
        # emLen - hLen - 2, con emLen = ceil((modBits - 1) / 8) (RFC 8017, 9.1.1).
        em_len = (self._private_key.size_in_bits() - 1 + 7) // 8
        return em_len - SHA256.digest_size - 2

    def sign(self, digest: DigestHash, random_source: RandomSource) -> Signature:
        scheme = pss.new(
            self._private_key,
            mask_func=lambda seed, length: pss.MGF1(seed, length, SHA256),
            salt_bytes=self.max_salt_length(),
            rand_func=lambda n: _read_entropy(random_source, n, SigningFailed),
        )
        try:
            return Signature(scheme.sign(_PrehashedSHA256(digest)))
        except (ValueError, TypeError) as exc:
            raise SigningFailed(f"RSA signing failed: {exc}") from exc


class AlgorithmPlugin(ABC):
    """Contrato común que implementa cada algoritmo de firma."""

    algorithm_name: str = ""

    @abstractmethod
    def generate_key_pair(
        self, random_source: RandomSource
    ) -> Tuple[RawKeyBytes, RawKeyBytes]:
        """Genera un par de claves y devuelve `(publica_der, privada_der)`."""

    @abstractmethod
    def ingest_private_key(self, private_raw: RawKeyBytes) -> Signer:
        """Interpreta la clave privada DER del algoritmo."""

    @abstractmethod
    def hash_message(self, message: Message) -> DigestHash:
        """Calcula el digest SHA-256 del mensaje."""

    @abstractmethod
    def verify_signature(
        self, digest: DigestHash, signature: Signature, public_raw: RawKeyBytes
    ) -> bool:
        """Verifica una firma para un digest con una clave pública PKIX."""


class ECDSAPlugin(AlgorithmPlugin):
    """Implementación ECDSA sobre la curva P-256."""

    algorithm_name = "ECDSA"

    def generate_key_pair(
        self, random_source: RandomSource
    ) -> Tuple[RawKeyBytes, RawKeyBytes]:
        """Deriva el escalar privado de la fuente y serializa SEC1 y PKIX.

        Args:
            random_source (RandomSource): Función `n -> bytes` de entropía.

        Returns:
            Tuple[RawKeyBytes, RawKeyBytes]: Clave pública PKIX DER y clave
            privada SEC1 DER.

        Raises:
            KeyGenerationFailed: Si la fuente falla o devuelve bytes de menos.

        """

        seed = _read_entropy(random_source, _P256_SEED_BYTES)
        scalar = int.from_bytes(seed, "big") % (_P256_ORDER - 1) + 1
        private_key = ec.derive_private_key(scalar, ec.SECP256R1())
        private_raw = private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_raw = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return RawKeyBytes(public_raw), RawKeyBytes(private_raw)

    def ingest_private_key(self, private_raw: RawKeyBytes) -> Signer:
        key = _load_private_key(private_raw)
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise AlgorithmKeyMismatch("ecdsa", key)
        return ECDSASigner(key)

    def hash_message(self, message: Message) -> DigestHash:
        return DigestHash(hashlib.sha256(_message_bytes(message)).digest())

    def verify_signature(
        self, digest: DigestHash, signature: Signature, public_raw: RawKeyBytes
    ) -> bool:
        """Verifica una firma DER (R, S).

        Returns:
            bool: True si verifica, False si la firma es estructuralmente
            válida pero no corresponde al digest o a la clave.

        Raises:
            InvalidKeyEncoding: Si la clave pública no es PKIX DER.
            AlgorithmKeyMismatch: Si la clave pública no es ECDSA.
            InvalidSignatureEncoding: Si la firma no es ASN.1 DER válido.

        """

        public_key = _load_public_key(public_raw)
        if not isinstance(public_key, ec.EllipticCurvePublicKey):
            raise AlgorithmKeyMismatch("ecdsa", public_key)
        try:
            r, s = decode_dss_signature(bytes(signature))
        except ValueError as exc:
            raise InvalidSignatureEncoding(f"Malformed ECDSA signature: {exc}") from exc
        if r <= 0 or s <= 0:
            return False
        try:
            public_key.verify(
                encode_dss_signature(r, s),
                bytes(digest),
                ec.ECDSA(Prehashed(hashes.SHA256())),
            )
        except InvalidSignature:
            return False
        return True


class RSAPlugin(AlgorithmPlugin):
    """Implementación RSASSA-PSS con SHA-256."""

    algorithm_name = "RSA"

    def __init__(self, key_bits: int) -> None:
        self.key_bits = key_bits

    def generate_key_pair(
        self, random_source: RandomSource
    ) -> Tuple[RawKeyBytes, RawKeyBytes]:
        """Genera primos con pycryptodome usando la fuente como `randfunc`.

        Returns:
            Tuple[RawKeyBytes, RawKeyBytes]: Clave pública PKIX DER y clave
            privada PKCS1 DER.

        """

        try:
            key = RSA.generate(
                self.key_bits, randfunc=lambda n: _read_entropy(random_source, n)
            )
        except ValueError as exc:
            raise KeyGenerationFailed(f"RSA key generation failed: {exc}") from exc
        private_raw = key.export_key(format="DER", pkcs=1)
        public_raw = key.publickey().export_key(format="DER")
        return RawKeyBytes(public_raw), RawKeyBytes(private_raw)

    def ingest_private_key(self, private_raw: RawKeyBytes) -> Signer:
        key = _load_private_key(private_raw)
        if not isinstance(key, rsa.RSAPrivateKey):
            raise AlgorithmKeyMismatch("rsa", key)
        return RSASigner(key)

    def hash_message(self, message: Message) -> DigestHash:
        # Hash incremental propio de RSA para poder cambiar su política de digest.
        hasher = hashes.Hash(hashes.SHA256())
        hasher.update(_message_bytes(message))
        return DigestHash(hasher.finalize())

    def verify_signature(
        self, digest: DigestHash, signature: Signature, public_raw: RawKeyBytes
    ) -> bool:
        """Verifica una firma PSS con longitud de sal automática.

        Raises:
            InvalidKeyEncoding: Si la clave pública no es PKIX DER.
            AlgorithmKeyMismatch: Si la clave pública no es RSA.
            SignatureVerificationFailed: Si la firma no verifica.

        """

        public_key = _load_public_key(public_raw)
        if not isinstance(public_key, rsa.RSAPublicKey):
            raise AlgorithmKeyMismatch("rsa", public_key)
        try:
            public_key.verify(
                bytes(signature),
                bytes(digest),
                padding.PSS(
                    mgf=padding.MGF1(hashes.SHA256()),
                    salt_length=padding.PSS.AUTO,
                ),
                Prehashed(hashes.SHA256()),
            )
        except InvalidSignature as exc:
            raise SignatureVerificationFailed("crypto/rsa: verification error") from exc
        return True
