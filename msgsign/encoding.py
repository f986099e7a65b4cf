# --------------------------------------------------------------
# File: encoding.py
# Description: Buffers tipados y conversiones DER, PEM, Base64 y hexadecimal.
# --------------------------------------------------------------
"""Capa de codificación entre material de clave, PEM, firmas y digests.

Cada representación es un tipo nominal distinto (`RawKeyBytes`, `PemBlock`,
`DigestHash`, `Signature`) para que no se pueda pasar una firma donde se
espera un digest, ni texto PEM donde se espera DER.
"""

from __future__ import annotations

import base64
import binascii
import re

from msgsign.errors import InvalidBase64, NoPemData
from msgsign.models import KeyKind

__all__ = [
    "DigestHash",
    "PemBlock",
    "RawKeyBytes",
    "Signature",
    "decode_to_raw",
    "encode_to_pem",
]

_PEM_LINE_LENGTH = 64
_PEM_BLOCK = re.compile(
    r"-----BEGIN (?P<label>[^\r\n]*?)-----[ \t]*\r?\n"
    # Cabeceras RFC 1421 opcionales ("Clave: valor"), separadas por una línea en blanco.
    r"(?:(?P<headers>(?:[^\r\n:]+:[^\r\n]*\r?\n)+)[ \t]*\r?\n)?"
    r"(?P<body>.*?)"
    r"-----END (?P=label)-----",
    re.DOTALL,
)


class RawKeyBytes(bytes):
    """Material de clave DER (SEC1, PKCS1 o SubjectPublicKeyInfo)."""

    def encode_to_pem(self, algorithm: str, key_kind: KeyKind) -> "PemBlock":
        """Envuelve el DER en un bloque PEM `<ALGORITMO> <TIPO> KEY`."""

        return encode_to_pem(self, algorithm, key_kind)


class PemBlock(str):
    """Texto PEM tal y como se persiste en disco o se recibe del usuario."""

    def decode_to_raw(self) -> RawKeyBytes:
        """Extrae el DER del primer bloque PEM encontrado."""

        return decode_to_raw(self)


class DigestHash(bytes):
    """Salida SHA-256 de 32 bytes que es lo que realmente se firma."""

    def hex_digest(self) -> str:
        """Representación hexadecimal en minúsculas para diagnósticos."""

        return self.hex()


class Signature(bytes):
    """Firma binaria: DER (R, S) para ECDSA o bloque RSASSA-PSS para RSA."""

    def to_base64(self) -> str:
        """Codifica la firma en Base64 estándar (RFC 4648) con relleno."""

        return base64.b64encode(self).decode("ascii")

    @classmethod
    def from_base64(cls, value: str) -> "Signature":
        """Decodifica una firma Base64 estándar.

        Args:
            value (str): Firma en Base64; se ignoran los saltos de línea.

        Returns:
            Signature: Bytes de la firma.

        Raises:
            InvalidBase64: Si hay caracteres fuera del alfabeto o relleno parcial.

        """

        cleaned = value.replace("\r", "").replace("\n", "")
        try:
            return cls(base64.b64decode(cleaned, validate=True))
        except (binascii.Error, ValueError) as exc:
            raise InvalidBase64(f"Invalid base64 signature: {exc}") from exc


def encode_to_pem(raw: bytes, algorithm: str, key_kind: KeyKind) -> PemBlock:
    """Codifica bytes DER como bloque PEM; nunca falla.

    Args:
        raw (bytes): Material de clave DER.
        algorithm (str): Nombre del algoritmo, p. ej. "ECDSA".
        key_kind (KeyKind): Clave pública o privada.

    Returns:
        PemBlock: Texto con cabecera, cuerpo en líneas de 64 y pie.

    """

    label = f"{algorithm} {key_kind.value} key".upper()
    body = base64.b64encode(raw).decode("ascii")
    lines = [
        body[i : i + _PEM_LINE_LENGTH] for i in range(0, len(body), _PEM_LINE_LENGTH)
    ]
    text = f"-----BEGIN {label}-----\n"
    for line in lines:
        text += line + "\n"
    text += f"-----END {label}-----\n"
    return PemBlock(text)


def decode_to_raw(pem: str) -> RawKeyBytes:
    """Decodifica el primer bloque PEM del texto sin validar su etiqueta.

    Args:
        pem (str): Texto que contiene un bloque PEM.

    Returns:
        RawKeyBytes: Bytes DER del bloque.

    Raises:
        NoPemData: Si no hay marcadores PEM o el cuerpo no es Base64.

    """

    match = _PEM_BLOCK.search(pem)
    if match is None:
        raise NoPemData("No PEM data was found")
    body = "".join(match.group("body").split())
    try:
        return RawKeyBytes(base64.b64decode(body, validate=True))
    except (binascii.Error, ValueError) as exc:
        raise NoPemData("No PEM data was found") from exc
