# --------------------------------------------------------------
# File: models.py
# Description: Modelos de datos comunes utilizados por la capa criptográfica.
# --------------------------------------------------------------
"""Enumeraciones y modelos Pydantic de configuración y respuesta."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator

# Módulo mínimo que generan tanto pycryptodome como cryptography.
MIN_RSA_KEY_BITS = 1024


class Algorithm(str, Enum):
    """Algoritmos de firma soportados."""

    ECDSA = "ecdsa"
    RSA = "rsa"


class KeyKind(Enum):
    """Indica si una clave es pública o privada; solo decide la etiqueta PEM."""

    PUBLIC = "public"
    PRIVATE = "private"


class KeySettings(BaseModel):
    """Ajustes del par de claves, inmutables durante una ejecución.

    Attributes:
        algorithm (Algorithm): Algoritmo con el que se firma.
        rsa_key_bits (int): Longitud del módulo RSA; ignorada para ECDSA.
        private_key_path (str): Ruta del fichero de la clave privada.
        public_key_path (str): Ruta del fichero de la clave pública.

    """

    model_config = ConfigDict(frozen=True)

    algorithm: Algorithm
    rsa_key_bits: int = 0
    private_key_path: str
    public_key_path: str

    @model_validator(mode="after")
    def _check_rsa_bits(self) -> "KeySettings":
        if self.algorithm is Algorithm.RSA and self.rsa_key_bits < MIN_RSA_KEY_BITS:
            raise ValueError(
                f"RSA keys need at least {MIN_RSA_KEY_BITS} bits, got {self.rsa_key_bits}"
            )
        return self


class SignedMessage(BaseModel):
    """Respuesta final que se imprime en JSON tras firmar.

    Attributes:
        message (str): Mensaje firmado.
        signature (str): Firma en Base64 estándar.
        pubkey (str): Clave pública en PEM.

    """

    message: str
    signature: str
    pubkey: str


class VerifiedMessage(BaseModel):
    """Resultado de comprobar una firma recibida."""

    message: str
    valid: bool
