# --------------------------------------------------------------
# File: errors.py
# Description: Jerarquía de excepciones de la gestión de claves y firmas.
# --------------------------------------------------------------
"""Errores tipados que la capa criptográfica devuelve al llamante."""


class CryptoToolingError(Exception):
    """Raíz de todos los errores de claves, codificación y firma."""


class UnrecognizedAlgorithm(CryptoToolingError):
    """El algoritmo configurado no corresponde a ningún plugin."""


class AsymmetricKeyPresence(CryptoToolingError):
    """Solo existe uno de los dos ficheros del par de claves."""


class KeyGenerationFailed(CryptoToolingError):
    """La fuente de entropía falló durante la generación del par."""


class PersistenceFailed(CryptoToolingError):
    """Error de E/S al crear directorios, escribir o leer una clave."""


class PersistedKeyChanged(CryptoToolingError):
    """El fichero releído no coincide con lo que se acaba de escribir."""


class NoPemData(CryptoToolingError):
    """No se encontró ningún bloque PEM en el texto de entrada."""


class InvalidBase64(CryptoToolingError):
    """La firma no es Base64 RFC 4648 válida."""


class InvalidKeyEncoding(CryptoToolingError):
    """El DER de una clave está corrupto o no es interpretable."""


class InvalidSignatureEncoding(CryptoToolingError):
    """La firma ECDSA no es una secuencia ASN.1 DER de (R, S)."""


class AlgorithmKeyMismatch(CryptoToolingError):
    """La clave pertenece a un algoritmo distinto del configurado."""

    def __init__(self, expected: str, actual: object) -> None:
        self.expected = expected
        self.actual = type(actual).__name__
        super().__init__(f"expected {expected}, got {self.actual}")


class SignatureVerificationFailed(CryptoToolingError):
    """La firma es estructuralmente válida pero no verifica."""


class SigningFailed(CryptoToolingError):
    """La fuente de entropía falló al generar el nonce o la sal de la firma."""


class MessageError(Exception):
    """El mensaje de entrada no cumple las restricciones de formato."""


class MessageTooLong(MessageError):
    """El mensaje supera la longitud máxima admitida."""


class InvalidMessageEncoding(MessageError):
    """El mensaje no es ASCII o UTF-8 válido según el formato pedido."""
