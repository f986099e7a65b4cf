# --------------------------------------------------------------
# File: keys.py
# Description: Orquestador del ciclo de vida del par de claves y de la firma.
# --------------------------------------------------------------
"""Carga o genera el par de claves configurado y expone firma y verificación.

Una instancia de `CryptoTooling` pasa por tres estados durante una
ejecución: plugin seleccionado (tras construirla), lista (tras
`load_or_create_keys`) y, a partir de ahí, firma y verifica mensajes.
"""

from __future__ import annotations

from typing import Optional, Tuple

from msgsign import storage
from msgsign.crypto_sign import (
    AlgorithmPlugin,
    ECDSAPlugin,
    Message,
    RandomSource,
    RSAPlugin,
    Signer,
)
from msgsign.encoding import DigestHash, PemBlock, RawKeyBytes, Signature
from msgsign.errors import (
    AsymmetricKeyPresence,
    CryptoToolingError,
    PersistedKeyChanged,
    UnrecognizedAlgorithm,
)
from msgsign.log import get_logger
from msgsign.models import Algorithm, KeyKind, KeySettings

__all__ = ["CryptoTooling", "select_plugin"]

logger = get_logger()


def select_plugin(settings: KeySettings) -> AlgorithmPlugin:
    """Elige el plugin correspondiente al algoritmo configurado.

    Raises:
        UnrecognizedAlgorithm: Si el algoritmo no tiene plugin.

    """

    if settings.algorithm == Algorithm.ECDSA:
        return ECDSAPlugin()
    if settings.algorithm == Algorithm.RSA:
        return RSAPlugin(key_bits=settings.rsa_key_bits)
    raise UnrecognizedAlgorithm(f"Unrecognized algorithm: {settings.algorithm!r}")


class CryptoTooling:
    """Estado criptográfico de una ejecución: ajustes, plugin, claves y firmante.

    Attributes:
        settings (KeySettings): Ajustes inmutables del par de claves.
        plugin (AlgorithmPlugin): Estrategia elegida al construir la instancia.
        public_key (Optional[PemBlock]): PEM público, disponible tras la carga.
        private_key (Optional[PemBlock]): PEM privado, disponible tras la carga.

    """

    def __init__(self, settings: KeySettings, random_source: RandomSource) -> None:
        self.settings = settings
        self.random_source = random_source
        self.plugin = select_plugin(settings)
        self.public_key: Optional[PemBlock] = None
        self.private_key: Optional[PemBlock] = None
        self._signer: Optional[Signer] = None
        logger.debug("Selected %s plugin", self.plugin.algorithm_name)

    def load_or_create_keys(self) -> None:
        """Recupera el par de claves de disco, generándolo si no existe.

        Tras escribir un par nuevo se relee siempre de disco y se exige que
        el contenido coincida byte a byte con lo escrito.

        Raises:
            AsymmetricKeyPresence: Si solo existe uno de los dos ficheros.
            KeyGenerationFailed: Si la fuente de entropía falla.
            PersistenceFailed: Si falla la escritura o la lectura.
            PersistedKeyChanged: Si un fichero cambió entre escritura y lectura.
            NoPemData: Si un fichero no contiene un bloque PEM.
            AlgorithmKeyMismatch: Si la clave privada es de otro algoritmo.

        """

        private_path = self.settings.private_key_path
        public_path = self.settings.public_key_path
        private_exists = storage.key_file_exists(private_path)
        if private_exists != storage.key_file_exists(public_path):
            raise AsymmetricKeyPresence(
                f"Files {private_path} and {public_path} must either both be present or missing"
            )

        written_public: Optional[PemBlock] = None
        written_private: Optional[PemBlock] = None
        if not private_exists:
            logger.info("Generating a new %s key pair", self.plugin.algorithm_name)
            public_raw, private_raw = self.plugin.generate_key_pair(self.random_source)
            written_public = self._encode_and_save(
                public_raw, KeyKind.PUBLIC, public_path, storage.PUBLIC_KEY_PERMISSION
            )
            written_private = self._encode_and_save(
                private_raw, KeyKind.PRIVATE, private_path, storage.PRIVATE_KEY_PERMISSION
            )

        private_pem, private_raw = self._load_and_decode(private_path)
        self._check_unchanged(private_path, written_private, private_pem)
        public_pem, _ = self._load_and_decode(public_path)
        self._check_unchanged(public_path, written_public, public_pem)

        self._signer = self.plugin.ingest_private_key(private_raw)
        self.private_key = private_pem
        self.public_key = public_pem
        logger.info("Loaded %s key pair from %s", self.plugin.algorithm_name, private_path)

    def _encode_and_save(
        self, raw: RawKeyBytes, key_kind: KeyKind, path: str, permission: int
    ) -> PemBlock:
        pem = raw.encode_to_pem(self.plugin.algorithm_name, key_kind)
        storage.write_key_file(path, pem, permission)
        logger.info("Wrote %s key to %s (mode %o)", key_kind.value, path, permission)
        return pem

    @staticmethod
    def _load_and_decode(path: str) -> Tuple[PemBlock, RawKeyBytes]:
        pem = storage.read_key_file(path)
        return pem, pem.decode_to_raw()

    @staticmethod
    def _check_unchanged(path: str, written: Optional[PemBlock], loaded: PemBlock) -> None:
        if written is not None and written != loaded:
            raise PersistedKeyChanged(
                f"File {path} contents changed between writing and reading: "
                f"Was:\n{written}\n\nNow:\n{loaded}"
            )

    def hash_message(self, message: Message) -> DigestHash:
        """Delega el cálculo del digest en el plugin."""

        digest = self.plugin.hash_message(message)
        logger.debug("SHA-256 digest %s", digest.hex_digest())
        return digest

    def sign(self, digest: DigestHash) -> Signature:
        """Firma un digest con la clave privada cargada.

        El nonce ECDSA y la sal PSS se leen de la fuente de entropía de la
        instancia.

        Raises:
            CryptoToolingError: Si las claves no se han cargado todavía.
            SigningFailed: Si la fuente de entropía falla.

        """

        if self._signer is None:
            raise CryptoToolingError(
                "Keys are not loaded; call load_or_create_keys() before signing"
            )
        return self._signer.sign(digest, self.random_source)

    def sign_message(self, message: Message) -> str:
        """Firma el digest del mensaje y devuelve la firma en Base64."""

        return self.sign(self.hash_message(message)).to_base64()

    def verify_signed_message(
        self, message: Message, base64_signature: str, pem_public_key: str
    ) -> bool:
        """Verifica una firma Base64 con cualquier clave pública PEM compatible.

        No usa las claves cargadas por la instancia, así que sirve para
        comprobar firmas de terceros.

        Args:
            message (Message): Mensaje original.
            base64_signature (str): Firma en Base64 estándar.
            pem_public_key (str): Clave pública PEM (SubjectPublicKeyInfo).

        Returns:
            bool: True si la firma es válida.

        """

        signature = Signature.from_base64(base64_signature)
        public_raw = PemBlock(pem_public_key).decode_to_raw()
        return self.plugin.verify_signature(self.hash_message(message), signature, public_raw)
