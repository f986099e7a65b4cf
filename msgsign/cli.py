# --------------------------------------------------------------
# File: cli.py
# Description: Punto de entrada de línea de comandos para firmar y verificar mensajes.
# --------------------------------------------------------------
"""Lee un mensaje corto de stdin, lo firma y emite firma y clave pública en JSON."""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from msgsign import config
from msgsign.crypto_sign import RandomSource
from msgsign.errors import CryptoToolingError, MessageError, SignatureVerificationFailed
from msgsign.keys import CryptoTooling
from msgsign.log import get_logger
from msgsign.message import ContentFormat, message_text, read_message
from msgsign.models import (
    MIN_RSA_KEY_BITS,
    Algorithm,
    KeySettings,
    SignedMessage,
    VerifiedMessage,
)
from msgsign.storage import read_key_file

EXIT_OK = 0
EXIT_BAD_OPTIONS = 1
EXIT_BAD_INPUT = 2
EXIT_CRYPTO_FAILURE = 3
EXIT_INVALID_SIGNATURE = 4

logger = get_logger()


def build_parser() -> argparse.ArgumentParser:
    """Define las opciones de algoritmo, formato, rutas y verificación.

    Returns:
        argparse.ArgumentParser: Parser con grupos mutuamente excluyentes.

    """

    p = argparse.ArgumentParser(
        prog="msgsign",
        description="Sign a short message read from stdin, creating a key pair if necessary",
    )
    algorithm = p.add_argument_group("Algorithm options").add_mutually_exclusive_group()
    algorithm.add_argument(
        "--ecdsa", dest="algorithm", action="store_const", const=Algorithm.ECDSA,
        help="sign the message with an ECDSA P-256 key pair",
    )
    algorithm.add_argument(
        "--rsa", dest="algorithm", action="store_const", const=Algorithm.RSA,
        help="sign the message with an RSA-PSS key pair",
    )
    p.add_argument("--bits", type=int, default=None, help="bit length of the RSA key")

    fmt = p.add_argument_group("Input format options").add_mutually_exclusive_group()
    for content_format in ContentFormat:
        fmt.add_argument(
            f"--{content_format.value}", dest="content_format", action="store_const",
            const=content_format, help=f"the message is {content_format.name} content",
        )

    p.add_argument("--private", default="", help="filepath of the private key file")
    p.add_argument("--public", default="", help="filepath of the public key file")
    p.add_argument(
        "--verify", metavar="SIGNATURE", default=None,
        help="verify a base64 signature of the message against the public key file",
    )
    p.set_defaults(content_format=ContentFormat.UTF8)
    return p


def settings_from_args(args: argparse.Namespace) -> KeySettings:
    """Construye los ajustes del par de claves a partir de los argumentos.

    Raises:
        ValueError: Si la combinación de opciones no es válida.

    """

    algorithm = args.algorithm or Algorithm(config.DEFAULT_ALGORITHM)
    rsa_bits = config.DEFAULT_RSA_BITS
    if args.bits is not None:
        if algorithm is not Algorithm.RSA:
            raise ValueError("Option --bits is only valid for RSA")
        if args.bits < MIN_RSA_KEY_BITS:
            raise ValueError(
                f"Option --bits less than {MIN_RSA_KEY_BITS} not allowed. Saw --bits={args.bits}"
            )
        rsa_bits = args.bits
    return KeySettings(
        algorithm=algorithm,
        rsa_key_bits=rsa_bits,
        private_key_path=args.private
        or config.PRIVATE_KEY_TEMPLATE.replace("{algorithm}", algorithm.value),
        public_key_path=args.public
        or config.PUBLIC_KEY_TEMPLATE.replace("{algorithm}", algorithm.value),
    )


def main(argv: Optional[List[str]] = None, random_source: RandomSource = os.urandom) -> int:
    """Firma (o verifica con --verify) el mensaje leído de stdin.

    Args:
        argv (Optional[List[str]]): Argumentos; por defecto los del proceso.
        random_source (RandomSource): Entropía para generar claves y firmar.

    Returns:
        int: Código de salida (EXIT_OK, EXIT_BAD_OPTIONS, EXIT_BAD_INPUT,
        EXIT_CRYPTO_FAILURE o EXIT_INVALID_SIGNATURE).

    """

    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return EXIT_OK if not exc.code else EXIT_BAD_OPTIONS

    try:
        settings = settings_from_args(args)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_BAD_OPTIONS

    try:
        message = read_message(sys.stdin.buffer.read(), args.content_format)
    except MessageError as exc:
        print(str(exc), file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_BAD_INPUT

    tooling = CryptoTooling(settings, random_source)
    if args.verify is not None:
        return _verify(tooling, message, args.verify, settings.public_key_path)

    try:
        tooling.load_or_create_keys()
        signature = tooling.sign_message(message)
    except CryptoToolingError as exc:
        logger.error("%s", exc)
        return EXIT_CRYPTO_FAILURE

    response = SignedMessage(
        message=message_text(message),
        signature=signature,
        pubkey=str(tooling.public_key),
    )
    print(response.model_dump_json(indent=4))
    return EXIT_OK


def _verify(tooling: CryptoTooling, message: bytes, signature: str, public_path: str) -> int:
    """Verifica la firma contra el fichero de clave pública e imprime el resultado.

    Returns:
        int: EXIT_OK si es válida, EXIT_INVALID_SIGNATURE si no, o
        EXIT_CRYPTO_FAILURE si la clave o la firma no se pueden leer.

    """

    try:
        valid = tooling.verify_signed_message(message, signature, read_key_file(public_path))
    except SignatureVerificationFailed as exc:
        logger.info("%s", exc)
        valid = False
    except CryptoToolingError as exc:
        logger.error("%s", exc)
        return EXIT_CRYPTO_FAILURE
    print(VerifiedMessage(message=message_text(message), valid=valid).model_dump_json(indent=4))
    return EXIT_OK if valid else EXIT_INVALID_SIGNATURE


def run() -> None:
    """Punto de entrada del script `msgsign`."""

    sys.exit(main())


if __name__ == "__main__":
    raise SystemExit(main())
