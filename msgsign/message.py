# --------------------------------------------------------------
# File: message.py
# Description: Lectura y validación del mensaje corto que se va a firmar.
# --------------------------------------------------------------
"""Reglas de formato del mensaje de entrada."""

from __future__ import annotations

import json
from enum import Enum

from msgsign.errors import InvalidMessageEncoding, MessageTooLong

__all__ = ["MAX_MESSAGE_BYTES", "ContentFormat", "message_text", "read_message"]

MAX_MESSAGE_BYTES = 250


class ContentFormat(Enum):
    """Codificación declarada del mensaje."""

    UTF8 = "utf8"
    ASCII = "ascii"
    BINARY = "binary"


def message_text(message: bytes) -> str:
    """Texto del mensaje para la respuesta JSON; los bytes no UTF-8 se escapan."""

    return message.decode("utf-8", errors="backslashreplace")


def read_message(raw: bytes, content_format: ContentFormat = ContentFormat.UTF8) -> bytes:
    """Normaliza y valida el mensaje leído de la entrada estándar.

    En modo texto (UTF-8 o ASCII) se eliminan los espacios finales; en
    modo binario el contenido se firma tal cual.

    Args:
        raw (bytes): Contenido leído.
        content_format (ContentFormat): Formato declarado.

    Returns:
        bytes: Mensaje que se firmará.

    Raises:
        MessageTooLong: Si supera `MAX_MESSAGE_BYTES`.
        InvalidMessageEncoding: Si no respeta el formato declarado.

    """

    message = raw if content_format is ContentFormat.BINARY else raw.rstrip()
    if len(message) > MAX_MESSAGE_BYTES:
        raise MessageTooLong(
            f"Input contains more than {MAX_MESSAGE_BYTES} bytes "
            f"(exactly {len(message)}):\n{json.dumps(message_text(message))}"
        )
    if content_format is ContentFormat.ASCII and any(byte >= 0x80 for byte in message):
        raise InvalidMessageEncoding("Input contains non-ASCII bytes")
    if content_format is ContentFormat.UTF8:
        try:
            message.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidMessageEncoding(f"Input is not valid UTF-8: {exc}") from exc
    return message
