# --------------------------------------------------------------
# File: test_message.py
# Description: Pruebas de las reglas de formato del mensaje de entrada.
# --------------------------------------------------------------

import pytest

from msgsign.errors import InvalidMessageEncoding, MessageTooLong
from msgsign.message import MAX_MESSAGE_BYTES, ContentFormat, message_text, read_message


@pytest.mark.parametrize("fmt", [ContentFormat.UTF8, ContentFormat.ASCII])
def test_text_formats_strip_trailing_whitespace(fmt):
    """En modo texto se eliminan espacios, tabuladores y saltos finales.

    Args:
        fmt (ContentFormat): Formato parametrizado.

    Returns:
        None: Se compara el mensaje normalizado.
    """
    assert read_message(b"  Do Re Mi   \t\t\n\n \n", fmt) == b"  Do Re Mi"


def test_binary_keeps_content_verbatim():
    """En modo binario el contenido se firma sin cambios.

    Returns:
        None: Se compara con la entrada.
    """
    raw = b"\x00\xffabc\n"
    assert read_message(raw, ContentFormat.BINARY) == raw


def test_exactly_max_length_is_accepted():
    """Un mensaje de exactamente 250 bytes, más espacios finales, es válido.

    Returns:
        None: Se comprueba la longitud resultante.
    """
    message = read_message(b"a" * MAX_MESSAGE_BYTES + b"   \t\n", ContentFormat.ASCII)
    assert len(message) == MAX_MESSAGE_BYTES


def test_binary_trailing_newline_counts():
    """En binario el salto final cuenta y supera el máximo.

    Returns:
        None: Se comprueba el texto exacto del error.
    """
    with pytest.raises(MessageTooLong) as excinfo:
        read_message(b"a" * MAX_MESSAGE_BYTES + b"\n", ContentFormat.BINARY)
    assert str(excinfo.value) == (
        "Input contains more than 250 bytes (exactly 251):\n"
        + '"'
        + "a" * MAX_MESSAGE_BYTES
        + '\\n"'
    )


def test_ascii_rejects_high_bytes():
    """Bytes no ASCII se rechazan en modo ASCII.

    Returns:
        None: Se espera InvalidMessageEncoding.
    """
    with pytest.raises(InvalidMessageEncoding):
        read_message("año".encode("utf-8"), ContentFormat.ASCII)


def test_utf8_accepts_multibyte_and_rejects_invalid():
    """UTF-8 válido pasa; secuencias inválidas se rechazan.

    Returns:
        None: Se revisan ambos casos.
    """
    assert read_message("año".encode("utf-8")) == "año".encode("utf-8")
    with pytest.raises(InvalidMessageEncoding):
        read_message(b"\xff\xfe", ContentFormat.UTF8)


def test_message_text_escapes_binary():
    """Los bytes no UTF-8 se escapan para la respuesta JSON.

    Returns:
        None: Se compara el texto resultante.
    """
    assert message_text(b"ok\xff") == "ok\\xff"
