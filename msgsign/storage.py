# --------------------------------------------------------------
# File: storage.py
# Description: Utilidades de persistencia para los ficheros PEM del par de claves.
# --------------------------------------------------------------
"""Funciones auxiliares de entrada/salida para las claves en disco."""

from __future__ import annotations

import os

from msgsign.encoding import PemBlock
from msgsign.errors import PersistenceFailed

__all__ = [
    "PRIVATE_KEY_PERMISSION",
    "PUBLIC_KEY_PERMISSION",
    "directory_permission",
    "key_file_exists",
    "read_key_file",
    "write_key_file",
]

PUBLIC_KEY_PERMISSION = 0o444
PRIVATE_KEY_PERMISSION = 0o400


def directory_permission(file_permission: int) -> int:
    """Deriva los permisos del directorio padre a partir de los del fichero.

    Parte de 0700; si el grupo puede leer el fichero se añade 0050 y, si
    además el resto también puede, 0005.

    Args:
        file_permission (int): Modo del fichero, p. ej. 0o444.

    Returns:
        int: Modo del directorio, p. ej. 0o755.

    """

    dir_permission = 0o700
    if file_permission & 0o070:
        dir_permission |= 0o050
        if file_permission & 0o007:
            dir_permission |= 0o005
    return dir_permission


def _ensure_parent_dir(path: str, file_permission: int) -> None:
    """Crea los directorios que falten hasta el padre del archivo de destino.

    Cada directorio nuevo, no solo el último, recibe el modo derivado de
    `file_permission`; los que ya existen no se tocan.
    """

    missing = []
    parent = os.path.dirname(path)
    while parent and not os.path.exists(parent):
        missing.append(parent)
        ancestor = os.path.dirname(parent)
        if ancestor == parent:
            break
        parent = ancestor
    mode = directory_permission(file_permission)
    for directory in reversed(missing):
        if not os.path.isdir(directory):
            os.mkdir(directory, mode)


def key_file_exists(path: str) -> bool:
    """Indica si existe un fichero en la ruta indicada."""

    return os.path.exists(path)


def write_key_file(path: str, data: str, file_permission: int) -> None:
    """Escribe el PEM creando antes los directorios necesarios.

    No se usa fichero temporal ni se deshace una escritura parcial: la
    herramienta tiene un único escritor por ruta.

    Args:
        path (str): Ruta del fichero de clave.
        data (str): Contenido PEM.
        file_permission (int): Modo con el que se crea el fichero.

    Raises:
        PersistenceFailed: Si falla la creación del directorio o la escritura.

    """

    try:
        _ensure_parent_dir(path, file_permission)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, file_permission)
        try:
            handler = os.fdopen(fd, "wb")
        except OSError:
            os.close(fd)
            raise
        with handler:
            handler.write(data.encode("ascii"))
    except OSError as exc:
        raise PersistenceFailed(f"Unable to write {path}: {exc}") from exc


def read_key_file(path: str) -> PemBlock:
    """Lee el contenido PEM completo de un fichero de clave.

    Raises:
        PersistenceFailed: Si el fichero no se puede leer.

    """

    try:
        with open(path, "rb") as handler:
            content = handler.read()
    except OSError as exc:
        raise PersistenceFailed(f"Unable to read {path}: {exc}") from exc
    return PemBlock(content.decode("utf-8", errors="replace"))
