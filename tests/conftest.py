# --------------------------------------------------------------
# File: conftest.py
# Description: Fixtures compartidas para aislar el directorio de claves y la entropía.
# --------------------------------------------------------------

import importlib
import random
from typing import Callable, Iterator

import pytest

from msgsign.models import Algorithm, KeySettings

# Módulo RSA mínimo para que la generación en pruebas sea rápida.
TEST_RSA_BITS = 1024


@pytest.fixture(autouse=True)
def _isolate_key_dir(tmp_path, monkeypatch) -> Iterator[None]:
    """Aísla MSGSIGN_KEY_DIR y recarga msgsign.config para cada prueba.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar variables de entorno.

    Returns:
        Iterator[None]: Control del fixture autouse durante la ejecución de cada test.
    """
    key_dir = tmp_path / "_keys"
    monkeypatch.setenv("MSGSIGN_KEY_DIR", str(key_dir))
    monkeypatch.delenv("MSGSIGN_ALGORITHM", raising=False)
    monkeypatch.delenv("MSGSIGN_RSA_BITS", raising=False)

    import msgsign.config as config_module

    importlib.reload(config_module)

    yield


@pytest.fixture
def seeded_source() -> Callable[[int], Callable[[int], bytes]]:
    """Fábrica de fuentes de entropía deterministas a partir de una semilla."""

    def _make(seed: int) -> Callable[[int], bytes]:
        return random.Random(seed).randbytes

    return _make


@pytest.fixture
def failing_source() -> Callable[[int], bytes]:
    """Fuente de entropía que falla en cada lectura."""

    def _read(n: int) -> bytes:
        raise OSError("Fake I/O Error")

    return _read


def make_settings(tmp_path, algorithm: Algorithm, name: str = "id") -> KeySettings:
    """Ajustes con rutas dentro de `tmp_path` para el algoritmo indicado."""

    return KeySettings(
        algorithm=algorithm,
        rsa_key_bits=TEST_RSA_BITS,
        private_key_path=str(tmp_path / "keys" / f"{name}_{algorithm.value}.priv"),
        public_key_path=str(tmp_path / "keys" / f"{name}_{algorithm.value}.pub"),
    )
