# --------------------------------------------------------------
# File: __init__.py
# Description: Exposición pública de utilidades de firma del paquete msgsign.
# --------------------------------------------------------------
"""Inicializa el paquete `msgsign` y documenta sus módulos principales."""

__all__ = [
    "cli",
    "config",
    "crypto_sign",
    "encoding",
    "errors",
    "keys",
    "log",
    "message",
    "models",
    "storage",
]
