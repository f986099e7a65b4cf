import os
from dotenv import load_dotenv
load_dotenv()

KEY_DIR = os.path.expanduser(os.getenv("MSGSIGN_KEY_DIR", os.path.join("~", ".msgsign")))
DEFAULT_ALGORITHM = os.getenv("MSGSIGN_ALGORITHM", "ecdsa").lower()
DEFAULT_RSA_BITS = int(os.getenv("MSGSIGN_RSA_BITS", "2048"))
LOG_LEVEL = os.getenv("MSGSIGN_LOG_LEVEL", "WARNING").upper()

# Solo se sustituye en las rutas por defecto, nunca en las del usuario.
PRIVATE_KEY_TEMPLATE = os.path.join(KEY_DIR, "id_{algorithm}.priv")
PUBLIC_KEY_TEMPLATE = os.path.join(KEY_DIR, "id_{algorithm}.pub")
