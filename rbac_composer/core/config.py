import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Root log level for configure_logging()
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()

# Prefixes for ids assigned by the in-memory repository
PERMISSION_ID_PREFIX: str = os.environ.get("PERMISSION_ID_PREFIX", "perm_")
ROLE_ID_PREFIX: str = os.environ.get("ROLE_ID_PREFIX", "role_")

# Actor recorded on audit entries when a service call names none
DEFAULT_ACTOR: str = os.environ.get("DEFAULT_ACTOR", "system")

# If true, scripts seed the repository with the default catalog
SEED_DEFAULTS: bool = os.environ.get("SEED_DEFAULTS", "1") == "1"
