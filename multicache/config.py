# multicache/config.py
import os

from dotenv import find_dotenv, load_dotenv

# A .env in the working directory (or a parent) fills in variables not already set.
load_dotenv(find_dotenv(usecwd=True), override=False)

# Prefix for every key built by services.keys.prepare_key.
APP_NAME = os.getenv("APP_NAME", "")

# Connection descriptors:
#   REDIS_CONNECTION_0=localhost,6379,15,360,default   # default connection, 6 minutes TTL
#   REDIS_CONNECTION_1=localhost,6379,5,0,sessions     # 0 = no expiration
# Scanning starts at 0 and stops at the first missing index.
REDIS_CONNECTION_PREFIX = os.getenv("REDIS_CONNECTION_PREFIX", "REDIS_CONNECTION_")
MAX_REDIS_CONNECTIONS = 30

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
