import os
import dotenv
import logging

dotenv.load_dotenv()

GITHUB_REPOSITORY = os.environ.get("GITHUB_REPOSITORY", "DefinitelyTyped/DefinitelyTyped")

BASE_BRANCH = os.environ.get("BASE_BRANCH", "master")

OWNER_HEADER_MAX_BYTES = int(os.environ.get("OWNER_HEADER_MAX_BYTES", 10240))

BOT_LOGINS = [
    login.strip()
    for login in os.environ.get("BOT_LOGINS", "typescript-bot").split(",")
    if login.strip()
]

NPM_API_URL = os.environ.get("NPM_API_URL", "https://api.npmjs.org")

NPM_DOWNLOADS_TTL = float(os.environ.get("NPM_DOWNLOADS_TTL", 3600))

OVERRIDE_LOGGING = logging.getLevelName(os.environ.get("OVERRIDE_LOGGING", "WARNING"))

TELEGRAM_TOKEN = os.environ.get("TELEGRAM_TOKEN")
TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID")
