"""Global configuration for the reminder bot."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Discord
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")

# Supabase (optional remote reminder store)
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Single process timezone used for parsing and due-window matching
TIMEZONE = os.getenv("TIMEZONE", "America/Sao_Paulo")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DATA_DIR = Path(os.getenv("LOCALAPPDATA", ".")) / "reminder-bot"
LOG_DIR = DATA_DIR / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)
