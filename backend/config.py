"""Configuration for the problem harvesting backend."""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths
BASE_DIR = Path(__file__).parent
DATA_PATH = Path(os.getenv("DATA_PATH", BASE_DIR / "data" / "problems.json"))

# Ollama
OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434/api/generate")
MODEL_FLASH = os.getenv("MODEL_FLASH", "qwen3:8b")
MODEL_PRO = os.getenv("MODEL_PRO", "qwen3:30b")  # High reasoning
OLLAMA_API_KEY = os.getenv("OLLAMA_API_KEY")
OLLAMA_WEB_SEARCH_URL = os.getenv("OLLAMA_WEB_SEARCH_URL", "https://ollama.com/api/web_search")
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "120"))

# Relay proxies
PRIMARY_PROXY_URL = os.getenv("PRIMARY_PROXY_URL", "https://corsproxy.io/?")
BACKUP_PROXY_URL = os.getenv("BACKUP_PROXY_URL", "https://api.allorigins.win/get?url=")
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT", "20"))

# AoPS wiki
AOPS_BASE_URL = os.getenv("AOPS_BASE_URL", "https://artofproblemsolving.com")
AOPS_PROBLEM_URL = AOPS_BASE_URL + "/wiki/index.php?title={year}_{exam}_Problems/Problem_{number}"

# Catalog range
AMC8_START_YEAR = 1985
AMC10_12_START_YEAR = 2000
AJHSME_LAST_YEAR = 1998
CURRENT_YEAR = int(os.getenv("CURRENT_YEAR", "2025"))
PROBLEMS_PER_EXAM = 25

# Harvesting
HARVEST_DELAY = float(os.getenv("HARVEST_DELAY", "0.8"))

# Exam time limits in seconds
EXAM_TIME_LIMITS = {
    "AMC 8": 40 * 60,
    "AMC 10": 75 * 60,
    "AMC 12": 75 * 60,
}
