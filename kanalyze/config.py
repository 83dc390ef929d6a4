"""
Runtime Configuration

Environment-driven settings for the Gemini client and the web server,
plus the fixed constants shared by the upload zone and result screens.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", "0.2"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

SESSION_COOKIE = "kanalyze_session"
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "1000"))
SESSION_TTL_SECONDS = float(os.getenv("SESSION_TTL_SECONDS", "3600"))


def get_api_key():
    """Return the Gemini API key, or None when it is not configured."""
    return os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or None


# Advisory only - nothing is rejected server-side
ACCEPT_FILTER = "image/*"
UPLOAD_FORMAT_LABELS = ["JPG", "PNG", "WEBP"]
UPLOAD_SIZE_HINT = "Max 500MB"

# Heatmap regions arrive on a virtual square grid of this size
HEATMAP_GRID = 1000

GENERIC_ERROR_MESSAGE = "Analysis failed. Please try again or check your API key."
LOADER_TEXT = "Analyzing pixel patterns..."

FEATURE_TAGS = [
    "Generative Adversarial Networks",
    "Diffusion Models",
    "Deepfakes",
    "Metadata Forensics",
]

FAQ_ENTRIES = [
    {
        "q": "How accurate is the detection?",
        "a": "Our system achieves 85-95% accuracy depending on image complexity. "
             "Detection is probabilistic, using multiple neural networks to analyze pixel patterns."
    },
    {
        "q": "Do you store my images?",
        "a": "No. Images are processed in real-time in secure temporary memory and are "
             "discarded when your session ends. Privacy is our priority."
    },
    {
        "q": "Can it detect all AI models?",
        "a": "We detect popular models like Midjourney, DALL-E, and Stable Diffusion. However, "
             "as new models emerge daily, results for cutting-edge generators may vary."
    },
    {
        "q": "How long does analysis take?",
        "a": "Typically under 3 seconds, even for large high-resolution files. "
             "Our optimized pipeline processes visual artifacts rapidly."
    },
]
