# Sentient - Customer Review Dashboard
# ====================================
# A browser dashboard over a hosted LLM, using Layered Architecture:
#
# ARCHITECTURE LAYERS:
# - Presentation:   FastAPI web UI and JSON API (web/)
# - Application:    Dashboard and chat state owners (application/)
# - Domain:         Analysis and chat value types (domain/)
# - Infrastructure: Gemini adapters and settings (infrastructure/)
#
# All sentiment scoring and summarization happens in the remote model;
# this package only shapes prompts, validates replies, and renders them.

__version__ = "0.1.0"
