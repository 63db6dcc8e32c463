# Infrastructure Layer
# ====================
# Contains all external service integrations:
# - llm/: Gemini analysis and chat adapters
# - config/: Environment and settings management
#
# This layer can be replaced entirely without affecting domain/application layers.
