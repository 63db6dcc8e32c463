# Presentation Layer
# ==================
# FastAPI app: server-rendered dashboard, chat overlay, and a JSON API.
