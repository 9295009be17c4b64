"""Task store service: FastAPI app, models and storage backends."""
