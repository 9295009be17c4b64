"""Models, settings, errors and storage backends used by the API."""
