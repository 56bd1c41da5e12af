"""FastAPI surface exposing the asset resolver to host applications."""
