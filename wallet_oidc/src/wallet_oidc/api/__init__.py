"""HTTP API layer (FastAPI)"""
