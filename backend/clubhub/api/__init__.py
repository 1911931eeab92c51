"""FastAPI routers for the ClubHub API."""
