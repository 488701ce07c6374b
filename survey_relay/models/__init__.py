"""Pydantic, ORM and result models shared by routes and logic."""
