"""Application package for the quiz management backend.

This package exposes the validation, service, repository and model
modules used by the FastAPI application. It is intentionally lightweight;
individual modules contain the concrete implementations and documentation.
"""
