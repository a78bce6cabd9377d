"""Test fixture package for the Sunnah Assistant backend.

Contains fixtures for:
- The FastAPI application and its async client
- Rate limit stores and a controllable clock
"""
