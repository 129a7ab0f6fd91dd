"""
API Package - HTTP surface of the allocation service.

Run with: uvicorn datameq.api.main:app --reload
"""
