"""
Web application package for expanding-board chess.

Provides a FastAPI-based REST API and a drag-and-drop frontend for playing
against the random-move AI in a browser.

Run with: uvicorn web.app:app
"""
