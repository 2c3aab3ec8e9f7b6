"""
Web application package for the draughts engine.

Provides a FastAPI-based REST API that a browser board (or any other UI) can
call to get the engine's move for a position.
"""
