"""
API module - FastAPI routes and HTTP handling.

This module handles:
- Request validation and parsing
- Response formatting
- Error handling
- Route definitions

The application object lives in echora.api.main; importing this
package does not build it.
"""
