"""
Image Proxy Module

Provides a passthrough endpoint for loading external images in the browser.
Bypasses CORS restrictions by fetching images through the backend server.

Features:
- Upstream bytes and content-type returned unmodified
- Upstream error statuses forwarded, network failures answered with 502
- One-day browser cache directive
"""

from .routes_fastapi import router

__all__ = ["router"]
