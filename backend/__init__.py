"""FastAPI Backend for Storyboard Studio

This backend exposes projects, videos, frames, context notes, main chats,
image galleries and characters through a RESTful API, with image
generation delegated to the configured providers.
"""

__version__ = "1.0.0"
