"""
Utility functions and helpers
"""

import uuid


def generate_document_id() -> str:
    """Generate an opaque identifier for a new document"""
    return uuid.uuid4().hex
