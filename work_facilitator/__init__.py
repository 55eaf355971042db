"""
Work Facilitator

Git workflow assistant: ticket-driven branch/commit conventions and
AI-drafted commit messages from staged changes.
"""

__version__ = "1.0.0"

# Locations accepted by Vertex AI for generateContent
# Used by: ai/vertexai.py (validation), config (defaults)
VERTEX_LOCATIONS = (
    'us-central1',
    'us-east4',
    'europe-west1',
    'asia-southeast1',
    'global',
)
