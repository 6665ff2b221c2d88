"""Sabari Sastha Seva Samithi portal frontend.

Streamlit frontend with:
- Frozen dataclass configuration
- Backend API client with retry logic
- Streamed chat client and voice conversation loop
- Session state management
- Admin tables, charts and downloads
- Page-based routing
"""

__version__ = "1.4.0"
