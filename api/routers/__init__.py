"""
API Routers - Organized endpoint handlers for the Hobbygraph API.

Each router handles a specific domain:
- persons: People, friendships and interests
- graph: Read-only graph view
"""
