"""
FastAPI routers grouped by entity (songs, venues, setlists, shows, stage plots).

Routers only validate payloads and map results to HTTP; every read and write
goes through the Repository facade stored on ``app.state.repository``.
"""
