"""HTTP API for the lesson library.

WHY: Front ends other than the CLI need lessons, sections, played marks
and highlight views over HTTP.

HOW: app.py builds the FastAPI application via create_app() and exposes
a module-level app built from the environment; models.py holds the
Pydantic schemas. Run with the goodear-api console script or
``uvicorn goodear.server.app:app`` (install the "server" extra).
"""
