"""
FastAPI routers grouped by concern (signup, admin, pages).

Each module exposes an APIRouter included by waitlist.app.create_app.
"""
