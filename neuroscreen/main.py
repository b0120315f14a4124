from fastapi import FastAPI

from neuroscreen.config import load_config
from neuroscreen.routes.health_route import router as health_router
from neuroscreen.routes.session_route import router as session_router, SessionRegistry

app = FastAPI(
    title="NeuroScreen",
    version="1.0.0"
)

# In-memory only; sessions vanish with the process
app.state.config = load_config()
app.state.sessions = SessionRegistry(app.state.config)

app.include_router(health_router, tags=["health"])
app.include_router(session_router, tags=["sessions"])
