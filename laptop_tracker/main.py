from prometheus_fastapi_instrumentator import Instrumentator

from laptop_tracker.core.logging import configure_logging
from laptop_tracker.core.config import settings
from . import app as base_app

configure_logging()
app = base_app
app.title = settings.APP_NAME
Instrumentator().instrument(app).expose(app, include_in_schema=False)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


def run() -> None:
    import uvicorn

    uvicorn.run("laptop_tracker.main:app", host=settings.HOST, port=settings.PORT)
