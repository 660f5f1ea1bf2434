import logging

import uvicorn
from fastapi import FastAPI

from testflow.config import settings
from testflow.routers import assertions, imports, suites

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="TestFlow Importers API", version="0.1.0")

app.include_router(imports.router)
app.include_router(assertions.router)
app.include_router(suites.router)


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "env": settings.app_env,
    }


def run():
    """Entry point for the ``testflow-api`` console script."""
    uvicorn.run(
        "testflow.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
