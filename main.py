from contextlib import asynccontextmanager

import uvicorn

from core.config import PORT
from core.logger import setup_logging
from api.app import create_app
from init_db import create_tables

setup_logging()


@asynccontextmanager
async def lifespan(app):
    create_tables()
    yield


app = create_app(lifespan=lifespan)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=PORT)
