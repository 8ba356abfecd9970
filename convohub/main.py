from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from convohub.core.config import get_settings
from convohub.core.exceptions import InvalidArgument, NotFound, StoreUnavailable
from convohub.core.logging import setup_logging
from convohub.database.connection import close_mongo_connection, connect_to_mongo, get_database
from convohub.repositories.conversation_repository import ConversationRepository
from convohub.routers.conversations import router as conversations_router


@asynccontextmanager
async def lifespan(app: FastAPI):

    setup_logging(get_settings())
    await connect_to_mongo()
    await ConversationRepository(get_database()).ensure_indexes()
    try:
        yield
    finally:
        await close_mongo_connection()


async def invalid_argument_handler(request: Request, exc: InvalidArgument) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": exc.message})


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.message})


async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    logger.error("{} {} failed: {}", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidArgument, invalid_argument_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(StoreUnavailable, store_unavailable_handler)


def create_app() -> FastAPI:
    app = FastAPI(title="Conversation service", lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(conversations_router)

    @app.get("/")
    async def root():

        db = get_database()
        collections = await db.list_collection_names()
        return {"message": "Connected to MongoDB!", "collections": collections}

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run("convohub.main:app", host=settings.APP_HOST, port=settings.APP_PORT)


if __name__ == "__main__":
    run()
