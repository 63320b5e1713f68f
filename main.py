from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from repokit.config import settings
from repokit.database.manager import DatabaseManager
from repokit.logging.logger import LogConfig, get_logger
from repokit.exceptions.handler import BusinessException, global_exception_handler
from repokit.middleware.logging_md import LoggingMiddleware
from apps.directory.api.router import router as directory_router
import apps.models  # noqa: F401  (registers table models on SQLModel metadata)

logger = get_logger("main")

@asynccontextmanager
async def lifespan(app: FastAPI):
    manager = DatabaseManager.get_instance()
    manager.sql.connect()
    manager.sql.create_all()
    logger.info(f"{settings.APP_NAME} started ({settings.APP_ENV})")
    yield
    manager.sql.disconnect()

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Initialize logging configuration
LogConfig.setup_logging()

# Request trace ids in logs
app.add_middleware(LoggingMiddleware)

# Register global exception handlers
app.add_exception_handler(BusinessException, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# Mount routers (prefix from config)
app.include_router(
    directory_router,
    prefix=settings.API_V1_DIRECTORY_PREFIX,
    tags=["Directory"]
)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
