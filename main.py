from dotenv import load_dotenv

load_dotenv(".env")

from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.errors import register_error_handlers
from database.database import Base, engine
from models import report, user  # noqa: F401  register tables on Base
from routes import admin, alerts, auth, reports
from utils.state import State

state = State()
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    state.logger.info("Starting up...")
    yield
    state.logger.info("Shutting down...")


app = FastAPI(
    title="Terra Guard API",
    description="Disaster reports, user accounts and SMS flood alerts",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=False,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

logfire.instrument_fastapi(app, capture_headers=True)
logfire.instrument_sqlalchemy(engine)
logfire.instrument_httpx()

app.include_router(auth.router)
app.include_router(alerts.router, prefix="/alerts")
app.include_router(reports.router, prefix="/reports")
app.include_router(admin.router, prefix="/admin")


@app.get("/")
async def root():
    return {"message": "WELCOME TO TERRA GUARD API"}
