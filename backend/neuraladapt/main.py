import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from neuraladapt import config
from neuraladapt.database import init_db
from neuraladapt.api import dashboard, feature_selections, wizard, workout_plan
from neuraladapt.services.intake_wizard import WizardRegistry
from neuraladapt.services.usage_budget import UsageBudget

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tables only; there are no migrations
    init_db()
    logger.info(f"LLM provider: {config.LLM_PROVIDER}, daily budget: {config.OPENAI_MAX_DAILY_CENTS} cents")
    yield


app = FastAPI(title="NeuralAdapt", lifespan=lifespan)

# Process-wide state, injected into routes through api.deps
app.state.usage_budget = UsageBudget(limit_cents=config.OPENAI_MAX_DAILY_CENTS)
app.state.wizards = WizardRegistry()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(dashboard.router)
app.include_router(feature_selections.router)
app.include_router(workout_plan.router)
app.include_router(wizard.router)

# Root endpoint
@app.get("/")
def root():
    return {
        "message": "Welcome to NeuralAdapt API",
        "docs": "/docs",
        "redoc": "/redoc"
    }

# Health check endpoint
@app.get("/health")
def health_check():
    return {"status": "healthy", "message": "API is running"}
