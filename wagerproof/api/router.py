from fastapi import APIRouter

from wagerproof.api.agents import router as agents_router
from wagerproof.api.consensus import router as consensus_router
from wagerproof.api.picks import router as picks_router

api_router = APIRouter()
api_router.include_router(consensus_router)
api_router.include_router(agents_router)
api_router.include_router(picks_router)
