from fastapi import APIRouter

from app.api.v1.routes import users, categories, transactions, dashboard, chatbot, goals, debts

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users")
api_router.include_router(categories.router)
api_router.include_router(transactions.router)
api_router.include_router(goals.router)
api_router.include_router(debts.router)
api_router.include_router(dashboard.router)
api_router.include_router(chatbot.router)
