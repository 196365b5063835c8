from fastapi import APIRouter

from api.routes import analysis, assessments, diary, export

api_router = APIRouter()

api_router.include_router(analysis.router, tags=["analysis"])
api_router.include_router(diary.router, tags=["diary"])
api_router.include_router(assessments.router, tags=["assessments"])
api_router.include_router(export.router, tags=["export"])
