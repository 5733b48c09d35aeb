from fastapi import APIRouter
from app.api.v1 import projects, editor, analysis

router = APIRouter()

router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(editor.router, prefix="/projects", tags=["editor"])
router.include_router(analysis.router, prefix="/analysis", tags=["analysis"])
