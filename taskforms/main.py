import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskforms.api.root import router as root_router
from taskforms.api.me import router as me_router
from taskforms.api.forms import router as forms_router
from taskforms.api.submissions import router as submissions_router
from taskforms.api.tasks import router as tasks_router
from taskforms.api.masters import router as masters_router
from taskforms.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(root_router)
app.include_router(me_router)
app.include_router(forms_router)
app.include_router(submissions_router)
app.include_router(tasks_router)
app.include_router(masters_router)
