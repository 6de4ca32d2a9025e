# reportcards/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reportcards.core.config import CONFIG
from reportcards.routes.marks_routes import router as marks_router
from reportcards.routes.report_card_routes import router as report_card_router
from reportcards.routes.term_routes import router as term_router

app = FastAPI(
    title="School Report Cards",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CONFIG.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root_index():
    return {"message": "Report card service is running", "docs": "/docs"}


app.include_router(marks_router)
app.include_router(report_card_router)
app.include_router(term_router)
