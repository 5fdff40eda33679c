"""FastAPI main application for the Student Success Agent."""

import asyncio
import csv
import os
import traceback
from io import StringIO
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

from student_agent.engine import evaluate
from student_agent.form import default_student_data
from student_agent.models import DashboardResponse, InvalidInput, StudentData
from student_agent.parsers import load_upload
from student_agent.projections import build_dashboard

# Load environment variables
load_dotenv()

app = FastAPI(title="Student Success Agent", version="1.0.0")

# CORS configuration
allow_origins = os.getenv('ALLOW_ORIGINS', '*').split(',')
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler_json(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions and return JSON."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler_json(request: Request, exc: RequestValidationError):
    """Handle validation errors and return JSON."""
    errors = [{k: v for k, v in err.items() if k != 'ctx'} for err in exc.errors()]
    return JSONResponse(
        status_code=422,
        content={"detail": errors}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and return JSON."""
    error_detail = str(exc)
    if os.getenv('DEBUG', 'False').lower() == 'true':
        error_detail = f"{str(exc)}\n\n{traceback.format_exc()}"

    return JSONResponse(
        status_code=500,
        content={
            "detail": f"Internal server error: {error_detail}",
            "type": type(exc).__name__
        }
    )


# Configuration
PROCESSING_DELAY_SECONDS = float(os.getenv('PROCESSING_DELAY_SECONDS', '0'))
MAX_UPLOAD_SIZE_MB = int(os.getenv('MAX_UPLOAD_SIZE_MB', '10'))
MAX_UPLOAD_SIZE = MAX_UPLOAD_SIZE_MB * 1024 * 1024


async def processing_delay(seconds: Optional[float] = None) -> None:
    """Optional "analysing..." pause before results are returned."""
    seconds = PROCESSING_DELAY_SECONDS if seconds is None else seconds
    if seconds > 0:
        await asyncio.sleep(seconds)


def run_dashboard(data: StudentData) -> DashboardResponse:
    """Build the dashboard and print a one-line summary."""
    try:
        dashboard = build_dashboard(data)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))

    evaluation = dashboard.evaluation
    print(
        f"Results: {len(data.subjects)} subjects, average {evaluation.average_marks}%, "
        f"predicted {evaluation.predicted_grade}% ({evaluation.risk_level} risk), "
        f"{len(evaluation.weak_subjects)} weak, {len(evaluation.alerts)} alerts"
    )
    return dashboard


@app.get("/health")
async def health_check():
    """Health check endpoint to test server connectivity."""
    return JSONResponse(content={"status": "ok", "message": "Server is running"})


@app.get("/defaults", response_model=StudentData)
async def get_defaults():
    """Default values shown when the form is first opened."""
    return default_student_data()


@app.post("/evaluate", response_model=DashboardResponse)
async def evaluate_endpoint(data: StudentData):
    """Evaluate submitted student data and return the dashboard."""
    await processing_delay()
    return run_dashboard(data)


@app.post("/upload", response_model=DashboardResponse)
async def upload_file(
    file: UploadFile = File(...),
    attendance: float = Form(...),
    daily_study_hours: float = Form(...)
):
    """Evaluate subjects (and deadlines) read from an uploaded spreadsheet."""
    file_bytes = await file.read()
    if len(file_bytes) > MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_UPLOAD_SIZE_MB}MB"
        )

    try:
        subjects, deadlines = load_upload(file.filename, file_bytes)
        data = StudentData.from_payload({
            'attendance': attendance,
            'subjects': subjects,
            'daily_study_hours': daily_study_hours,
            'upcoming_deadlines': deadlines,
        })
    except Exception as e:
        print(f"ERROR: Could not load {file.filename}: {e}")
        print(f"Exception type: {type(e).__name__}")
        raise HTTPException(status_code=400, detail=str(e))

    await processing_delay()
    return run_dashboard(data)


@app.post("/study-plan.csv")
async def download_study_plan(data: StudentData):
    """Download the generated study plan as CSV."""
    try:
        evaluation = evaluate(data)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(['Time', 'Activity', 'Subject', 'Priority', 'Reason'])
    for slot in evaluation.study_plan:
        writer.writerow([slot.time, slot.activity, slot.subject, slot.priority, slot.reason])

    output.seek(0)

    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=study_plan.csv"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
