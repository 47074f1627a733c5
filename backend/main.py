from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from models import HealthResponse, GenerateRequest, GenerateResponse, GenerateErrorResponse
from execution import execute_code, ExecutionError, ExecuteRequest, ExecuteResponse, ErrorResponse
from execution import config as execution_config
from codegen import generate_code, GenerationError
import logging
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

"""
FastAPI server for the code runner
Executes submitted code in per-request workspaces and suggests code with Claude
"""

VERSION = "0.1.0"

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Code Runner",
    description="Runs JavaScript, Python and C code in isolated workspaces",
    version=VERSION
)

# CORS middleware to allow requests from frontend
cors_origins = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Incoming request: {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"Completed {request.method} {request.url.path} with {response.status_code}")
    return response


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint
    Returns the service status and the active execution backend
    """
    return HealthResponse(status="ok", version=VERSION, backend=execution_config.BACKEND)


@app.post(
    "/compile",
    response_model=ExecuteResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 504: {"model": ErrorResponse}}
)
def compile_code(request: ExecuteRequest):
    """
    Execute code and return its output

    Declared sync so FastAPI runs it in the threadpool; each request
    blocks only its own worker thread while the child process runs.

    Example:
        POST /compile
        {"language": "python", "code": "print(input())", "input": "hi"}

        Response:
        {"status": "success", "output": "hi\\n", "stderr": "", ...}
    """
    try:
        result = execute_code(request)
    except ExecutionError as e:
        error = ErrorResponse(status=e.status, errorType=e.error_type, output=e.output)
        return JSONResponse(status_code=e.status_code, content=error.model_dump())

    return ExecuteResponse.from_result(result)


@app.post(
    "/generate-code",
    response_model=GenerateResponse,
    responses={500: {"model": GenerateErrorResponse}}
)
def generate_code_endpoint(request: GenerateRequest):
    """
    Generate code for a task description using Claude AI

    Returns:
        JSON with the first fenced code block of the reply
    """
    try:
        code = generate_code(request.query, request.language)
    except GenerationError as e:
        logger.error(f"Error generating code: {e}")
        error = GenerateErrorResponse(output=f"Error generating code: {e}")
        return JSONResponse(status_code=500, content=error.model_dump())

    return GenerateResponse(code=code)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "5000"))
    uvicorn.run(app, host="0.0.0.0", port=port)
