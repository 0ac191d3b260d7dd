# stockroom_api/main.py
import logging
import os
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core import ProductIn, ProductPatchIn
from .models import ErrorBody, HealthOut, ProductEnvelope, ProductList
from .logic import (
    health_logic, list_products_logic, get_product_logic, create_product_logic,
    update_product_logic, delete_product_logic, reset_all_logic,
)

logger = logging.getLogger(__name__)

PORT = int(os.getenv("PORT", 4000))
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")

app = FastAPI(title="stockroom-api (in-memory)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------
# Error envelope
# ---------------------------
_CODES = {404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED", 422: "VALIDATION_ERROR"}

def _error(status: int, code: str, message: str, details: Any = None) -> JSONResponse:
    body = ErrorBody(code=code, message=message, details=details)
    return JSONResponse(status_code=status, content={"error": body.model_dump()})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = _CODES.get(exc.status_code, "INTERNAL_ERROR" if exc.status_code >= 500 else "BAD_REQUEST")
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "Route not found"
    return _error(exc.status_code, code, message)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]
    return _error(422, "VALIDATION_ERROR", "Invalid request body", details)

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "INTERNAL_ERROR", "Something went wrong")

# ---------------------------
# Health
# ---------------------------
@app.get("/api/health", response_model=HealthOut)
async def health():
    return await health_logic()

# ---------------------------
# Product endpoints
# ---------------------------
@app.get("/api/products", response_model=ProductList, response_model_exclude_none=True)
async def list_products():
    return {"products": await list_products_logic()}

@app.get("/api/products/{product_id}", response_model=ProductEnvelope, response_model_exclude_none=True)
async def get_product(product_id: str):
    return {"product": await get_product_logic(product_id)}

@app.post("/api/products", status_code=201, response_model=ProductEnvelope, response_model_exclude_none=True)
async def create_product(payload: ProductIn):
    return {"product": await create_product_logic(payload)}

@app.patch("/api/products/{product_id}", response_model=ProductEnvelope, response_model_exclude_none=True)
async def update_product(product_id: str, patch: ProductPatchIn):
    return {"product": await update_product_logic(product_id, patch)}

@app.delete("/api/products/{product_id}", status_code=204)
async def delete_product(product_id: str):
    await delete_product_logic(product_id)
    return Response(status_code=204)

# ---------------------------
# Utility: reset (for tests/demo)
# ---------------------------
@app.post("/api/reset")
async def reset_all():
    return await reset_all_logic()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
