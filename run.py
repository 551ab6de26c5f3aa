#!/usr/bin/env python3
"""
Run script for the Account Service API.
This script launches the FastAPI server with the auth and users routers mounted.
"""
import sys
import traceback

import uvicorn

from account_service.config import get_settings

if __name__ == "__main__":
    try:
        settings = get_settings()

        print("Starting Account Service API server...")
        print(f"Environment: {settings.environment}")
        print(f"Access the API at http://localhost:{settings.port}")
        print(f"API documentation at http://localhost:{settings.port}/docs")

        uvicorn.run(
            "account_service.main:app",
            host="0.0.0.0",
            port=settings.port,
            reload=settings.environment == "development",
            log_level=settings.log_level.lower()
        )
    except Exception as e:
        print(f"Error starting server: {e}")
        traceback.print_exc()
        sys.exit(1)
