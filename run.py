import uvicorn
import os

if __name__ == "__main__":
    # Disable reload in production
    reload = os.getenv("ENVIRONMENT") != "production"

    # Single worker: live chat sessions are held in process memory
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=reload,
        workers=1,
        timeout_graceful_shutdown=30
    )
