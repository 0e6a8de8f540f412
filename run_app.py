import os
import sys

import uvicorn

# allow running from a checkout without installing the package
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

from app.core.config import EnvironmentOption, settings  # noqa: E402

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8000)),
        reload=settings.ENVIRONMENT == EnvironmentOption.LOCAL,
        log_level=settings.LOG_LEVEL.lower(),
    )
