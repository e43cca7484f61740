import os
import uvicorn

from datajeopardy.config import settings

if __name__ == "__main__":
    # Print startup configuration summary
    settings.print_startup_summary()

    port = settings.PORT
    host = settings.API_HOST

    print(f"\n>> Server starting at http://{'localhost' if host == '0.0.0.0' else host}:{port}")
    print(f">> API Documentation: http://localhost:{port}/docs")
    print(f">> Auto-lock threshold: RiskScore >= {settings.AUTO_LOCK_RISK_THRESHOLD}\n")

    # Disable reload in production (when PORT is provided by environment)
    is_prod = os.environ.get("PORT") is not None
    uvicorn.run("datajeopardy.main:app", host=host, port=port, reload=not is_prod)
