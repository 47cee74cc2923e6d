"""Run the API server: python -m storefront"""

import uvicorn

from storefront.core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "storefront.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
