import uvicorn
from src.printcost.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "src.printcost.main:app",
        host="localhost",
        port=settings.SERVER_PORT,
        reload=True,
        log_level="info",
    )
