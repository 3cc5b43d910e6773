import logging
import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.getenv("PORT", 8000))
    print(f"Starting Boomerang Capture API on port {port}...")
    uvicorn.run("boomerang.main:app", host="0.0.0.0", port=port, reload=os.getenv("RELOAD", "") == "1")
