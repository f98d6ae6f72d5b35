# backend/main.py
import os
from dotenv import load_dotenv
load_dotenv()

from backend.app import create_app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=os.getenv("TICKETRY_BIND_HOST", "0.0.0.0"),
        port=int(os.getenv("TICKETRY_BIND_PORT", "8000"))
    )
