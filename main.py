import uvicorn
from core.init_app import create_application

app = create_application()

if __name__ == "__main__":
    from core.config import settings
    print(f"Starting {settings.PROJECT_NAME}...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
