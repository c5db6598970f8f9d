import os
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from macrosnap.routers import macro_router
from dotenv import load_dotenv


load_dotenv(dotenv_path=".env")
app = FastAPI(
    title="MacroSnap API",
    description="Food photo to macro-nutrient extraction (Gemini)",
    version="1.0.0"
)

# CORS
origins_env = os.getenv("FRONT_ORIGINS", "*")
allow_origins = [o.strip() for o in origins_env.split(",")] if origins_env != "*" else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(macro_router.router)

@app.get("/")
async def root():
    return {"message": "Backend running"}

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "3000")), reload=True)
