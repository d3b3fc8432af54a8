"""FastAPI main application"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from api import badges
from config import settings

CURRENT_VERSION = "1.0.0"

USAGE_TEXT = (
    "Welcome to the readme-contribs API!\n\n"
    "This service will generate an SVG badge with the avatars of GitHub contributors or sponsors.\n"
    "Just make a request to `/contributors/:owner/:repo` or `/sponsors/:author`\n"
    "(also `/stargazers`, `/forkers`, `/watchers` and `/followers`)\n\n"
    "Example usage (paste this in your README.md)\n"
    "\t![Sponsors](https://readme-contribs.as93.net/sponsors/lissy93)\n"
    "\t![Contributors](https://readme-contribs.as93.net/contributors/lissy93/dashy)\n"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for the application"""
    print(f"🚀 readme-contribs API starting on {settings.api_host}:{settings.api_port}")
    if not settings.github_token:
        print("⚠️ GITHUB_TOKEN not set, using unauthenticated GitHub requests")
    yield
    print("👋 readme-contribs API shutting down")

app = FastAPI(
    title="readme-contribs API",
    description="Avatar badges of GitHub contributors, stargazers, forkers, watchers, followers and sponsors",
    version=CURRENT_VERSION,
    lifespan=lifespan
)

# Badges are embedded from anywhere
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(badges.router, tags=["badges"])

@app.get("/", response_class=PlainTextResponse)
async def root():
    """Usage instructions"""
    return USAGE_TEXT

@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy", "version": CURRENT_VERSION}

if __name__ == "__main__":
    import uvicorn
    config = uvicorn.Config(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level
    )
    server = uvicorn.Server(config)
    server.run()
