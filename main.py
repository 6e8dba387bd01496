import os
import logging
from pathlib import Path
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

# .env 파일 로드 (설정 모듈보다 먼저)
env_path = Path(__file__).parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from controller.tool_policy_controller import router as tool_policy_router  # noqa: E402
from service.tool_policy.groups import group_names  # noqa: E402
from service.tool_policy.metrics import create_tool_execution_metrics  # noqa: E402
from service.tool_policy.settings import ToolPolicySettings  # noqa: E402

settings = ToolPolicySettings.from_env()

# 로깅 설정
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def print_step_banner(step: str, title: str, description: str = ""):
    """단계별 배너 출력"""
    banner = f"""
    ┌{'─' * 60}┐
    │  {step}: {title:<52}│
    {f'│  {description:<58}│' if description else ''}
    └{'─' * 60}┘
    """
    logger.info(banner)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기 관리"""
    print_step_banner("START", "TOOL POLICY STARTUP", "Loading tool access policy defaults")

    app.state.tool_policy_settings = settings
    app.state.tool_metrics = create_tool_execution_metrics()

    logger.info(f"   - Default profile: {settings.profile or '(none)'}")
    logger.info(f"   - Default allow: {settings.allow or '(none)'}")
    logger.info(f"   - Default alsoAllow: {settings.also_allow or '(none)'}")
    logger.info(f"   - Default deny: {settings.deny or '(none)'}")
    logger.info(f"   - Tool groups: {', '.join(group_names())}")
    logger.info(f"   - Tool timeout: {settings.tool_timeout_ms}ms")

    print_step_banner("READY", "TOOL POLICY READY", "Serving policy decisions")

    yield

    summary = app.state.tool_metrics.get_summary()
    if summary:
        logger.info("Tool execution summary:\n%s", summary)
    logger.info("Shutting down Tool Policy service")


# FastAPI 앱 생성
app = FastAPI(
    title="Tool Policy",
    description="Deny-first tool access policy engine",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """헬스체크"""
    metrics = getattr(app.state, "tool_metrics", None)
    return {
        "status": "healthy",
        "default_profile": settings.profile,
        "tracked_tools": len(metrics) if metrics is not None else 0,
    }


app.include_router(tool_policy_router)

if __name__ == "__main__":
    host = os.environ.get("APP_HOST", "0.0.0.0")
    port = int(os.environ.get("APP_PORT", "8000"))
    debug = os.environ.get("DEBUG_MODE", "false").lower() in ('true', '1', 'yes', 'on')

    print(f"Starting server on {host}:{port} (debug={debug})")

    if debug:
        # reload 모드에서는 import string 형식으로 전달
        uvicorn.run("main:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port, reload=False)
