"""
Service starter: reads SERVICE env var and starts the appropriate handler group.
Used by Docker/Railway to run individual services or the unified gateway.
"""
import os
import sys
import uvicorn

SERVICE = os.environ.get("SERVICE", "gateway")
PORT = int(os.environ.get("PORT", 8080))

SERVICES = {
    "agent_deployment": ("functions.agent_deployment.main:app", 8001),
    "alert_processor": ("functions.alert_processor.main:app", 8002),
    "whale_scanner": ("functions.whale_scanner.main:app", 8003),
    "analytics_engine": ("functions.analytics_engine.main:app", 8004),
    "gateway": ("scripts.gateway:app", 8080),
}


def main():
    if SERVICE not in SERVICES:
        print(f"ERROR: Unknown service '{SERVICE}'. Options: {', '.join(SERVICES.keys())}")
        sys.exit(1)

    app_path, default_port = SERVICES[SERVICE]
    port = PORT if PORT != 8080 else default_port

    print(f"Starting {SERVICE} on port {port}...")
    uvicorn.run(
        app_path,
        host="0.0.0.0",
        port=port,
        log_level=os.environ.get("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
